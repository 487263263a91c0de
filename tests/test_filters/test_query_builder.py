"""
Tests for the filter DSL translation, the filter tree and the advanced
filter parser.
"""

import logging
from datetime import datetime

import pytest

from core.exceptions import FilterSyntaxError
from core.filter_sanitizer import SanitizerOptions
from core.filter_tree import And, Comparison, ComparisonOp, Not, Or, build_filter_tree, referenced_fields
from core.filtering import build_total_rows_filter, merge_filters, parse_advanced_filters
from core.query_builder import QueryBuilder


@pytest.fixture
def builder() -> QueryBuilder:
    return QueryBuilder()


class TestQueryBuilder:
    """Traducción del DSL al dialecto nativo."""

    def test_valor_simple_es_igualdad(self, builder):
        assert builder.build({"name": "a"}) == {"name": {"$eq": "a"}}

    def test_lista_es_pertenencia(self, builder):
        assert builder.build({"price": [10, 20]}) == {"price": {"$in": [10, 20]}}

    @pytest.mark.parametrize("op,native", [
        ("=", "$eq"), ("!=", "$ne"), ("<>", "$ne"), (">", "$gt"),
        (">=", "$gte"), ("<", "$lt"), ("<=", "$lte"), ("GTE", "$gte"),
    ])
    def test_operadores_simples(self, builder, op, native):
        assert builder.build({"price": {op: 5}}) == {"price": {native: 5}}

    def test_like_y_not_like(self, builder):
        assert builder.build({"name": {"like": "caf"}}) == {"name": {"$contains": "caf"}}
        assert builder.build({"name": {"not like": "caf"}}) == {
            "name": {"$not": {"$contains": "caf"}}
        }

    def test_between(self, builder):
        assert builder.build({"price": {"between": [10, 20]}}) == {
            "price": {"$gte": 10, "$lte": 20}
        }

    @pytest.mark.parametrize("operand", [[10], [20, 10], [None, 5], "10,20"])
    def test_between_invalido(self, builder, operand):
        with pytest.raises(FilterSyntaxError):
            builder.build({"price": {"between": operand}})

    def test_fechas(self, builder):
        result = builder.build({"created_at": {">*date": "2024-01-05", "<*date": "2024-02-01T10:00:00"}})
        assert result == {
            "created_at": {
                "$gt": datetime(2024, 1, 5),
                "$lt": datetime(2024, 2, 1, 10, 0, 0),
            }
        }

    def test_fecha_invalida(self, builder):
        with pytest.raises(FilterSyntaxError):
            builder.build({"created_at": {">*date": "no es una fecha"}})

    def test_nulos_y_exists(self, builder):
        assert builder.build({"email": {"is null": True}}) == {"email": {"$eq": None}}
        assert builder.build({"email": {"is not null": True}}) == {"email": {"$ne": None}}
        assert builder.build({"email": {"exists": False}}) == {"email": {"$exists": False}}
        with pytest.raises(FilterSyntaxError):
            builder.build({"email": {"exists": "yes"}})

    def test_operadores_logicos(self, builder):
        result = builder.build({"or": [{"name": "a"}, {"price": {">=": 2}}], "not": {"active": True}})
        assert result == {
            "$or": [{"name": {"$eq": "a"}}, {"price": {"$gte": 2}}],
            "$nor": [{"active": {"$eq": True}}],
        }

    def test_in_con_escalar(self, builder):
        assert builder.build({"price": {"$in": 10}}) == {"price": {"$in": [10]}}
        assert builder.build({"price": {"not in": [1, 2]}}) == {"price": {"$nin": [1, 2]}}

    def test_operadores_desconocidos(self, builder):
        with pytest.raises(FilterSyntaxError):
            builder.build({"name": {"startswith": "a"}})
        with pytest.raises(FilterSyntaxError):
            builder.build({"$where": "1"})
        with pytest.raises(FilterSyntaxError):
            builder.build({"name": {}})


class TestFilterTree:
    def test_filtro_vacio_coincide_con_todo(self):
        assert build_filter_tree({}) == And(())

    def test_igualdad(self):
        assert build_filter_tree({"name": "a"}) == Comparison("name", ComparisonOp.EQ, "a")

    def test_varios_operadores_en_un_campo(self):
        assert build_filter_tree({"price": {"$gt": 1, "$lt": 5}}) == And((
            Comparison("price", ComparisonOp.GT, 1),
            Comparison("price", ComparisonOp.LT, 5),
        ))

    def test_nor(self):
        assert build_filter_tree({"$nor": [{"name": {"$eq": "a"}}]}) == Not(Or((
            Comparison("name", ComparisonOp.EQ, "a"),
        )))

    def test_regex_con_opciones(self):
        node = build_filter_tree({"name": {"$regex": "^pro", "$options": "i"}})
        assert node == Comparison("name", ComparisonOp.REGEX, "^pro", "i")

    def test_in_usa_tuplas(self):
        assert build_filter_tree({"price": {"$in": [1, 2]}}) == Comparison(
            "price", ComparisonOp.IN, (1, 2)
        )

    def test_subdocumento_no_soportado(self):
        with pytest.raises(FilterSyntaxError):
            build_filter_tree({"storage": {"bucket": "media"}})

    def test_campos_referenciados(self):
        tree = build_filter_tree({"$or": [{"name": "a"}, {"price": {"$gt": 1}}], "active": True})
        assert referenced_fields(tree) == {"name", "price", "active"}


class TestParseAdvancedFilters:
    def test_vacio(self):
        assert parse_advanced_filters(None) == {}
        assert parse_advanced_filters("   ") == {}

    def test_json_invalido_no_registra_el_texto(self, caplog):
        with caplog.at_level(logging.ERROR):
            result = parse_advanced_filters('{"name": "secreto"', entity_name="Producto")

        assert result == {}
        assert caplog.records
        assert all("secreto" not in r.getMessage() for r in caplog.records)

    def test_json_que_no_es_objeto(self):
        assert parse_advanced_filters("[1, 2]") == {}

    def test_sanea_y_traduce(self):
        result = parse_advanced_filters('{"name": {"like": "Pro"}, "is_deleted": true}')
        assert result == {"name": {"$contains": "Pro"}}

    def test_sin_saneo_para_filtros_del_backend(self):
        result = parse_advanced_filters('{"is_deleted": true}', should_sanitize=False)
        assert result == {"is_deleted": {"$eq": True}}

    def test_sintaxis_invalida_se_degrada(self):
        assert parse_advanced_filters('{"price": {"between": [5]}}') == {}

    def test_no_modifica_las_opciones_recibidas(self):
        options = SanitizerOptions(custom_protected_fields=["price"])
        result = parse_advanced_filters(
            '{"price": 10, "name": "a"}',
            options=options,
            log=logging.getLogger("tests.parser"),
        )
        assert result == {"name": {"$eq": "a"}}
        assert options.logger is None


class TestMergeFilters:
    def test_precedencia(self):
        combined = merge_filters(
            {"is_deleted": False},
            {"name": {"$eq": "base"}},
            {"name": {"$eq": "avanzado"}, "price": {"$gt": 1}},
            {"is_deleted": True},
        )
        assert combined == {
            "is_deleted": True,
            "name": {"$eq": "avanzado"},
            "price": {"$gt": 1},
        }

    def test_capas_vacias(self):
        assert merge_filters({"is_deleted": False}, None, {}, None) == {"is_deleted": False}

    def test_filtro_total_rows(self):
        combined = {"is_deleted": True, "name": {"$eq": "a"}, "user_id": "u1"}
        result = build_total_rows_filter({"is_deleted": False}, combined, {"user_id": "u1"})
        assert result == {"is_deleted": True, "user_id": "u1"}

    def test_filtro_total_rows_sin_contextual(self):
        result = build_total_rows_filter({"is_deleted": False}, {"is_deleted": False, "name": "a"}, None)
        assert result == {"is_deleted": False}
