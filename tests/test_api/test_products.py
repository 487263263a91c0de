"""
Tests para los endpoints de productos.

Los productos sólo exigen autenticación, así que aquí se prueba sobre
todo el contrato común de los listados: paginación, límites, filtros,
búsqueda, proyección y el ciclo de soft delete.
"""

import json

import pytest
from fastapi import status

from tests.conftest import assert_valid_uuid


class TestListProducts:
    """Tests del listado GET /products/"""

    def test_listado_sin_page_aplica_limite(self, client, auth_headers_user, products):
        response = client.get("/products/", headers=auth_headers_user)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["success"] is True
        assert len(body["data"]) == 12
        assert "pagination" not in body
        assert body["info"]["totalRows"] == 12
        assert body["info"]["limit"] == 100
        assert body["info"]["limitApplied"] is True
        assert "page" in body["info"]["message"]

    def test_listado_paginado(self, client, auth_headers_user, products):
        response = client.get(
            "/products/",
            params={"page": 2, "itemsPerPage": 5, "sortBy": "price"},
            headers=auth_headers_user,
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert [item["price"] for item in body["data"]] == [60, 70, 80, 90, 100]
        assert body["pagination"] == {
            "page": 2,
            "itemsPerPage": 5,
            "totalFilteredRows": 12,
            "totalRows": 12,
            "pages": 3,
        }

    def test_items_per_page_con_guiones(self, client, auth_headers_user, products):
        response = client.get(
            "/products/",
            params={"page": 1, "items-per-page": 4},
            headers=auth_headers_user,
        )
        assert response.json()["pagination"]["itemsPerPage"] == 4

    def test_items_per_page_excede_maximo(self, client, auth_headers_user, products):
        response = client.get(
            "/products/",
            params={"page": 1, "itemsPerPage": 150},
            headers=auth_headers_user,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        detail = response.json()["detail"]
        assert detail["message"] == (
            "El parámetro itemsPerPage no puede superar 100. Valor solicitado: 150"
        )
        assert detail["details"]["field"] == "itemsPerPage"

    def test_orden_descendente(self, client, auth_headers_user, products):
        response = client.get(
            "/products/",
            params={"page": 1, "itemsPerPage": 2, "sortBy": '["price"]', "sortDesc": "[true]"},
            headers=auth_headers_user,
        )
        assert [item["name"] for item in response.json()["data"]] == ["Producto 12", "Producto 11"]

    def test_filtro_avanzado(self, client, auth_headers_user, products):
        filters = json.dumps({"price": {"$gte": 100}})
        response = client.get(
            "/products/",
            params={"page": 1, "filters": filters},
            headers=auth_headers_user,
        )

        body = response.json()
        assert body["pagination"]["totalFilteredRows"] == 3
        assert body["pagination"]["totalRows"] == 12

    def test_filtro_con_operadores_legibles(self, client, auth_headers_user, products):
        filters = json.dumps({"name": {"like": "producto 0"}, "active": {"=": True}})
        response = client.get(
            "/products/",
            params={"page": 1, "filters": filters},
            headers=auth_headers_user,
        )
        # pares del 2 al 8
        assert response.json()["pagination"]["totalFilteredRows"] == 4

    def test_filtro_invalido_se_ignora(self, client, auth_headers_user, products):
        response = client.get(
            "/products/",
            params={"page": 1, "filters": '{"price": '},
            headers=auth_headers_user,
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["pagination"]["totalFilteredRows"] == 12

    @pytest.mark.parametrize("filters,expected", [
        ({"price": {"$gt": [1, 2]}}, 12),
        ({"price": {"$eq": "abc"}}, 0),
        ({"price": {">=": "110"}}, 2),
        ({"active": {"$eq": "quizas"}}, 0),
    ])
    def test_filtro_con_tipo_incorrecto(self, client, auth_headers_user, products, filters, expected):
        response = client.get(
            "/products/",
            params={"page": 1, "filters": json.dumps(filters)},
            headers=auth_headers_user,
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["pagination"]["totalFilteredRows"] == expected

    def test_filtro_no_puede_ver_eliminados(self, client, auth_headers_user, products):
        client.patch(f"/products/{products[0].id}/soft-delete", headers=auth_headers_user)

        response = client.get(
            "/products/",
            params={"page": 1, "filters": json.dumps({"is_deleted": True})},
            headers=auth_headers_user,
        )
        assert response.json()["pagination"]["totalFilteredRows"] == 11

    def test_filtro_operador_peligroso(self, client, auth_headers_user, products):
        filters = json.dumps({"$where": "sleep(1000)", "name": "Producto 05"})
        response = client.get(
            "/products/",
            params={"page": 1, "filters": filters},
            headers=auth_headers_user,
        )
        assert response.json()["pagination"]["totalFilteredRows"] == 1

    def test_simple_search(self, client, auth_headers_user, products):
        search = json.dumps({"search": "PRODUCTO 1", "fields": ["name"]})
        response = client.get(
            "/products/",
            params={"page": 1, "simpleSearch": search},
            headers=auth_headers_user,
        )

        body = response.json()
        assert sorted(item["name"] for item in body["data"]) == [
            "Producto 10", "Producto 11", "Producto 12",
        ]
        assert body["pagination"]["totalRows"] == 12

    @pytest.mark.parametrize("raw", ['{"search":', '{"search": "x"}', '{"search": "", "fields": ["name"]}'])
    def test_simple_search_invalido(self, client, auth_headers_user, products, raw):
        response = client.get(
            "/products/",
            params={"page": 1, "simpleSearch": raw},
            headers=auth_headers_user,
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"]["details"]["field"] == "simpleSearch"

    def test_proyeccion(self, client, auth_headers_user, products):
        response = client.get(
            "/products/",
            params={"page": 1, "itemsPerPage": 3, "fields": "name"},
            headers=auth_headers_user,
        )

        for item in response.json()["data"]:
            assert set(item) == {"id", "name"}

    def test_requiere_autenticacion(self, client, products):
        response = client.get("/products/")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestSearchProducts:
    def test_busqueda(self, client, auth_headers_user, products):
        response = client.get(
            "/products/search",
            params={"q": "producto 0", "page": 1, "itemsPerPage": 5},
            headers=auth_headers_user,
        )

        body = response.json()
        assert response.status_code == status.HTTP_200_OK
        assert body["pagination"]["totalFilteredRows"] == 9
        assert len(body["data"]) == 5

    def test_busqueda_sin_termino(self, client, auth_headers_user):
        response = client.get("/products/search", params={"q": ""}, headers=auth_headers_user)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestCreateProduct:
    """Tests para POST /products/"""

    def test_create_success(self, client, auth_headers_user, basic_user, product_data):
        response = client.post("/products/", json=product_data, headers=auth_headers_user)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert assert_valid_uuid(data["id"])
        assert data["name"] == product_data["name"]
        assert data["price"] == product_data["price"]
        assert data["created_by"] == basic_user.id
        assert data["is_deleted"] is False

    def test_create_duplicado(self, client, auth_headers_user, product_data):
        client.post("/products/", json=product_data, headers=auth_headers_user)
        response = client.post("/products/", json=product_data, headers=auth_headers_user)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "duplicado" in response.json()["detail"]

    def test_create_precio_negativo(self, client, auth_headers_user, product_data):
        product_data["price"] = -1
        response = client.post("/products/", json=product_data, headers=auth_headers_user)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestGetProduct:
    def test_get(self, client, auth_headers_user, products):
        response = client.get(f"/products/{products[0].id}", headers=auth_headers_user)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == "Producto 01"

    def test_get_not_found(self, client, auth_headers_user):
        response = client.get(
            "/products/00000000-0000-0000-0000-000000000000",
            headers=auth_headers_user,
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_get_id_invalido(self, client, auth_headers_user):
        response = client.get("/products/no-es-uuid", headers=auth_headers_user)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestUpdateProduct:
    def test_update_parcial(self, client, auth_headers_user, products):
        response = client.put(
            f"/products/{products[0].id}",
            json={"price": 99.5},
            headers=auth_headers_user,
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["price"] == 99.5
        assert data["name"] == "Producto 01"

    def test_update_nombre_de_otro_producto(self, client, auth_headers_user, products):
        response = client.put(
            f"/products/{products[0].id}",
            json={"name": "Producto 02"},
            headers=auth_headers_user,
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_eliminado(self, client, auth_headers_user, products):
        client.patch(f"/products/{products[0].id}/soft-delete", headers=auth_headers_user)

        response = client.put(
            f"/products/{products[0].id}",
            json={"price": 1},
            headers=auth_headers_user,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "El registro está eliminado y no puede ser utilizado"


class TestDeleteProduct:
    def test_soft_delete_y_restore(self, client, auth_headers_user, products):
        product_id = products[0].id

        response = client.patch(f"/products/{product_id}/soft-delete", headers=auth_headers_user)
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["soft_delete"] is True
        assert body["deleted_id"] == product_id
        assert body["message"] == "Producto eliminado correctamente"

        # el detalle sigue disponible
        detail = client.get(f"/products/{product_id}", headers=auth_headers_user).json()
        assert detail["is_deleted"] is True

        listing = client.get("/products/", headers=auth_headers_user).json()
        assert listing["info"]["totalRows"] == 11

        response = client.patch(f"/products/{product_id}/restore", headers=auth_headers_user)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_deleted"] is False

    def test_soft_delete_dos_veces(self, client, auth_headers_user, products):
        client.patch(f"/products/{products[0].id}/soft-delete", headers=auth_headers_user)
        response = client.patch(f"/products/{products[0].id}/soft-delete", headers=auth_headers_user)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "El registro ya está eliminado"

    def test_restore_no_eliminado(self, client, auth_headers_user, products):
        response = client.patch(f"/products/{products[0].id}/restore", headers=auth_headers_user)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "El registro no está eliminado"

    def test_hard_delete(self, client, auth_headers_user, products):
        response = client.delete(f"/products/{products[0].id}", headers=auth_headers_user)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["soft_delete"] is False
        assert response.json()["message"] == "Producto eliminado permanentemente"

        response = client.get(f"/products/{products[0].id}", headers=auth_headers_user)
        assert response.status_code == status.HTTP_404_NOT_FOUND
