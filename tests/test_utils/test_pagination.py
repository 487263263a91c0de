"""
Tests for pagination utilities.

Tests cover:
- Pagination metadata calculation
- Paginated response creation
- Skip/offset calculation
- Clamping of out-of-range values
"""

import pytest
from datetime import datetime

from core.pagination import (
    calculate_pages,
    calculate_pagination_meta,
    clamp_items_per_page,
    clamp_page,
    create_paginated_response,
    calculate_skip,
    PaginationMeta,
    PaginationParams,
)


class TestPaginationMetaCalculation:
    """Tests for pagination metadata calculation."""

    def test_segunda_pagina(self):
        meta = calculate_pagination_meta(
            page=2,
            items_per_page=5,
            total_filtered_rows=12,
            total_rows=12,
        )

        assert meta.page == 2
        assert meta.items_per_page == 5
        assert meta.total_filtered_rows == 12
        assert meta.total_rows == 12
        assert meta.pages == 3

    def test_sin_resultados(self):
        meta = calculate_pagination_meta(page=1, items_per_page=10, total_filtered_rows=0, total_rows=7)
        assert meta.pages == 0
        assert meta.total_rows == 7

    @pytest.mark.parametrize("total,size,expected", [
        (0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (100, 3, 34),
    ])
    def test_calculate_pages(self, total, size, expected):
        assert calculate_pages(total, size) == expected

    def test_serializa_en_camel_case(self):
        meta = calculate_pagination_meta(page=1, items_per_page=10, total_filtered_rows=1, total_rows=3)
        assert meta.model_dump(by_alias=True) == {
            "page": 1,
            "itemsPerPage": 10,
            "totalFilteredRows": 1,
            "totalRows": 3,
            "pages": 1,
        }


class TestSkipAndClamp:
    @pytest.mark.parametrize("page,size,expected", [(1, 10, 0), (2, 5, 5), (3, 25, 50)])
    def test_calculate_skip(self, page, size, expected):
        assert calculate_skip(page, size) == expected

    @pytest.mark.parametrize("raw,expected", [(None, 1), (0, 1), (-4, 1), ("x", 1), (3, 3), ("2", 2)])
    def test_clamp_page(self, raw, expected):
        assert clamp_page(raw) == expected

    @pytest.mark.parametrize("raw,expected", [(None, 10), (0, 1), (-1, 1), ("x", 10), (25, 25)])
    def test_clamp_items_per_page(self, raw, expected):
        assert clamp_items_per_page(raw) == expected

    def test_params_aceptan_alias(self):
        params = PaginationParams(itemsPerPage=20, page=2)
        assert params.items_per_page == 20
        assert PaginationParams(items_per_page=15).items_per_page == 15


class TestPaginatedResponse:
    def test_estructura(self):
        meta = PaginationMeta(page=1, items_per_page=2, total_filtered_rows=3, total_rows=3, pages=2)
        response = create_paginated_response([{"id": "a"}, {"id": "b"}], meta)

        assert response["success"] is True
        assert response["data"] == [{"id": "a"}, {"id": "b"}]
        assert response["pagination"]["itemsPerPage"] == 2
        assert isinstance(response["timestamp"], datetime)
        assert "info" not in response

    def test_con_info(self):
        meta = PaginationMeta(page=1, items_per_page=2, total_filtered_rows=0, total_rows=0, pages=0)
        response = create_paginated_response([], meta, info={"limitApplied": True})
        assert response["info"] == {"limitApplied": True}
