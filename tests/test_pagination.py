"""
Test suite for pagination helpers.
"""

import pytest

from app.crud.pagination import skip_for
from app.schemas.common import Page, total_pages


class TestTotalPages:
    @pytest.mark.parametrize(
        "total,limit,expected",
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (25, 10, 3), (100, 20, 5)],
    )
    def test_total_pages(self, total, limit, expected):
        assert total_pages(total, limit) == expected


class TestSkip:
    def test_first_page(self):
        assert skip_for(1, 20) == 0

    def test_third_page(self):
        assert skip_for(3, 10) == 20


class TestPageEnvelope:
    def test_camel_case_dump(self):
        page = Page[int].build([1, 2], total=12, page=2, limit=10)
        assert page.model_dump(by_alias=True) == {
            "items": [1, 2],
            "total": 12,
            "page": 2,
            "limit": 10,
            "totalPages": 2,
        }
