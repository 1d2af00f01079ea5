"""Tests for api/search.py -- offset/limit translation and query assembly."""

import pytest

from juicewrld_api.api.search import build_listing_params, build_search_params, page_for_offset
from juicewrld_api.errors import ValidationError


class TestPageForOffset:
    @pytest.mark.parametrize(
        ("offset", "limit", "page"),
        [(0, 10, 1), (9, 10, 1), (10, 10, 2), (20, 10, 3), (25, 10, 3), (0, 0, 1), (50, -5, 1)],
    )
    def test_pages(self, offset, limit, page):
        assert page_for_offset(offset, limit) == page


class TestBuildSearchParams:
    def test_offset_limit(self):
        params = build_search_params("lucid", limit=10, offset=20)
        assert params == {"search": "lucid", "page": "3", "page_size": "10"}

    def test_tags_joined(self):
        params = build_search_params("x", tags=["a", "", "b"])
        assert params["tags"] == "a,b"

    def test_empty_filters_omitted(self):
        params = build_search_params("x", category="", year=0, tags=[])
        assert set(params) == {"search", "page", "page_size"}

    @pytest.mark.parametrize(("offset", "limit"), [(-1, 10), (0, -1)])
    def test_negative_rejected(self, offset, limit):
        with pytest.raises(ValidationError):
            build_search_params("x", limit=limit, offset=offset)


class TestBuildListingParams:
    def test_unset_filters_omitted(self):
        assert build_listing_params() == {}

    def test_all_filters(self):
        assert build_listing_params(2, 25, "released", "GBGR", "lucid") == {
            "page": "2",
            "page_size": "25",
            "category": "released",
            "era": "GBGR",
            "search": "lucid",
        }
