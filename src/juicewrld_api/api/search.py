"""Query assembly for the paginated song listing.

All relevance logic lives on the server; this module only translates
offset/limit windows and filters into the listing endpoint's parameters.
"""

from collections.abc import Iterable

from loguru import logger

from ..errors import ValidationError

log = logger.bind(stage="search")


def page_for_offset(offset: int, limit: int) -> int:
    """Translate a zero-based offset into a 1-based page number.

    page = offset // limit + 1; a non-positive limit always means page 1.
    """
    if limit <= 0:
        return 1
    return offset // limit + 1


def build_search_params(
    query: str,
    category: str | None = None,
    year: int | None = None,
    tags: Iterable[str] | None = None,
    limit: int = 20,
    offset: int = 0,
) -> dict[str, str]:
    """Build the /songs/ query parameters for a search.

    Raises ValidationError for negative offset or limit.
    """
    if offset < 0:
        raise ValidationError(f"offset must be >= 0, got {offset}")
    if limit < 0:
        raise ValidationError(f"limit must be >= 0, got {limit}")

    params = {
        "search": query,
        "page_size": str(limit),
        "page": str(page_for_offset(offset, limit)),
    }
    if category:
        params["category"] = category
    if year is not None and year > 0:
        params["year"] = str(year)
    tag_list = [t for t in (tags or []) if t]
    if tag_list:
        params["tags"] = ",".join(tag_list)

    log.debug(f"build_search_params: {params}")
    return params


def build_listing_params(
    page: int = 0,
    page_size: int = 0,
    category: str | None = None,
    era: str | None = None,
    search: str | None = None,
) -> dict[str, str]:
    """Build /songs/ parameters, sending only the filters that are set."""
    params: dict[str, str] = {}
    if page > 0:
        params["page"] = str(page)
    if page_size > 0:
        params["page_size"] = str(page_size)
    if category:
        params["category"] = category
    if era:
        params["era"] = era
    if search:
        params["search"] = search
    return params
