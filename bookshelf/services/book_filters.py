"""Turn raw listing query parameters into a validated BookFilters."""

from collections.abc import Mapping

from pydantic import BaseModel, Field, ValidationError
from starlette.datastructures import QueryParams

from bookshelf.core.errors import ValidationFailed, field_errors
from bookshelf.repositories.book_query import DEFAULT_LIMIT, MAX_LIMIT, BookFilters

# (page - 1) * limit must fit a signed 64-bit OFFSET.
MAX_PAGE = (2**63 - 1) // MAX_LIMIT
MIN_YEAR = 0
MAX_YEAR = 9999

FILTER_MESSAGES = {
    "page": "Page must be a positive integer",
    "limit": f"Limit must be between 1 and {MAX_LIMIT}",
    "year": "Year must be a number",
}


class _ListingParams(BaseModel):
    """Bounds for the numeric listing parameters. Out-of-range values fail, never clamp."""

    page: int = Field(default=1, ge=1, le=MAX_PAGE)
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)
    year: int | None = Field(default=None, ge=MIN_YEAR, le=MAX_YEAR)


def _values(params: QueryParams | Mapping[str, str], key: str) -> list[str]:
    if isinstance(params, QueryParams):
        raw = params.getlist(key)
    elif key in params:
        raw = [params[key]]
    else:
        raw = []
    return [v.strip() for v in raw if v is not None and v.strip()]


def _scalar(params: QueryParams | Mapping[str, str], key: str) -> str | None:
    values = _values(params, key)
    return values[-1] if values else None


def _one_or_many(params: QueryParams | Mapping[str, str], key: str) -> str | list[str] | None:
    """A key given once stays scalar; repeated keys become a list. Blank repeats do not count."""
    values = _values(params, key)
    if not values:
        return None
    if len(values) > 1:
        return values
    return values[0]


def parse_book_filters(params: QueryParams | Mapping[str, str]) -> BookFilters:
    """
    Validate page/limit/year and collect search/genre/author.

    Raises ValidationFailed with one field error per bad parameter.
    """
    numeric: dict[str, str] = {}
    for key in ("page", "limit", "year"):
        value = _scalar(params, key)
        if value is not None:
            numeric[key] = value
    try:
        parsed = _ListingParams(**numeric)
    except ValidationError as e:
        raise ValidationFailed(
            "Validation failed",
            errors=field_errors(e.errors(), FILTER_MESSAGES),
        ) from e

    return BookFilters(
        search=_scalar(params, "search"),
        genre=_one_or_many(params, "genre"),
        author=_one_or_many(params, "author"),
        year=parsed.year,
        limit=parsed.limit,
        offset=(parsed.page - 1) * parsed.limit,
    )
