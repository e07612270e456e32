"""Parsing of path and query parameters.

Malformed optional parameters are never rejected: an unknown sort token,
non-numeric pagination values or an empty ``fields`` list silently fall back
to their defaults.
"""
import re
from enum import Enum

from pydantic import BaseModel, Field

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 50

_INTEGER = re.compile(r"[+-]?\d+")

# Range of a Postgres bigint; anything outside it cannot be an ID or a LIMIT/OFFSET
MAX_INT64 = 2**63 - 1
MIN_INT64 = -(2**63)


class SortType(str, Enum):
    ID_ASC = "id_asc"
    ID_DESC = "id_desc"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"


class SearchKey(BaseModel):
    """Either an ID or a normalized name. Exactly one of the two is set."""
    id: int | None = None
    name: str | None = None

    @property
    def search_type(self) -> str:
        return "ID" if self.id is not None else "name"

    @property
    def value(self) -> int | str:
        return self.id if self.id is not None else self.name


class Pagination(BaseModel):
    page: int = Field(default=DEFAULT_PAGE, ge=1)
    per_page: int = Field(default=DEFAULT_PER_PAGE, ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


class FieldFilter(BaseModel):
    enabled: bool = False
    allowed_keys: frozenset[str] = frozenset()


class ListParams(BaseModel):
    sort: SortType | None = None
    pagination: Pagination = Field(default_factory=Pagination)


class RequestContext(BaseModel):
    """Parsed request parameters handed explicitly to the handlers."""
    field_filter: FieldFilter = Field(default_factory=FieldFilter)
    list_params: ListParams = Field(default_factory=ListParams)


def parse_search_key(raw: str) -> SearchKey:
    """Builds a by-ID key for integer input, otherwise a by-name key.

    Names are lower-cased and then title-cased here rather than in SQL so the
    name column indexes stay usable.
    """
    value = _parse_int64(raw)
    if value is not None:
        return SearchKey(id=value)
    return SearchKey(name=title_case(raw.lower()))


def _parse_int64(raw: str | None) -> int | None:
    if raw is None or not _INTEGER.fullmatch(raw):
        return None
    value = int(raw)
    return value if MIN_INT64 <= value <= MAX_INT64 else None


def _is_word_separator(char: str) -> bool:
    if char.isascii():
        return not (char.isalnum() or char == "_")
    if char.isalpha() or char.isdigit():
        return False
    return char.isspace()


def title_case(name: str) -> str:
    """Upper-cases the first letter of every word.

    Unlike str.title(), digits and underscores do not end a word, so "2nd_x"
    stays "2nd_x" and "porygon2z" becomes "Porygon2z".
    """
    chars = []
    previous = " "
    for char in name:
        chars.append(char.upper() if _is_word_separator(previous) else char)
        previous = char
    return "".join(chars)


def parse_sort(raw: str | None) -> SortType | None:
    try:
        return SortType(raw)
    except ValueError:
        return None


def _positive_int(raw: str | None, default: int) -> int:
    value = _parse_int64(raw)
    return value if value is not None and value > 0 else default


def parse_pagination(page: str | None, per_page: str | None) -> Pagination:
    page_number = _positive_int(page, DEFAULT_PAGE)
    page_size = _positive_int(per_page, DEFAULT_PER_PAGE)
    if (page_number - 1) * page_size > MAX_INT64:
        page_number = DEFAULT_PAGE
    return Pagination(page=page_number, per_page=page_size)


def parse_field_filter(raw: str | None) -> FieldFilter:
    if not raw:
        return FieldFilter()
    names = [name for name in raw.split(",") if name]
    if not names:
        return FieldFilter()
    return FieldFilter(enabled=True, allowed_keys=frozenset(names))
