"""Decoding of flat LEFT JOIN result sets into one parent and its children.

A detail query returns one row per related child, every row repeating the
parent columns. When the parent has no children, the outer join yields a
single row whose child columns are all NULL.
"""
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from pmd_dx_api.errors import ResourceNotFoundError
from pmd_dx_api.params import SearchKey

P = TypeVar("P")
C = TypeVar("C")

Row = Mapping[str, Any]


def decode_composite(
    rows: Iterable[Row],
    *,
    resource_type: str,
    search_key: SearchKey,
    parent_key: str,
    build_parent: Callable[[Row], P],
    child_key: str,
    build_child: Callable[[Row], C],
) -> tuple[P, list[C]]:
    """Returns the parent built from the first row and one child per row.

    Parent columns of every row after the first are ignored. Only the first
    row can stand for "no match" on the outer join, so it is the only one
    whose child key is checked.

    Raises ResourceNotFoundError if there is no row or the parent key of the
    first row is NULL/zero.
    """
    iterator = iter(rows)
    first = next(iterator, None)
    if first is None or not first[parent_key]:
        raise ResourceNotFoundError(resource_type, search_key)

    parent = build_parent(first)
    children = []
    if first[child_key]:
        children.append(build_child(first))
    for row in iterator:
        children.append(build_child(row))
    return parent, children


def decode_children(rows: Iterable[Row], build_child: Callable[[Row], C]) -> list[C]:
    """Decodes a homogeneous child list (no parent columns, no NULL rows)."""
    return [build_child(row) for row in rows]
