import pytest

from pmd_dx_api.db import queries
from pmd_dx_api.db.queries import build_count_query, build_list_query, detail_query
from pmd_dx_api.params import Pagination, SearchKey, SortType

BASE = "SELECT ability_id AS id, ability_name AS name FROM ability"


def _build(sort, page=1, per_page=50):
    return build_list_query(
        BASE, sort, "ability_id", "ability_name", Pagination(page=page, per_page=per_page)
    )


def test_default_ordering_is_id_ascending():
    assert _build(None) == f"{BASE} ORDER BY ability_id ASC LIMIT 50 OFFSET 0;"


@pytest.mark.parametrize(
    "sort, order_by",
    [
        (SortType.ID_ASC, "ability_id ASC"),
        (SortType.ID_DESC, "ability_id DESC"),
        (SortType.NAME_ASC, "ability_name ASC"),
        (SortType.NAME_DESC, "ability_name DESC"),
    ],
)
def test_named_orders(sort, order_by):
    assert f"ORDER BY {order_by} LIMIT" in _build(sort)


def test_limit_and_offset_follow_pagination():
    assert _build(None, page=3, per_page=20).endswith("LIMIT 20 OFFSET 40;")


def test_count_query_ignores_paging_and_sorting():
    assert build_count_query("ability") == "SELECT COUNT(*) FROM ability;"


def test_list_query_of_resource_table():
    assert queries.POKEMON.list_query == (
        "SELECT dex_number AS id, pokemon_name AS name FROM pokemon"
    )


def test_detail_query_by_id():
    sql, arg = detail_query(queries.ABILITY_DETAIL, queries.ABILITIES, SearchKey(id=4))

    assert "WHERE ability_id = $1::bigint" in sql
    assert arg == 4


def test_detail_query_by_name():
    sql, arg = detail_query(queries.MOVE_DETAIL, queries.MOVES, SearchKey(name="Vine Whip"))

    assert "WHERE move_name = $1" in sql
    assert arg == "Vine Whip"
