import pytest

from pmd_dx_api.db.rows import decode_children, decode_composite
from pmd_dx_api.errors import ResourceNotFoundError
from pmd_dx_api.params import SearchKey
from tests.rows import ability_row


def _decode(rows, search_key=SearchKey(id=1)):
    return decode_composite(
        rows,
        resource_type="ability",
        search_key=search_key,
        parent_key="ability_id",
        build_parent=lambda row: (row["ability_id"], row["ability_name"]),
        child_key="dex_number",
        build_child=lambda row: (row["dex_number"], row["pokemon_name"]),
    )


def test_parent_without_children():
    """A single row with NULL child columns means the parent has no children."""
    parent, children = _decode([ability_row()])

    assert parent == (1, "Overgrow")
    assert children == []


def test_children_are_kept_in_row_order():
    rows = [
        ability_row(1, "Bulbasaur"),
        ability_row(4, "Charmander"),
        ability_row(7, "Squirtle"),
    ]

    parent, children = _decode(rows)

    assert parent == (1, "Overgrow")
    assert children == [(1, "Bulbasaur"), (4, "Charmander"), (7, "Squirtle")]


def test_parent_columns_after_first_row_are_ignored():
    rows = [ability_row(1, "Bulbasaur"), ability_row(4, "Charmander", ability_id=99)]

    parent, children = _decode(rows)

    assert parent == (1, "Overgrow")
    assert len(children) == 2


def test_accepts_a_lazy_iterator():
    rows = iter([ability_row(1, "Bulbasaur"), ability_row(4, "Charmander")])

    _, children = _decode(rows)

    assert [c[1] for c in children] == ["Bulbasaur", "Charmander"]


def test_empty_result_is_not_found():
    with pytest.raises(ResourceNotFoundError) as excinfo:
        _decode([], SearchKey(id=9999))

    assert excinfo.value.resource_type == "ability"
    assert str(excinfo.value) == "resource of type 'ability' with ID '9999' not found"


def test_null_parent_key_is_not_found():
    row = ability_row()
    row["ability_id"] = None

    with pytest.raises(ResourceNotFoundError) as excinfo:
        _decode([row], SearchKey(name="Levitate"))

    assert str(excinfo.value) == "resource of type 'ability' with name 'Levitate' not found"


def test_decode_children():
    rows = [{"type_id": 1, "type_name": "Normal"}, {"type_id": 5, "type_name": "Grass"}]

    assert decode_children(rows, lambda row: row["type_name"]) == ["Normal", "Grass"]
    assert decode_children([], lambda row: row) == []
