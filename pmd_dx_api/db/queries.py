"""SQL text for every resource plus the list query builder.

Detail templates carry a ``{condition}`` placeholder which is replaced by a
match on the table's ID or name column depending on the search key. The
search value is always passed as the ``$1`` argument.
"""
from dataclasses import dataclass

from pmd_dx_api.params import Pagination, SearchKey, SortType


@dataclass(frozen=True)
class ResourceTable:
    """Maps an API resource path onto its table."""
    path: str
    resource_type: str
    table: str
    id_column: str
    name_column: str

    @property
    def list_query(self) -> str:
        return f"SELECT {self.id_column} AS id, {self.name_column} AS name FROM {self.table}"

    def search_condition(self, search_key: SearchKey) -> str:
        # bigint accepts any ID the client can send, whatever the column width
        if search_key.id is not None:
            return f"{self.id_column} = $1::bigint"
        return f"{self.name_column} = $1"


ABILITIES = ResourceTable("abilities", "ability", "ability", "ability_id", "ability_name")
CAMPS = ResourceTable("camps", "camp", "camp", "camp_id", "camp_name")
DUNGEONS = ResourceTable("dungeons", "dungeon", "dungeon", "dungeon_id", "dungeon_name")
MOVES = ResourceTable("moves", "move", "attack_move", "move_id", "move_name")
POKEMON = ResourceTable("pokemon", "pokemon", "pokemon", "dex_number", "pokemon_name")
TYPES = ResourceTable("types", "type", "pokemon_type", "type_id", "type_name")


def build_list_query(
    base_query: str,
    sort: SortType | None,
    id_column: str,
    name_column: str,
    pagination: Pagination,
) -> str:
    """Appends a deterministic ORDER BY and LIMIT/OFFSET to base_query."""
    if sort in (SortType.NAME_ASC, SortType.NAME_DESC):
        column = name_column
    else:
        column = id_column
    direction = "DESC" if sort in (SortType.ID_DESC, SortType.NAME_DESC) else "ASC"
    return (
        f"{base_query} ORDER BY {column} {direction} "
        f"LIMIT {pagination.per_page} OFFSET {pagination.offset};"
    )


def build_count_query(table: str) -> str:
    return f"SELECT COUNT(*) FROM {table};"


def detail_query(template: str, resource: ResourceTable, search_key: SearchKey) -> tuple[str, int | str]:
    return template.format(condition=resource.search_condition(search_key)), search_key.value


ABILITY_DETAIL = """
SELECT A.ability_id, A.ability_name, A.description, P.dex_number, P.pokemon_name
FROM (SELECT * FROM ability WHERE {condition}) A
LEFT JOIN pokemon_has_ability PA ON A.ability_id = PA.ability_id
LEFT JOIN pokemon P ON PA.dex_number = P.dex_number
ORDER BY P.dex_number;
"""

CAMP_DETAIL = """
SELECT C.camp_id, C.camp_name, C.unlock_type, C.cost, C.description,
       P.dex_number, P.pokemon_name
FROM (SELECT * FROM camp WHERE {condition}) C
LEFT JOIN pokemon P ON C.camp_id = P.camp_id
ORDER BY P.dex_number;
"""

DUNGEON_DETAIL = """
SELECT D.dungeon_id, D.dungeon_name, D.levels, D.start_level, D.team_size,
       D.items_allowed, D.pokemon_joining, D.map_visible,
       DP.super_enemy, P.dex_number, P.pokemon_name
FROM (SELECT * FROM dungeon WHERE {condition}) D
LEFT JOIN encountered_in DP ON D.dungeon_id = DP.dungeon_id
LEFT JOIN pokemon P ON DP.dex_number = P.dex_number
ORDER BY P.dex_number;
"""

MOVE_DETAIL = """
SELECT M.move_id, M.move_name, M.category, M.move_range, M.target, M.initial_pp,
       M.initial_power, M.accuracy, M.description, T.type_id, T.type_name,
       MP.learn_type, MP.cost, MP.level, P.dex_number, P.pokemon_name
FROM (SELECT * FROM attack_move WHERE {condition}) M
INNER JOIN pokemon_type T ON M.type_id = T.type_id
LEFT JOIN learns MP ON MP.move_id = M.move_id
LEFT JOIN pokemon P ON MP.dex_number = P.dex_number
ORDER BY P.dex_number;
"""

TYPE_DETAIL = """
SELECT AT.type_id, AT.type_name, TT.interaction,
       DT.type_id AS defender_id, DT.type_name AS defender_name
FROM (SELECT * FROM pokemon_type WHERE {condition}) AT
LEFT JOIN effectiveness TT ON AT.type_id = TT.attacker
LEFT JOIN pokemon_type DT ON TT.defender = DT.type_id
ORDER BY DT.type_id;
"""

# The pokemon detail is assembled from four independent queries.

POKEMON_DETAIL = """
SELECT P.dex_number, P.pokemon_name, P.evolution_stage, P.evolve_condition,
       P.evolve_level, P.evolve_crystals, P.classification, C.camp_id, C.camp_name,
       D.dungeon_id, D.dungeon_name, PD.super_enemy
FROM (SELECT * FROM pokemon WHERE {condition}) P
INNER JOIN camp C ON P.camp_id = C.camp_id
LEFT JOIN encountered_in PD ON P.dex_number = PD.dex_number
LEFT JOIN dungeon D ON PD.dungeon_id = D.dungeon_id
ORDER BY D.dungeon_id;
"""

POKEMON_TYPES = """
SELECT T.type_id, T.type_name
FROM (SELECT dex_number FROM pokemon WHERE {condition}) P
INNER JOIN pokemon_has_type PT ON P.dex_number = PT.dex_number
INNER JOIN pokemon_type T ON PT.type_id = T.type_id
ORDER BY T.type_id;
"""

POKEMON_ABILITIES = """
SELECT A.ability_id, A.ability_name
FROM (SELECT dex_number FROM pokemon WHERE {condition}) P
INNER JOIN pokemon_has_ability PA ON P.dex_number = PA.dex_number
INNER JOIN ability A ON PA.ability_id = A.ability_id
ORDER BY A.ability_id;
"""

POKEMON_MOVES = """
SELECT M.move_id, M.move_name, PM.learn_type, PM.cost, PM.level
FROM (SELECT dex_number FROM pokemon WHERE {condition}) P
INNER JOIN learns PM ON P.dex_number = PM.dex_number
INNER JOIN attack_move M ON PM.move_id = M.move_id
ORDER BY M.move_id;
"""
