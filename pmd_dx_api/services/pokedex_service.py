from pmd_dx_api.clients.database_client import DatabaseClient, SubQuery
from pmd_dx_api.db import queries
from pmd_dx_api.db.queries import ResourceTable, build_list_query, detail_query
from pmd_dx_api.db.rows import Row, decode_children, decode_composite
from pmd_dx_api.models import (
    Ability,
    AbilityResponse,
    Camp,
    CampResponse,
    Dungeon,
    DungeonPokemon,
    DungeonPokemonURL,
    DungeonResponse,
    Move,
    MovePokemon,
    MovePokemonURL,
    MoveResponse,
    NamedResource,
    Pokemon,
    PokemonDungeon,
    PokemonDungeonURL,
    PokemonMove,
    PokemonMoveURL,
    PokemonResponse,
    PokemonType,
    PokemonTypeResponse,
    ResourceListResponse,
    TypeInteraction,
    TypeInteractionURL,
)
from pmd_dx_api.params import ListParams, SearchKey


# --- Row builders: one per column group ---

def _pokemon_ref(row: Row) -> NamedResource:
    return NamedResource(id=row["dex_number"], name=row["pokemon_name"])


def _ability(row: Row) -> Ability:
    return Ability(id=row["ability_id"], name=row["ability_name"], description=row["description"])


def _ability_ref(row: Row) -> NamedResource:
    return NamedResource(id=row["ability_id"], name=row["ability_name"])


def _camp(row: Row) -> Camp:
    return Camp(
        id=row["camp_id"],
        name=row["camp_name"],
        description=row["description"],
        unlock_type=row["unlock_type"],
        cost=row["cost"],
    )


def _dungeon(row: Row) -> Dungeon:
    return Dungeon(
        id=row["dungeon_id"],
        name=row["dungeon_name"],
        levels=row["levels"],
        start_level=row["start_level"],
        team_size=row["team_size"],
        items_allowed=row["items_allowed"],
        pokemon_joining=row["pokemon_joining"],
        map_visible=row["map_visible"],
    )


def _dungeon_pokemon(row: Row) -> DungeonPokemon:
    return DungeonPokemon(pokemon=_pokemon_ref(row), is_super=row["super_enemy"])


def _move_with_type(row: Row) -> tuple[Move, NamedResource]:
    move = Move(
        id=row["move_id"],
        name=row["move_name"],
        category=row["category"],
        range=row["move_range"],
        target=row["target"],
        initial_pp=row["initial_pp"],
        initial_power=row["initial_power"],
        accuracy=row["accuracy"],
        description=row["description"],
    )
    return move, NamedResource(id=row["type_id"], name=row["type_name"])


def _move_pokemon(row: Row) -> MovePokemon:
    return MovePokemon(
        pokemon=_pokemon_ref(row), method=row["learn_type"], cost=row["cost"], level=row["level"]
    )


def _type(row: Row) -> PokemonType:
    return PokemonType(id=row["type_id"], name=row["type_name"])


def _type_ref(row: Row) -> NamedResource:
    return NamedResource(id=row["type_id"], name=row["type_name"])


def _type_interaction(row: Row) -> TypeInteraction:
    return TypeInteraction(
        defender=NamedResource(id=row["defender_id"], name=row["defender_name"]),
        interaction=row["interaction"],
    )


def _pokemon_with_camp(row: Row) -> tuple[Pokemon, NamedResource]:
    pokemon = Pokemon(
        id=row["dex_number"],
        name=row["pokemon_name"],
        classification=row["classification"],
        evolution_stage=row["evolution_stage"],
        evolve_condition=row["evolve_condition"],
        evolve_level=row["evolve_level"],
        evolve_crystals=row["evolve_crystals"],
    )
    return pokemon, NamedResource(id=row["camp_id"], name=row["camp_name"])


def _pokemon_dungeon(row: Row) -> PokemonDungeon:
    return PokemonDungeon(
        dungeon=NamedResource(id=row["dungeon_id"], name=row["dungeon_name"]),
        is_super=row["super_enemy"],
    )


def _pokemon_move(row: Row) -> PokemonMove:
    return PokemonMove(
        move=NamedResource(id=row["move_id"], name=row["move_name"]),
        method=row["learn_type"],
        cost=row["cost"],
        level=row["level"],
    )


class PokedexService:
    """Assembles list and detail responses from database rows.

    Every method takes the base URL of the instance so that foreign keys can
    be rendered as ``{name, url}`` references.
    """

    def __init__(self, database: DatabaseClient):
        self._database = database

    async def _fetch_detail(self, template: str, resource: ResourceTable, search_key: SearchKey):
        sql, arg = detail_query(template, resource, search_key)
        return await self._database.fetch(sql, arg, label=f"{resource.resource_type} detail")

    def _decode(self, rows, resource: ResourceTable, search_key: SearchKey, **columns):
        return decode_composite(
            rows, resource_type=resource.resource_type, search_key=search_key, **columns
        )

    async def get_resource_list(
        self, resource: ResourceTable, params: ListParams, base_url: str
    ) -> ResourceListResponse:
        """Returns one page of {name, url} references plus the total row count."""
        total = await self._database.count(resource.table)
        sql = build_list_query(
            resource.list_query,
            params.sort,
            resource.id_column,
            resource.name_column,
            params.pagination,
        )
        rows = await self._database.fetch(sql, label=f"{resource.path} list")
        return ResourceListResponse(
            count=total,
            results=[
                NamedResource(id=row["id"], name=row["name"]).to_url_resource(base_url, resource.path)
                for row in rows
            ],
        )

    async def get_ability(self, search_key: SearchKey, base_url: str) -> AbilityResponse:
        rows = await self._fetch_detail(queries.ABILITY_DETAIL, queries.ABILITIES, search_key)
        ability, pokemon = self._decode(
            rows, queries.ABILITIES, search_key,
            parent_key="ability_id", build_parent=_ability,
            child_key="dex_number", build_child=_pokemon_ref,
        )
        return AbilityResponse(
            **ability.model_dump(),
            pokemon=[p.to_url_resource(base_url, "pokemon") for p in pokemon],
        )

    async def get_camp(self, search_key: SearchKey, base_url: str) -> CampResponse:
        rows = await self._fetch_detail(queries.CAMP_DETAIL, queries.CAMPS, search_key)
        camp, pokemon = self._decode(
            rows, queries.CAMPS, search_key,
            parent_key="camp_id", build_parent=_camp,
            child_key="dex_number", build_child=_pokemon_ref,
        )
        return CampResponse(
            **camp.model_dump(),
            pokemon=[p.to_url_resource(base_url, "pokemon") for p in pokemon],
        )

    async def get_dungeon(self, search_key: SearchKey, base_url: str) -> DungeonResponse:
        rows = await self._fetch_detail(queries.DUNGEON_DETAIL, queries.DUNGEONS, search_key)
        dungeon, pokemon = self._decode(
            rows, queries.DUNGEONS, search_key,
            parent_key="dungeon_id", build_parent=_dungeon,
            child_key="dex_number", build_child=_dungeon_pokemon,
        )
        return DungeonResponse(
            **dungeon.model_dump(),
            pokemon=[
                DungeonPokemonURL(
                    pokemon=p.pokemon.to_url_resource(base_url, "pokemon"), is_super=p.is_super
                )
                for p in pokemon
            ],
        )

    async def get_move(self, search_key: SearchKey, base_url: str) -> MoveResponse:
        rows = await self._fetch_detail(queries.MOVE_DETAIL, queries.MOVES, search_key)
        (move, move_type), pokemon = self._decode(
            rows, queries.MOVES, search_key,
            parent_key="move_id", build_parent=_move_with_type,
            child_key="dex_number", build_child=_move_pokemon,
        )
        return MoveResponse(
            **move.model_dump(),
            type=move_type.to_url_resource(base_url, "types"),
            pokemon=[
                MovePokemonURL(
                    pokemon=p.pokemon.to_url_resource(base_url, "pokemon"),
                    method=p.method,
                    cost=p.cost,
                    level=p.level,
                )
                for p in pokemon
            ],
        )

    async def get_pokemon_type(self, search_key: SearchKey, base_url: str) -> PokemonTypeResponse:
        rows = await self._fetch_detail(queries.TYPE_DETAIL, queries.TYPES, search_key)
        pokemon_type, interactions = self._decode(
            rows, queries.TYPES, search_key,
            parent_key="type_id", build_parent=_type,
            child_key="defender_id", build_child=_type_interaction,
        )
        return PokemonTypeResponse(
            **pokemon_type.model_dump(),
            interactions=[
                TypeInteractionURL(
                    defender=i.defender.to_url_resource(base_url, "types"),
                    interaction=i.interaction,
                )
                for i in interactions
            ],
        )

    async def get_pokemon(self, search_key: SearchKey, base_url: str) -> PokemonResponse:
        """Assembles a pokemon from four concurrent queries (all-or-nothing)."""
        sub_queries = []
        for label, template in (
            ("pokemon detail", queries.POKEMON_DETAIL),
            ("pokemon types", queries.POKEMON_TYPES),
            ("pokemon abilities", queries.POKEMON_ABILITIES),
            ("pokemon moves", queries.POKEMON_MOVES),
        ):
            sql, arg = detail_query(template, queries.POKEMON, search_key)
            sub_queries.append(SubQuery(label, sql, (arg,)))
        detail_rows, type_rows, ability_rows, move_rows = await self._database.fetch_concurrently(
            sub_queries
        )

        (pokemon, camp), dungeons = self._decode(
            detail_rows, queries.POKEMON, search_key,
            parent_key="dex_number", build_parent=_pokemon_with_camp,
            child_key="dungeon_id", build_child=_pokemon_dungeon,
        )
        types = decode_children(type_rows, _type_ref)
        abilities = decode_children(ability_rows, _ability_ref)
        moves = decode_children(move_rows, _pokemon_move)

        return PokemonResponse(
            **pokemon.model_dump(),
            camp=camp.to_url_resource(base_url, "camps"),
            abilities=[a.to_url_resource(base_url, "abilities") for a in abilities],
            dungeons=[
                PokemonDungeonURL(
                    dungeon=d.dungeon.to_url_resource(base_url, "dungeons"), is_super=d.is_super
                )
                for d in dungeons
            ],
            moves=[
                PokemonMoveURL(
                    move=m.move.to_url_resource(base_url, "moves"),
                    method=m.method,
                    cost=m.cost,
                    level=m.level,
                )
                for m in moves
            ],
            types=[t.to_url_resource(base_url, "types") for t in types],
        )
