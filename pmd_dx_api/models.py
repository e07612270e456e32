from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# Base for everything that ends up in a response body: snake_case in Python,
# camelCase on the wire.
class ResourceModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Minimal identity of a row as read from the database
class NamedResource(ResourceModel):
    id: int
    name: str

    def to_url_resource(self, base_url: str, resource_path: str) -> "NamedResourceURL":
        return NamedResourceURL(
            name=self.name,
            url=f"{base_url.rstrip('/')}/v1/{resource_path}/{self.id}",
        )


# Public representation of a NamedResource
class NamedResourceURL(ResourceModel):
    name: str
    url: str


class ResourceListResponse(ResourceModel):
    count: int
    results: list[NamedResourceURL]


# --- Parent entities (internal contract, one per table) ---

class Ability(ResourceModel):
    id: int
    name: str
    description: str


class Camp(ResourceModel):
    id: int
    name: str
    description: str
    unlock_type: str
    cost: int | None


class Dungeon(ResourceModel):
    id: int
    name: str
    levels: int
    start_level: int | None
    team_size: int
    items_allowed: bool
    pokemon_joining: bool
    map_visible: bool


class Move(ResourceModel):
    id: int
    name: str
    category: str
    range: str
    target: str
    initial_pp: int = Field(alias="initialPP")
    initial_power: int
    accuracy: int
    description: str


class Pokemon(ResourceModel):
    id: int
    name: str
    classification: str
    evolution_stage: int | None
    evolve_condition: str
    evolve_level: int | None
    evolve_crystals: int | None


class PokemonType(ResourceModel):
    id: int
    name: str


# --- Related entities carrying join attributes ---

class DungeonPokemon(ResourceModel):
    pokemon: NamedResource
    is_super: bool


class MovePokemon(ResourceModel):
    pokemon: NamedResource
    method: str
    cost: int | None
    level: int | None


class PokemonDungeon(ResourceModel):
    dungeon: NamedResource
    is_super: bool


class PokemonMove(ResourceModel):
    move: NamedResource
    method: str
    cost: int | None
    level: int | None


class TypeInteraction(ResourceModel):
    defender: NamedResource
    interaction: str


# --- Public detail responses ---
# Each extends its parent entity so the parent fields come first in the body.

class AbilityResponse(Ability):
    pokemon: list[NamedResourceURL]


class CampResponse(Camp):
    pokemon: list[NamedResourceURL]


class DungeonPokemonURL(ResourceModel):
    pokemon: NamedResourceURL
    is_super: bool


class DungeonResponse(Dungeon):
    pokemon: list[DungeonPokemonURL]


class MovePokemonURL(ResourceModel):
    pokemon: NamedResourceURL
    method: str
    cost: int | None
    level: int | None


class MoveResponse(Move):
    type: NamedResourceURL
    pokemon: list[MovePokemonURL]


class PokemonDungeonURL(ResourceModel):
    dungeon: NamedResourceURL
    is_super: bool


class PokemonMoveURL(ResourceModel):
    move: NamedResourceURL
    method: str
    cost: int | None
    level: int | None


class PokemonResponse(Pokemon):
    camp: NamedResourceURL
    abilities: list[NamedResourceURL]
    dungeons: list[PokemonDungeonURL]
    moves: list[PokemonMoveURL]
    types: list[NamedResourceURL]


class TypeInteractionURL(ResourceModel):
    defender: NamedResourceURL
    interaction: str


class PokemonTypeResponse(PokemonType):
    interactions: list[TypeInteractionURL]
