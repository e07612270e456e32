import logging
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from pmd_dx_api.clients import DatabaseClient, ResponseCache
from pmd_dx_api.config import Settings
from pmd_dx_api.db import queries
from pmd_dx_api.db.queries import ResourceTable
from pmd_dx_api.dependencies import get_detail_context, get_list_context, get_pokedex_service
from pmd_dx_api.errors import INTERNAL_ERROR_MESSAGE, QueryError, ResourceNotFoundError
from pmd_dx_api.fields import limit_fields
from pmd_dx_api.logger import init_logging, log_error
from pmd_dx_api.middleware import AccessLogMiddleware, ResponseCacheMiddleware
from pmd_dx_api.models import ResourceModel
from pmd_dx_api.pagination import page_links
from pmd_dx_api.params import RequestContext, parse_search_key
from pmd_dx_api.services.pokedex_service import PokedexService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1")


def _json(model: ResourceModel, context: RequestContext, headers: dict[str, str] | None = None) -> JSONResponse:
    body: dict[str, Any] = model.model_dump(mode="json", by_alias=True)
    return JSONResponse(content=limit_fields(body, context.field_filter), headers=headers)


async def _list(
    resource: ResourceTable, request: Request, context: RequestContext, service: PokedexService
) -> JSONResponse:
    params = context.list_params
    result = await service.get_resource_list(resource, params, str(request.base_url))
    links = page_links(params.pagination, result.count, str(request.url))
    return _json(result, context, headers={"Link": links.header()})


# Endpoints: one list and one detail route per resource

@router.get("/abilities", summary="Returns a page of abilities")
async def list_abilities(
    request: Request,
    context: RequestContext = Depends(get_list_context),
    service: PokedexService = Depends(get_pokedex_service),
):
    return await _list(queries.ABILITIES, request, context, service)


@router.get("/abilities/{search_arg}", summary="Returns an ability and the pokemon having it")
async def get_ability(
    search_arg: str,
    request: Request,
    context: RequestContext = Depends(get_detail_context),
    service: PokedexService = Depends(get_pokedex_service),
):
    ability = await service.get_ability(parse_search_key(search_arg), str(request.base_url))
    return _json(ability, context)


@router.get("/camps", summary="Returns a page of camps")
async def list_camps(
    request: Request,
    context: RequestContext = Depends(get_list_context),
    service: PokedexService = Depends(get_pokedex_service),
):
    return await _list(queries.CAMPS, request, context, service)


@router.get("/camps/{search_arg}", summary="Returns a camp and the pokemon living in it")
async def get_camp(
    search_arg: str,
    request: Request,
    context: RequestContext = Depends(get_detail_context),
    service: PokedexService = Depends(get_pokedex_service),
):
    camp = await service.get_camp(parse_search_key(search_arg), str(request.base_url))
    return _json(camp, context)


@router.get("/dungeons", summary="Returns a page of dungeons")
async def list_dungeons(
    request: Request,
    context: RequestContext = Depends(get_list_context),
    service: PokedexService = Depends(get_pokedex_service),
):
    return await _list(queries.DUNGEONS, request, context, service)


@router.get("/dungeons/{search_arg}", summary="Returns a dungeon and the pokemon encountered in it")
async def get_dungeon(
    search_arg: str,
    request: Request,
    context: RequestContext = Depends(get_detail_context),
    service: PokedexService = Depends(get_pokedex_service),
):
    dungeon = await service.get_dungeon(parse_search_key(search_arg), str(request.base_url))
    return _json(dungeon, context)


@router.get("/moves", summary="Returns a page of moves")
async def list_moves(
    request: Request,
    context: RequestContext = Depends(get_list_context),
    service: PokedexService = Depends(get_pokedex_service),
):
    return await _list(queries.MOVES, request, context, service)


@router.get("/moves/{search_arg}", summary="Returns a move, its type and the pokemon learning it")
async def get_move(
    search_arg: str,
    request: Request,
    context: RequestContext = Depends(get_detail_context),
    service: PokedexService = Depends(get_pokedex_service),
):
    move = await service.get_move(parse_search_key(search_arg), str(request.base_url))
    return _json(move, context)


@router.get("/pokemon", summary="Returns a page of pokemon")
async def list_pokemon(
    request: Request,
    context: RequestContext = Depends(get_list_context),
    service: PokedexService = Depends(get_pokedex_service),
):
    return await _list(queries.POKEMON, request, context, service)


@router.get("/pokemon/{search_arg}", summary="Returns a pokemon with its camp, abilities, dungeons, moves and types")
async def get_pokemon(
    search_arg: str,
    request: Request,
    context: RequestContext = Depends(get_detail_context),
    service: PokedexService = Depends(get_pokedex_service),
):
    pokemon = await service.get_pokemon(parse_search_key(search_arg), str(request.base_url))
    return _json(pokemon, context)


@router.get("/types", summary="Returns a page of pokemon types")
async def list_types(
    request: Request,
    context: RequestContext = Depends(get_list_context),
    service: PokedexService = Depends(get_pokedex_service),
):
    return await _list(queries.TYPES, request, context, service)


@router.get("/types/{search_arg}", summary="Returns a pokemon type and its interactions")
async def get_pokemon_type(
    search_arg: str,
    request: Request,
    context: RequestContext = Depends(get_detail_context),
    service: PokedexService = Depends(get_pokedex_service),
):
    pokemon_type = await service.get_pokemon_type(parse_search_key(search_arg), str(request.base_url))
    return _json(pokemon_type, context)


# Error mapping: lookups that match nothing are a 404 with a readable message,
# everything else is a generic 500 with the details going to the error log only

async def _handle_not_found(request: Request, exc: ResourceNotFoundError) -> PlainTextResponse:
    return PlainTextResponse(str(exc), status_code=status.HTTP_404_NOT_FOUND)


async def _handle_internal_error(request: Request, exc: Exception) -> PlainTextResponse:
    log_error(exc)
    return PlainTextResponse(INTERNAL_ERROR_MESSAGE, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect whatever clients were not injected and close them on shutdown."""
    owned = []
    if app.state.database is None or app.state.response_cache is None:
        settings = app.state.settings or Settings.from_env()
        init_logging(settings.log_path)
        if app.state.database is None:
            app.state.database = await DatabaseClient.connect(settings.database_dsn)
            owned.append(app.state.database)
        if app.state.response_cache is None:
            app.state.response_cache = await ResponseCache.connect(
                settings.redis_url, settings.redis_password
            )
            owned.append(app.state.response_cache)
    yield
    for client in owned:
        await client.close()


def create_app(
    database: DatabaseClient | None = None,
    cache: ResponseCache | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    app = FastAPI(
        title="PMD DX API",
        description="Read-only REST API for Pokemon Mystery Dungeon DX data.",
        lifespan=lifespan,
    )
    app.state.database = database
    app.state.response_cache = cache
    app.state.settings = settings

    app.include_router(router)
    app.add_exception_handler(ResourceNotFoundError, _handle_not_found)
    app.add_exception_handler(QueryError, _handle_internal_error)
    app.add_exception_handler(Exception, _handle_internal_error)

    # Added last runs first: access logging wraps the cache
    app.add_middleware(ResponseCacheMiddleware)
    app.add_middleware(AccessLogMiddleware)
    return app


app = create_app()


def run():
    settings = Settings.from_env()
    logger.info("pmd-dx-api listening on port %s", settings.port)
    uvicorn.run(create_app(settings=settings), host="0.0.0.0", port=settings.port)
