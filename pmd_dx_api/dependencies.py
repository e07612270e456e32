from fastapi import Depends, Query, Request

from pmd_dx_api.clients import DatabaseClient
from pmd_dx_api.params import (
    FieldFilter,
    ListParams,
    RequestContext,
    parse_field_filter,
    parse_pagination,
    parse_sort,
)
from pmd_dx_api.services.pokedex_service import PokedexService


# Clients are created once per application and kept on app.state
def get_database(request: Request) -> DatabaseClient:
    return request.app.state.database


def get_pokedex_service(
    database: DatabaseClient = Depends(get_database),
) -> PokedexService:
    return PokedexService(database=database)


# Query parameters are taken as raw strings so malformed values fall back to
# defaults instead of being rejected
def get_field_filter(fields: str | None = Query(None)) -> FieldFilter:
    return parse_field_filter(fields)


def get_list_params(
    sort: str | None = Query(None),
    page: str | None = Query(None),
    per_page: str | None = Query(None),
) -> ListParams:
    return ListParams(sort=parse_sort(sort), pagination=parse_pagination(page, per_page))


def get_detail_context(
    field_filter: FieldFilter = Depends(get_field_filter),
) -> RequestContext:
    return RequestContext(field_filter=field_filter)


def get_list_context(
    field_filter: FieldFilter = Depends(get_field_filter),
    list_params: ListParams = Depends(get_list_params),
) -> RequestContext:
    return RequestContext(field_filter=field_filter, list_params=list_params)
