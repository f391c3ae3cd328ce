from fastapi import APIRouter, Depends, Header, Query, Request
from ..schemas import ErrorBody, PageResult
from ..services.paginator import parse_page_params
from ..services.properties_service import PropertiesService

router = APIRouter()

def service_dep(request: Request) -> PropertiesService:
    # Built once by the app factory; shared so the cache and in-flight fetch are too.
    return request.app.state.properties_service

@router.get(
    "/properties",
    response_model=PageResult,
    responses={404: {"model": ErrorBody}},
)
async def get_properties(
    source: str | None = Header(default=None),
    # Raw strings: malformed values fall back to defaults instead of a 422
    offset: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    svc: PropertiesService = Depends(service_dep),
):
    page_offset, page_limit = parse_page_params(offset, limit)
    return await svc.get_page(source, page_offset, page_limit)
