from typing import Optional
from fastapi import APIRouter, Depends, Query
import logging

from app.core.config import settings
from app.schemas import ReleasePage
from app.services.release_query import ReleaseQueryService, get_release_service, normalize_params

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/releases", response_model=ReleasePage)
async def get_ott_releases(
    timeframe: Optional[str] = Query(None, description="week | month (default week)"),
    limit: Optional[str] = Query(None, description="Page size, positive integer (default 20)"),
    offset: Optional[str] = Query(None, description="Items to skip, non-negative integer (default 0)"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="release_date | title | platform"),
    order: Optional[str] = Query(None, description="asc | desc (default asc)"),
    service: ReleaseQueryService = Depends(get_release_service),
) -> ReleasePage:
    """
    Return generated OTT releases for the current week or month.

    Invalid parameters fall back to their defaults; the endpoint always answers 200.
    """
    params = normalize_params(
        timeframe=timeframe,
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        order=order,
        default_limit=settings.ott_default_limit,
    )
    page = await service.query(params)
    logger.info(
        f"[OTT_API] timeframe={page.timeframe} total={page.total} count={page.count} "
        f"offset={page.offset} limit={page.limit} sortBy={params.sort_by} order={page.order}"
    )
    return page
