"""
Log API endpoints.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from core.context import AppContext, get_context

from . import service

router = APIRouter()


@router.get("/logs")
async def list_logs(
    level: str | None = Query(None, max_length=20),
    limit: int = Query(50, ge=1, le=500),
    page: int = Query(1, ge=1),
    since: datetime | None = None,
    until: datetime | None = None,
    ctx: AppContext = Depends(get_context),
) -> dict:
    result = await service.list_logs(
        ctx,
        level=level,
        page=page,
        limit=limit,
        since=since,
        until=until,
    )
    return {"success": True, **result}


@router.get("/logs/stats")
async def log_stats(ctx: AppContext = Depends(get_context)) -> dict:
    stats = await service.log_stats(ctx)
    return {"success": True, "data": stats}
