"""
Log query logic (MongoDB).

Listing is newest-first with offset pagination:
    skip = (page - 1) * limit
    total_pages = ceil(total_matching / limit)
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any

from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from core.context import AppContext
from core.errors import StoreError

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def _serialize(doc: dict) -> dict:
    out = dict(doc)
    if "_id" in out:
        out["_id"] = str(out["_id"])
    return out


def build_filter(
    *,
    level: str | None = None,
    since: datetime | None = None,
    until: datetime | None = None,
) -> dict[str, Any]:
    query: dict[str, Any] = {}
    if level:
        query["level"] = level

    timestamp: dict[str, datetime] = {}
    if since is not None:
        timestamp["$gte"] = since
    if until is not None:
        timestamp["$lt"] = until
    if timestamp:
        query["timestamp"] = timestamp
    return query


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0


def _collection(ctx: AppContext, message: str) -> Any:
    collection = ctx.log_sink.collection
    if collection is None:
        raise StoreError(message, error="MongoDB no está conectado")
    return collection


async def list_logs(
    ctx: AppContext,
    *,
    level: str | None = None,
    page: int = 1,
    limit: int = 50,
    since: datetime | None = None,
    until: datetime | None = None,
) -> dict:
    message = "Error obteniendo logs"
    query = build_filter(level=level, since=since, until=until)
    skip = (page - 1) * limit

    try:
        collection = _collection(ctx, message)
        cursor = collection.find(query).sort("timestamp", DESCENDING).skip(skip).limit(limit)
        docs = await cursor.to_list()
        total = await collection.count_documents(query)
    except PyMongoError as exc:
        logger.error("list_logs_failed error=%s", exc)
        ctx.log_sink.record("error", message, {"error": str(exc)})
        raise StoreError(message, error=str(exc)) from exc
    except StoreError as exc:
        logger.error("list_logs_failed error=%s", exc.error)
        raise

    ctx.log_sink.record(
        "info",
        "Consulta de logs realizada",
        {
            "filter": {
                "level": level,
                "since": since.isoformat() if since else None,
                "until": until.isoformat() if until else None,
            },
            "resultCount": len(docs),
            "page": page,
            "limit": limit,
        },
    )

    return {
        "data": [_serialize(doc) for doc in docs],
        "pagination": {
            "current_page": page,
            "total_pages": total_pages(total, limit),
            "total_records": total,
            "records_per_page": limit,
        },
    }


async def log_stats(ctx: AppContext) -> dict:
    message = "Error obteniendo estadísticas"
    now = _utc_now()

    try:
        collection = _collection(ctx, message)
        cursor = await collection.aggregate(
            [
                {"$group": {"_id": "$level", "count": {"$sum": 1}}},
                {"$sort": {"count": -1}},
            ]
        )
        by_level = await cursor.to_list()
        today_logs = await collection.count_documents({"timestamp": {"$gte": _start_of_day(now)}})
        total_logs = await collection.count_documents({})
    except PyMongoError as exc:
        logger.error("log_stats_failed error=%s", exc)
        raise StoreError(message, error=str(exc)) from exc
    except StoreError as exc:
        logger.error("log_stats_failed error=%s", exc.error)
        raise

    return {
        "by_level": by_level,
        "today_logs": today_logs,
        "total_logs": total_logs,
        "generated_at": now.isoformat(),
    }
