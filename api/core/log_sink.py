"""
Append-only event log stored in a MongoDB collection.

`LogSink.record()` is fire-and-forget: the insert runs as an asyncio task and
the caller never awaits it. Write failures only reach the process console;
they never change an HTTP response.

Document shape:
    {"level": "info"|"warning"|"error", "message": str, "data": {...},
     "timestamp": datetime (UTC), "service": str}
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Literal

from pymongo import ASCENDING, DESCENDING, AsyncMongoClient
from pymongo.errors import PyMongoError

LOG_COLLECTION = "logs"
LOG_LEVELS = ("info", "warning", "error")

LogLevel = Literal["info", "warning", "error"]

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def build_entry(level: str, message: str, data: Any, *, service: str) -> dict:
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level: {level!r}")
    return {
        "level": level,
        "message": message,
        "data": data if data is not None else {},
        "timestamp": _utc_now(),
        "service": service,
    }


class LogSink:
    def __init__(
        self,
        *,
        service: str,
        url: str | None = None,
        db_name: str | None = None,
        auth_source: str = "admin",
        collection: Any = None,
    ) -> None:
        self.service = service
        self._url = url
        self._db_name = db_name
        self._auth_source = auth_source
        self._client: AsyncMongoClient | None = None
        # Tests inject a collection directly; production code gets one from connect().
        self._collection = collection
        self._pending: set[asyncio.Task] = set()

    @property
    def is_connected(self) -> bool:
        return self._collection is not None

    @property
    def collection(self) -> Any:
        return self._collection

    async def connect(self) -> bool:
        """
        Open the client and create the query indexes.

        A failure leaves the sink disconnected (records become no-ops) instead
        of aborting startup.
        """
        if self._collection is not None:
            return True
        if not self._url or not self._db_name:
            logger.warning("log_sink_not_configured")
            return False

        try:
            client: AsyncMongoClient = AsyncMongoClient(self._url, authSource=self._auth_source)
        except PyMongoError:
            logger.exception("log_sink_client_invalid db=%s", self._db_name)
            return False

        try:
            collection = client[self._db_name][LOG_COLLECTION]
            await collection.create_index([("timestamp", DESCENDING)])
            await collection.create_index([("level", ASCENDING)])
        except PyMongoError:
            logger.exception("log_sink_connect_failed db=%s", self._db_name)
            await client.close()
            return False

        self._client = client
        self._collection = collection
        logger.info("log_sink_connected db=%s collection=%s", self._db_name, LOG_COLLECTION)
        return True

    def record(self, level: LogLevel, message: str, data: Any = None) -> None:
        """
        Dispatch one log entry without waiting for it. Never raises.
        """
        if self._collection is None:
            logger.warning("log_sink_disconnected level=%s message=%s", level, message)
            return None

        try:
            entry = build_entry(level, message, data, service=self.service)
            task = asyncio.get_running_loop().create_task(self._write(entry))
        except (ValueError, RuntimeError):
            logger.exception("log_sink_dispatch_failed level=%s message=%s", level, message)
            return None

        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return None

    async def _write(self, entry: dict) -> None:
        try:
            await self._collection.insert_one(entry)
        except Exception:
            logger.exception("log_sink_write_failed level=%s message=%s", entry["level"], entry["message"])

    async def drain(self) -> None:
        """
        Wait for every write dispatched so far.
        """
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        await self.drain()
        if self._client is not None:
            await self._client.close()
            self._client = None
        self._collection = None
