"""
Application context: the long-lived handles every request needs.

Built once in `main.py`, started in the FastAPI lifespan and closed on
shutdown. Handlers receive it through the `get_context` dependency instead of
reading module globals.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fastapi import Request

from .db import DRIVER_ERRORS, Database
from .log_sink import LogSink
from .mailer import Mailer
from .settings import Settings

if TYPE_CHECKING:
    from users.repository import UserStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    users: "UserStore"
    log_sink: LogSink
    mailer: Mailer
    database: Database | None = None
    started_at: float = field(default_factory=time.monotonic)

    async def start(self) -> None:
        await self.log_sink.connect()

        if self.database is not None:
            try:
                await self.database.connect()
            except DRIVER_ERRORS:
                # Store calls retry the pool lazily once the server is up.
                logger.exception("database_connect_failed")
                return None

        try:
            await self.users.ensure_schema()
        except RuntimeError:
            logger.exception("schema_bootstrap_failed")
        return None

    async def close(self) -> None:
        await self.log_sink.close()
        if self.database is not None:
            await self.database.close()

    def uptime(self) -> float:
        return time.monotonic() - self.started_at


def get_context(request: Request) -> AppContext:
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise RuntimeError("Application context is not initialized.")
    return context
