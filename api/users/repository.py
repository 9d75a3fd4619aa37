"""
User persistence (raw SQL).

Table:
    usuarios(id, nombre, email UNIQUE, fecha_creacion)

Each method issues one statement (plus the table bootstrap the first time, if
startup could not reach the server). Driver errors are translated here: unique
violations become ConflictError, everything else StoreError; both keep the
raw driver text in `error`.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Protocol

import asyncpg

from core.db import DRIVER_ERRORS, Database, affected_rows
from core.errors import ConflictError, StoreError

USER_COLUMNS = "id, nombre, email, fecha_creacion"

# `id` is a SERIAL (int4) column; anything outside this range cannot exist.
MIN_USER_ID = 1
MAX_USER_ID = 2**31 - 1


def is_valid_user_id(user_id: int) -> bool:
    return MIN_USER_ID <= user_id <= MAX_USER_ID


class UserStore(Protocol):
    async def ensure_schema(self) -> None: ...

    async def ping(self) -> bool: ...

    async def list_all(self) -> list[dict]: ...

    async def get(self, user_id: int) -> dict | None: ...

    async def create(self, *, nombre: str, email: str) -> dict: ...

    async def update(self, user_id: int, *, nombre: str, email: str) -> dict | None: ...

    async def delete(self, user_id: int) -> bool: ...


@asynccontextmanager
async def _translate_errors() -> AsyncIterator[None]:
    try:
        yield
    except asyncpg.UniqueViolationError as exc:
        raise ConflictError("El email ya está registrado", error=str(exc)) from exc
    except DRIVER_ERRORS as exc:
        raise StoreError("Error de base de datos", error=str(exc)) from exc


class UserRepository:
    def __init__(self, db: Database) -> None:
        self.db = db
        self._schema_ready = False

    async def ensure_schema(self) -> None:
        async with _translate_errors():
            await self.db.execute(
                """
                CREATE TABLE IF NOT EXISTS usuarios (
                    id SERIAL PRIMARY KEY,
                    nombre VARCHAR(100) NOT NULL,
                    email VARCHAR(100) UNIQUE NOT NULL,
                    fecha_creacion TIMESTAMPTZ NOT NULL DEFAULT now()
                )
                """
            )
        self._schema_ready = True

    async def _ready(self) -> None:
        if not self._schema_ready:
            await self.ensure_schema()

    async def ping(self) -> bool:
        return await self.db.ping()

    async def list_all(self) -> list[dict]:
        await self._ready()
        async with _translate_errors():
            return await self.db.fetch_all(
                f"""
                SELECT {USER_COLUMNS}
                FROM usuarios
                ORDER BY fecha_creacion DESC, id DESC
                """
            )

    async def get(self, user_id: int) -> dict | None:
        if not is_valid_user_id(user_id):
            return None
        await self._ready()
        async with _translate_errors():
            return await self.db.fetch_one(
                f"""
                SELECT {USER_COLUMNS}
                FROM usuarios
                WHERE id = $1
                """,
                user_id,
            )

    async def create(self, *, nombre: str, email: str) -> dict:
        await self._ready()
        async with _translate_errors():
            row = await self.db.fetch_one(
                f"""
                INSERT INTO usuarios (nombre, email)
                VALUES ($1, $2)
                RETURNING {USER_COLUMNS}
                """,
                nombre,
                email,
            )
        if row is None:
            raise StoreError("Error de base de datos", error="INSERT returned no row.")
        return row

    async def update(self, user_id: int, *, nombre: str, email: str) -> dict | None:
        if not is_valid_user_id(user_id):
            return None
        await self._ready()
        # id and fecha_creacion are never touched.
        async with _translate_errors():
            return await self.db.fetch_one(
                f"""
                UPDATE usuarios
                SET nombre = $2, email = $3
                WHERE id = $1
                RETURNING {USER_COLUMNS}
                """,
                user_id,
                nombre,
                email,
            )

    async def delete(self, user_id: int) -> bool:
        if not is_valid_user_id(user_id):
            return False
        await self._ready()
        async with _translate_errors():
            status = await self.db.execute(
                """
                DELETE FROM usuarios
                WHERE id = $1
                """,
                user_id,
            )
        return affected_rows(status) > 0
