"""
User business logic.

Every operation follows the same shape: validate, run one repository call,
record the outcome in the log sink, return the data for the response.
Repository errors are logged and re-raised with the route's message.
"""

from __future__ import annotations

import logging

from core.context import AppContext
from core.errors import ConflictError, NotFoundError, StoreError, ValidationError

from . import schemas

REQUIRED_FIELDS_MESSAGE = "Nombre y email son requeridos"
NOT_FOUND_MESSAGE = "Usuario no encontrado"

logger = logging.getLogger(__name__)


def _is_blank(value: str | None) -> bool:
    return not (value or "").strip()


def _public_user(user_id: int, nombre: str, email: str) -> dict:
    return {"id": int(user_id), "nombre": nombre, "email": email}


def _require_fields(
    ctx: AppContext,
    payload: schemas.UserPayload,
    *,
    log_message: str,
    user_id: int | None = None,
) -> tuple[str, str]:
    # Values are stored exactly as sent; whitespace-only counts as missing.
    missing = [name for name, value in (("nombre", payload.nombre), ("email", payload.email)) if _is_blank(value)]
    if missing:
        data = {"nombre": payload.nombre, "email": payload.email}
        if user_id is not None:
            data = {"userId": user_id, **data}
        ctx.log_sink.record("warning", log_message, data)
        raise ValidationError(
            REQUIRED_FIELDS_MESSAGE,
            error=f"Campos faltantes: {', '.join(missing)}",
        )
    return payload.nombre, payload.email


def _store_failure(ctx: AppContext, exc: StoreError | ConflictError, message: str, data: dict) -> None:
    logger.error("%s: %s", message, exc.error)
    ctx.log_sink.record("error", message, {**data, "error": exc.error})


async def list_users(ctx: AppContext) -> list[dict]:
    try:
        rows = await ctx.users.list_all()
    except StoreError as exc:
        message = "Error obteniendo usuarios"
        _store_failure(ctx, exc, message, {})
        raise StoreError(message, error=exc.error) from exc

    ctx.log_sink.record("info", "Consulta de todos los usuarios", {"count": len(rows)})
    return rows


async def create_user(ctx: AppContext, payload: schemas.UserPayload) -> dict:
    nombre, email = _require_fields(
        ctx,
        payload,
        log_message="Intento de crear usuario sin datos completos",
    )

    try:
        row = await ctx.users.create(nombre=nombre, email=email)
    except ConflictError as exc:
        # Duplicate email: reported as 409 rather than a generic 500.
        _store_failure(ctx, exc, "Error creando usuario", {"nombre": nombre, "email": email})
        raise
    except StoreError as exc:
        message = "Error creando usuario"
        _store_failure(ctx, exc, message, {"nombre": nombre, "email": email})
        raise StoreError(message, error=exc.error) from exc

    user = _public_user(row["id"], row["nombre"], row["email"])
    ctx.log_sink.record("info", "Usuario creado exitosamente", user)
    return user


async def get_user(ctx: AppContext, user_id: int) -> dict:
    try:
        row = await ctx.users.get(user_id)
    except StoreError as exc:
        message = "Error obteniendo usuario"
        _store_failure(ctx, exc, message, {"userId": user_id})
        raise StoreError(message, error=exc.error) from exc

    if row is None:
        ctx.log_sink.record("warning", NOT_FOUND_MESSAGE, {"userId": user_id})
        raise NotFoundError(NOT_FOUND_MESSAGE, error=f"No existe un usuario con id {user_id}")

    ctx.log_sink.record("info", "Consulta de usuario específico", {"userId": user_id, "userData": row})
    return row


async def update_user(ctx: AppContext, user_id: int, payload: schemas.UserPayload) -> dict:
    nombre, email = _require_fields(
        ctx,
        payload,
        log_message="Intento de actualizar usuario sin datos completos",
        user_id=user_id,
    )

    failure_data = {"userId": user_id, "nombre": nombre, "email": email}
    try:
        row = await ctx.users.update(user_id, nombre=nombre, email=email)
    except ConflictError as exc:
        _store_failure(ctx, exc, "Error actualizando usuario", failure_data)
        raise
    except StoreError as exc:
        message = "Error actualizando usuario"
        _store_failure(ctx, exc, message, failure_data)
        raise StoreError(message, error=exc.error) from exc

    if row is None:
        ctx.log_sink.record("warning", "Usuario no encontrado para actualizar", {"userId": user_id})
        raise NotFoundError(NOT_FOUND_MESSAGE, error=f"No existe un usuario con id {user_id}")

    ctx.log_sink.record(
        "info",
        "Usuario actualizado exitosamente",
        {"userId": user_id, "newData": {"nombre": nombre, "email": email}},
    )
    return _public_user(row["id"], row["nombre"], row["email"])


async def delete_user(ctx: AppContext, user_id: int) -> dict:
    try:
        deleted = await ctx.users.delete(user_id)
    except StoreError as exc:
        message = "Error eliminando usuario"
        _store_failure(ctx, exc, message, {"userId": user_id})
        raise StoreError(message, error=exc.error) from exc

    if not deleted:
        ctx.log_sink.record("warning", "Usuario no encontrado para eliminar", {"userId": user_id})
        raise NotFoundError(NOT_FOUND_MESSAGE, error=f"No existe un usuario con id {user_id}")

    ctx.log_sink.record("info", "Usuario eliminado exitosamente", {"userId": user_id})
    return {"id": user_id}
