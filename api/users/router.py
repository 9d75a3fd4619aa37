"""
User CRUD endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, status

from core.context import AppContext, get_context
from mail import service as mail_service

from . import schemas, service

router = APIRouter()


@router.get("/usuarios")
async def list_users(ctx: AppContext = Depends(get_context)) -> dict:
    rows = await service.list_users(ctx)
    return {"success": True, "data": rows, "count": len(rows)}


@router.post("/usuarios", status_code=status.HTTP_201_CREATED)
async def create_user(
    background_tasks: BackgroundTasks,
    payload: schemas.UserPayload | None = None,
    ctx: AppContext = Depends(get_context),
) -> dict:
    # A request without a body is validated like an empty object.
    user = await service.create_user(ctx, payload or schemas.UserPayload())

    # Runs after the response is built; failures only show up in the log sink.
    background_tasks.add_task(
        mail_service.send_welcome_background,
        ctx,
        nombre=user["nombre"],
        email=user["email"],
    )

    return {"success": True, "message": "Usuario creado exitosamente", "data": user}


@router.get("/usuarios/{user_id}")
async def get_user(user_id: int, ctx: AppContext = Depends(get_context)) -> dict:
    row = await service.get_user(ctx, user_id)
    return {"success": True, "data": row}


@router.put("/usuarios/{user_id}")
async def update_user(
    user_id: int,
    payload: schemas.UserPayload | None = None,
    ctx: AppContext = Depends(get_context),
) -> dict:
    user = await service.update_user(ctx, user_id, payload or schemas.UserPayload())
    return {"success": True, "message": "Usuario actualizado exitosamente", "data": user}


@router.delete("/usuarios/{user_id}")
async def delete_user(user_id: int, ctx: AppContext = Depends(get_context)) -> dict:
    data = await service.delete_user(ctx, user_id)
    return {"success": True, "message": "Usuario eliminado exitosamente", "data": data}
