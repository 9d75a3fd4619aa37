"""
Email API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from core.context import AppContext, get_context

from . import schemas, service

router = APIRouter()


@router.post("/send-email")
async def send_email(
    payload: schemas.SendEmailRequest | None = None,
    ctx: AppContext = Depends(get_context),
) -> dict:
    data = await service.send_email(ctx, payload or schemas.SendEmailRequest())
    return {"success": True, "message": "Email enviado exitosamente", "data": data}
