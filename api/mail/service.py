"""
Email business logic.
"""

from __future__ import annotations

import logging

from core.context import AppContext
from core.errors import MailError, ValidationError

from . import schemas, templates

REQUIRED_FIELDS_MESSAGE = "to, subject y message son requeridos"

logger = logging.getLogger(__name__)


async def send_email(ctx: AppContext, payload: schemas.SendEmailRequest) -> dict:
    to = (payload.to or "").strip()
    subject = (payload.subject or "").strip()
    message = (payload.message or "").strip()

    missing = [name for name, value in (("to", to), ("subject", subject), ("message", message)) if not value]
    if missing:
        ctx.log_sink.record("warning", "Intento de enviar email sin datos completos", {"missing": missing})
        raise ValidationError(REQUIRED_FIELDS_MESSAGE, error=f"Campos faltantes: {', '.join(missing)}")

    try:
        await ctx.mailer.send(
            to=to,
            subject=subject,
            html=templates.message_html(message=message),
            sender=ctx.settings.mail_from,
        )
    except MailError as exc:
        logger.error("send_email_failed to=%s error=%s", to, exc.error)
        ctx.log_sink.record("error", "Error enviando email", {"to": to, "subject": subject, "error": exc.error})
        raise

    ctx.log_sink.record("info", "Email enviado exitosamente", {"to": to, "subject": subject})
    return {"to": to, "subject": subject}


async def send_welcome_background(ctx: AppContext, *, nombre: str, email: str) -> None:
    """
    BackgroundTasks entrypoint for the post-creation welcome email.

    This never raises to the request path; the user row is already committed,
    so a failed send is only recorded in the log sink.
    """
    try:
        await ctx.mailer.send(
            to=email,
            subject=templates.WELCOME_SUBJECT,
            html=templates.welcome_html(nombre=nombre, email=email),
            sender=ctx.settings.mail_welcome_from,
        )
    except MailError as exc:
        logger.error("welcome_email_failed email=%s error=%s", email, exc.error)
        ctx.log_sink.record(
            "error",
            "Error enviando email de bienvenida",
            {"nombre": nombre, "email": email, "error": exc.error},
        )
        return None
    except Exception as exc:
        logger.exception("welcome_email_failed email=%s", email)
        ctx.log_sink.record(
            "error",
            "Error enviando email de bienvenida",
            {"nombre": nombre, "email": email, "error": str(exc)},
        )
        return None

    logger.info("welcome_email_sent email=%s", email)
    ctx.log_sink.record("info", "Email de bienvenida enviado", {"nombre": nombre, "email": email})
