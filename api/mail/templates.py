"""
HTML bodies for outbound email.

User-supplied text is escaped before it is placed in the markup.
"""

from __future__ import annotations

from datetime import datetime
from html import escape

WELCOME_SUBJECT = "¡Bienvenido a nuestra plataforma!"


def welcome_html(*, nombre: str, email: str) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2 style="color: #4CAF50;">¡Bienvenido {escape(nombre)}!</h2>
      <p>Gracias por registrarte en nuestra plataforma.</p>
      <p>Tu cuenta ha sido creada exitosamente con el email: <strong>{escape(email)}</strong></p>
      <hr>
      <small style="color: #666;">Este es un email de prueba enviado desde MailHog</small>
    </div>
    """


def message_html(*, message: str, sent_at: datetime | None = None) -> str:
    sent_at = sent_at or datetime.now()
    return f"""
    <h2>Mensaje desde la API</h2>
    <p>{escape(message)}</p>
    <hr>
    <small>Enviado desde la API - {sent_at.strftime("%d/%m/%Y %H:%M:%S")}</small>
    """
