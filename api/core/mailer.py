"""
SMTP client helpers (aiosmtplib).

The local stack points this at MailHog, which accepts plain SMTP without TLS
or authentication.
"""

from __future__ import annotations

from email.message import EmailMessage

import aiosmtplib

from .errors import MailError


def build_message(*, sender: str, to: str, subject: str, html: str) -> EmailMessage:
    message = EmailMessage()
    message["From"] = sender
    message["To"] = to
    message["Subject"] = subject
    message.set_content("Este mensaje requiere un cliente con soporte HTML.")
    message.add_alternative(html, subtype="html")
    return message


class Mailer:
    def __init__(
        self,
        *,
        host: str,
        port: int,
        default_sender: str,
        timeout_s: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.default_sender = default_sender
        self.timeout_s = timeout_s

    async def send(self, *, to: str, subject: str, html: str, sender: str | None = None) -> None:
        """
        Send one HTML email. Transport failures raise MailError with the raw
        transport text in `error`.
        """
        message = build_message(
            sender=sender or self.default_sender,
            to=to,
            subject=subject,
            html=html,
        )
        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                timeout=self.timeout_s,
                use_tls=False,
                start_tls=False,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            raise MailError("Error enviando email", error=str(exc)) from exc
