"""
Pydantic schemas for the send-email endpoint.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SendEmailRequest(BaseModel):
    to: str | None = Field(default=None, max_length=320)
    subject: str | None = Field(default=None, max_length=300)
    message: str | None = None
