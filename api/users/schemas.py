"""
User API schemas (request models).
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class UserPayload(BaseModel):
    # Both fields are optional here (and the body itself may be absent) so
    # missing values reach the service and produce the 400 envelope instead
    # of FastAPI's default 422.
    nombre: str | None = Field(default=None, max_length=100)
    email: str | None = Field(default=None, max_length=100)
