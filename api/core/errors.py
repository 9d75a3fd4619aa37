"""
Error taxonomy shared by all features.

Every `ApiError` is rendered by `main.py` as the JSON envelope
`{"success": false, "message": ..., "error": ...}` with `status_code`.
"""

from __future__ import annotations


class ApiError(RuntimeError):
    status_code = 500

    def __init__(self, message: str, *, error: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        # Raw underlying error text; falls back to the message itself.
        self.error = error if error is not None else message

    def to_envelope(self) -> dict:
        return {"success": False, "message": self.message, "error": self.error}


class ValidationError(ApiError):
    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    status_code = 409


class StoreError(ApiError):
    status_code = 500


class MailError(ApiError):
    status_code = 500
