"""Application error taxonomy rendered as ``{"error": ...}`` responses."""

from __future__ import annotations

from typing import Any, Dict, Optional


class AppError(Exception):
    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra or {}

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message, **self.extra}


class BadRequestError(AppError):
    status_code = 400


class UnrecognizedLinkError(BadRequestError):
    pass


class DuplicateError(AppError):
    status_code = 409

    def __init__(self, message: str, existing: Any) -> None:
        payload = existing.to_dict() if hasattr(existing, "to_dict") else existing
        super().__init__(message, extra={"existing": payload})
        self.existing = existing


class NotFoundError(AppError):
    status_code = 404


class UpstreamError(AppError):
    status_code = 500
