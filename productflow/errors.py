"""Structured error helpers for API responses."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


def build_error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


class AppError(Exception):
    """Application-scoped error for standardized API responses."""

    def __init__(self, status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details
        self.payload = build_error_payload(code, message, details)


class NotFoundError(AppError):
    """Record missing, or not visible to the acting user."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        details = {"resource": resource.lower().replace(" ", "_")}
        if resource_id is not None:
            details["id"] = str(resource_id)
        super().__init__(404, "not_found", message, details)


class InvalidRequestError(AppError):
    """Synchronous validation failure; nothing was created."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(400, code, message, details)


class PreconditionFailedError(AppError):
    """The referenced record exists but is not in a usable state."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(409, code, message, details)


class LimitReachedError(AppError):
    """Plan quota exhausted for one resource (projects, analyses, research, files)."""

    _MESSAGES = {
        "projects": "Project limit reached",
        "analyses": "Analysis limit reached",
        "research": "Research limit reached",
        "files": "File limit reached",
    }

    def __init__(self, resource: str, limit: int, used: int, plan_id: str):
        self.resource = resource
        message = f"{self._MESSAGES.get(resource, 'Usage limit reached')} for the {plan_id} plan ({used}/{limit}). Upgrade to continue."
        super().__init__(
            403,
            "limit_reached",
            message,
            {"resource": resource, "limit": limit, "used": used, "plan_id": plan_id},
        )


class GenerationFailedError(AppError):
    """A synchronous LLM stage failed or returned unusable output."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(502, "generation_failed", message, details)


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)
