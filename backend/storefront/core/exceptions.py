"""RFC 7807 Problem Details error handling.

Domain errors raised by the settings engine carry a stable ``code`` that is
rendered next to the standard problem members, so clients can branch on it
without parsing ``detail``.
"""

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class ProblemDetailError(Exception):
    """Raise for RFC 7807 problem+json responses."""

    def __init__(
        self,
        status: int,
        title: str,
        detail: str,
        error_type: str | None = None,
    ):
        self.status = status
        self.title = title
        self.detail = detail
        self.error_type = error_type or "about:blank"


class SettingsError(ProblemDetailError):
    """Base class for store settings failures. Never leaves partial writes behind."""

    status = 400
    title = "Settings Error"
    code = "settings_error"

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(status=self.status, title=self.title, detail=message)
        self.message = message
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.errors:
            data["errors"] = self.errors
        return data


class SettingsValidationError(SettingsError):
    """Bad scalar type/length, malformed switch payload or too many fields."""

    status = 422
    title = "Validation Error"
    code = "validation_error"


class TemplateNotAllowedError(SettingsError):
    """Switch target is neither enabled nor the tenant's current template."""

    status = 403
    title = "Template Not Allowed"
    code = "template_not_allowed"

    def __init__(self, template_id: str):
        super().__init__(f"Template '{template_id}' is not allowed")
        self.template_id = template_id


class StorageTransientError(SettingsError):
    """Connection reset/timeout talking to the database. Retried before surfacing."""

    status = 503
    title = "Storage Unavailable"
    code = "storage_unavailable"


def _problem_body(request: Request, exc: ProblemDetailError) -> dict[str, Any]:
    return {
        "type": exc.error_type,
        "title": exc.title,
        "status": exc.status,
        "detail": exc.detail,
        "instance": str(request.url.path),
    }


async def problem_detail_handler(request: Request, exc: ProblemDetailError) -> JSONResponse:
    content = _problem_body(request, exc)
    if isinstance(exc, SettingsError):
        content.update(exc.to_dict())
    return JSONResponse(
        status_code=exc.status,
        content=content,
        media_type="application/problem+json",
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "type": "about:blank",
            "title": exc.detail if isinstance(exc.detail, str) else "Error",
            "status": exc.status_code,
            "detail": exc.detail,
            "instance": str(request.url.path),
        },
        media_type="application/problem+json",
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "type": "about:blank",
            "title": "Validation Error",
            "status": 422,
            "code": SettingsValidationError.code,
            "detail": exc.errors(),
            "instance": str(request.url.path),
        },
        media_type="application/problem+json",
    )
