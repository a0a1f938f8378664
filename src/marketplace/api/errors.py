"""Translate domain failures into JSON error responses.

Body shape: ``{"error": kind, "message": str, "errors": {field: [messages]}}``.
A stale write that loses the optimistic-version race is reported as
``ConcurrentModification`` (409) so the caller can retry. Anything else
unexpected is logged with its traceback and reported as an opaque
``StoreError`` so storage details never reach the caller.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ProteanException, ValidationError
from protean.integrations.fastapi import register_exception_handlers as register_protean_handlers

from marketplace.api.schemas import ErrorResponse
from marketplace.shared.errors import first_message

logger = structlog.get_logger(__name__)


def _normalise(messages) -> dict:
    if isinstance(messages, dict):
        return {str(k): [str(m) for m in (v if isinstance(v, list | tuple) else [v])] for k, v in messages.items()}
    return {"_": [str(messages)]} if messages else {}


def error_response(kind: str, status_code: int, messages) -> JSONResponse:
    errors = _normalise(messages)
    body = ErrorResponse(error=kind, message=first_message(errors) or kind, errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _from_exception(exc, default_kind, default_status):
    messages = getattr(exc, "messages", None) or str(exc)
    return error_response(
        getattr(exc, "kind", default_kind),
        getattr(exc, "status_code", default_status),
        messages,
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _from_exception(exc, "ValidationError", 400)


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return _from_exception(exc, "NotFound", 404)


async def version_conflict_handler(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    logger.warning("Concurrent modification", path=request.url.path, error=str(exc))
    return error_response(
        "ConcurrentModification",
        409,
        {"_": ["The records changed while the request was processed, retry the request"]},
    )


async def domain_error_handler(request: Request, exc: ProteanException) -> JSONResponse:
    if getattr(exc, "status_code", None) is None:
        logger.error("Unhandled domain error", path=request.url.path, error=str(exc), exc_info=exc)
        return error_response("StoreError", 500, "Internal error")
    return _from_exception(exc, "DomainError", 400)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = {}
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        errors.setdefault(location or "body", []).append(error.get("msg", "Invalid value"))
    return error_response("ValidationError", 400, errors)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unexpected error", path=request.url.path, error=str(exc), exc_info=exc)
    return error_response("StoreError", 500, "Internal error")


def register_exception_handlers(app: FastAPI) -> None:
    """Install Protean's handlers, then override them with the marketplace error body."""
    register_protean_handlers(app)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(ExpectedVersionError, version_conflict_handler)
    app.add_exception_handler(ProteanException, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
