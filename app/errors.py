"""Error taxonomy and the response envelope used by every data endpoint."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "SUCCESS"
STATUS_FAIL = "FAIL"
STATUS_ERROR = "ERROR"

GENERIC_FAILURE_MESSAGE = "DB Error"


def build_envelope(
    status: str,
    data: Any = None,
    message: str = "",
    columns: Optional[List[Dict[str, str]]] = None,
    **extra: Any,
) -> Dict[str, Any]:
    payload = {"status": status, "data": data, "columns": columns, "message": message}
    payload.update(extra)
    return payload


def success(data: Any = None, message: str = "", columns: Optional[List[Dict[str, str]]] = None, **extra: Any) -> Dict[str, Any]:
    return build_envelope(STATUS_SUCCESS, data=data, message=message, columns=columns, **extra)


def failure(message: str = GENERIC_FAILURE_MESSAGE, data: Any = None) -> Dict[str, Any]:
    return build_envelope(STATUS_FAIL, data=data, message=message)


class RefDataError(Exception):
    """Base class for every failure the data layer reports."""

    kind = "error"


class ValidationError(RefDataError):
    """The uploaded payload cannot be staged."""

    kind = "validation"


class EmptyUploadError(ValidationError):
    """No data rows remain after the header boundary and blank-row filtering."""


class HeaderMismatchError(ValidationError):
    """Header text does not line up with the staging table's columns."""


class ConfigurationError(RefDataError):
    """Dataset configuration is missing or inconsistent with the code."""

    kind = "configuration"


class UnknownDatasetError(ConfigurationError):
    """No dataset descriptor (or no transfer routine name) for an id."""


class UnknownTransferRoutineError(ConfigurationError):
    """A configured transfer routine name has no registered implementation."""


class VersionNotFoundError(RefDataError):
    """A version row could not be resolved by label and dataset id."""

    kind = "version"


class PersistenceError(RefDataError):
    """Any underlying store failure."""

    kind = "persistence"


async def refdata_error_handler(request: Request, exc: RefDataError) -> JSONResponse:
    """Collapse every internal error kind into the generic FAIL envelope."""
    logger.error(
        "%s %s failed (%s): %s",
        request.method,
        request.url.path,
        exc.kind,
        exc,
    )
    return JSONResponse(status_code=200, content=failure())


# Upload bodies are part of the ETL boundary, whose failures only ever surface
# as the generic FAIL envelope
ENVELOPE_VALIDATION_PREFIXES = ("/uploads",)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed upload bodies answer with the FAIL envelope, other routes with 422."""
    if not request.url.path.startswith(ENVELOPE_VALIDATION_PREFIXES):
        return await request_validation_exception_handler(request, exc)
    logger.error(
        "%s %s failed (validation): %s",
        request.method,
        request.url.path,
        exc.errors(),
    )
    return JSONResponse(status_code=200, content=failure())
