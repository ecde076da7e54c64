"""
Error handling for OCI resource operations.

Two families of failure live here:

- Business failures raised while dispatching a call (backend rejections,
  unmet preconditions, unsupported operations). These are turned into a
  ``success: false`` envelope by the dispatcher and never reach the client
  as a protocol error.
- Protocol failures (unknown tool, invalid arguments, server shutting down),
  raised as ``McpError`` so the transport answers with a JSON-RPC error.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND, ErrorData

UNKNOWN_ERROR = "Unknown error"

# Attribute names a backend error may carry its HTTP status under.
# oci.exceptions.ServiceError uses ``status``.
_STATUS_ATTRS = ("status", "status_code", "statusCode")


class ErrorKind(str, Enum):
    """Closed set of backend failure shapes."""
    STATUS_CODED = "status_coded"
    CODE_BEARING = "code_bearing"
    GENERIC = "generic"


@dataclass(frozen=True)
class ClassifiedError:
    """A backend failure reduced to one descriptive message."""

    kind: ErrorKind
    message: str
    status: int | str | None = None
    code: str | None = None


class DispatchError(Exception):
    """Base class for failures raised deliberately by a dispatcher.

    The message is user-facing and is surfaced verbatim.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class PreconditionError(DispatchError):
    """A well-formed call whose semantic prerequisite is not met."""


class UnsupportedOperationError(DispatchError):
    """An action/resource type combination the dispatcher cannot route."""

    def __init__(self, what: str, value: Any):
        self.value = value
        super().__init__(f"Unsupported {what}: {value}")


class PartialCompletionError(DispatchError):
    """A multi-call operation failed after its first call succeeded.

    Completed calls are not rolled back; the message reports what exists.
    """

    def __init__(self, cause: BaseException, created: str, completed: int, total: int, step: str):
        self.cause = cause
        self.created = created
        self.completed = completed
        self.total = total
        classified = classify_error(cause)
        super().__init__(
            f"{classified.message} ({created} was created; "
            f"{completed} of {total} {step} applied before the failure)"
        )


def _status_of(e: BaseException) -> int | str | None:
    for attr in _STATUS_ATTRS:
        value = getattr(e, attr, None)
        if value is not None and value != "":
            return value
    return None


def _message_of(e: BaseException) -> str | None:
    message = getattr(e, "message", None)
    if message:
        return str(message)
    return None


def classify_error(e: BaseException) -> ClassifiedError:
    """
    Reduce any backend exception to a single descriptive message.

    Classification order:
        1. HTTP-like status present -> ``OCI API Error ({status}): {message}``
        2. provider error code present -> ``OCI Error ({code}): {message}``
        3. otherwise -> ``OCI Error: {message}`` using the message or str(e)

    Args:
        e: The exception raised by the backend call

    Returns:
        ClassifiedError with the formatted message
    """
    message = _message_of(e)
    status = _status_of(e)
    code = getattr(e, "code", None) or None

    if status is not None:
        return ClassifiedError(
            kind=ErrorKind.STATUS_CODED,
            message=f"OCI API Error ({status}): {message or UNKNOWN_ERROR}",
            status=status,
            code=code,
        )

    if code is not None:
        return ClassifiedError(
            kind=ErrorKind.CODE_BEARING,
            message=f"OCI Error ({code}): {message or UNKNOWN_ERROR}",
            code=str(code),
        )

    return ClassifiedError(
        kind=ErrorKind.GENERIC,
        message=f"OCI Error: {message or str(e) or UNKNOWN_ERROR}",
    )


# =============================================================================
# Protocol-level failures
# =============================================================================

def method_not_found(tool_name: str) -> McpError:
    """Error for a call naming a tool that is not in the catalog."""
    return McpError(ErrorData(code=METHOD_NOT_FOUND, message=f"Unknown tool: {tool_name}"))


def invalid_params(message: str) -> McpError:
    """Error for arguments that fail schema validation."""
    return McpError(ErrorData(code=INVALID_PARAMS, message=message))


def server_unavailable(state: str) -> McpError:
    """Error for calls arriving after shutdown has begun."""
    return McpError(
        ErrorData(code=INTERNAL_ERROR, message=f"Server is {state}; no new calls are accepted")
    )
