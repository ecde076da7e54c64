"""
Response normalization for tool results.

Turns backend results into one of the uniform envelopes and serializes the
envelope to the single text payload returned to the client.
"""
from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

import oci
from pydantic import BaseModel

from .models import DetailEnvelope, Envelope, ListEnvelope, OperationEnvelope


class JSONFormatter:
    """JSON formatting for envelopes."""

    @staticmethod
    def default_serializer(obj: Any) -> Any:
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, BaseModel):
            return obj.model_dump(by_alias=True)
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, bytes):
            return obj.decode("utf-8", errors="replace")
        if hasattr(obj, "swagger_types"):
            return oci.util.to_dict(obj)
        return str(obj)

    @staticmethod
    def format(data: Any, indent: int = 2) -> str:
        """Format data as JSON string."""
        return json.dumps(data, indent=indent, default=JSONFormatter.default_serializer)


def to_record(data: Any) -> Any:
    """Convert an SDK model (or list of them) to plain JSON-compatible data."""
    if data is None or isinstance(data, (str, int, float, bool)):
        return data
    return oci.util.to_dict(data)


def record_id(record: Any) -> str | None:
    """Identifier of a resource record, if it carries one."""
    if isinstance(record, dict):
        value = record.get("id")
    else:
        value = getattr(record, "id", None)
    return value if isinstance(value, str) and value else None


def list_envelope(
    items: Any,
    label: str,
    next_page: str | None = None,
    message: str | None = None
) -> ListEnvelope:
    """Build a list envelope; ``count`` always equals the number of items."""
    records = list(to_record(items) or [])
    return ListEnvelope(
        data=records,
        count=len(records),
        message=message or f"Found {len(records)} {label}",
        next_page=next_page or None,
    )


def detail_envelope(record: Any, label: str, resource_id: str) -> DetailEnvelope:
    return DetailEnvelope(
        data=to_record(record),
        message=f"Retrieved {label} details for {resource_id}",
    )


def operation_envelope(
    message: str,
    record: Any = None,
    fallback_id: str | None = None
) -> OperationEnvelope:
    """Build an operation envelope.

    ``operationId`` is the acted-upon record's id when it has one, otherwise
    the identifier supplied by the caller.
    """
    data = to_record(record)
    return OperationEnvelope(
        data=data,
        message=message,
        operation_id=record_id(data) or fallback_id,
    )


def failure_envelope(message: str) -> OperationEnvelope:
    return OperationEnvelope(success=False, message=message)


def render_envelope(envelope: Envelope) -> str:
    """Serialize an envelope to the text payload sent to the client."""
    return JSONFormatter.format(envelope.to_payload())
