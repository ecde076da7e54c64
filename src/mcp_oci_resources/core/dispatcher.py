"""
Base action dispatcher shared by every service domain.

A dispatcher receives an already-validated call envelope, routes it on
``action`` and ``resourceType`` to exactly one backend operation, and packages
the result. ``execute`` is the single boundary where exceptions are caught;
the routing methods below it let failures propagate.
"""
from __future__ import annotations

import asyncio
import time
from typing import Any, Callable

from .client import OCIClientManager
from .errors import (
    DispatchError,
    PreconditionError,
    UnsupportedOperationError,
    classify_error,
)
from .formatters import failure_envelope
from .models import DEFAULT_LIST_LIMIT, CallInput, Envelope
from .observability import get_logger


def compact(**kwargs: Any) -> dict[str, Any]:
    """Drop keyword arguments whose value is None."""
    return {key: value for key, value in kwargs.items() if value is not None}


def generated_name(prefix: str) -> str:
    """Timestamp-suffixed default name, e.g. ``instance-1718000000000``."""
    return f"{prefix}-{int(time.time() * 1000)}"


class BaseDispatcher:
    """Routes validated calls for one service domain to the OCI SDK."""

    domain: str = "base"

    # Manage verb -> resource types it applies to
    verb_targets: dict[str, tuple[str, ...]] = {}

    def __init__(self, client: OCIClientManager):
        self._client = client
        self._logger = get_logger(f"oci-mcp.{self.domain}")

    @property
    def default_compartment_id(self) -> str | None:
        return self._client.default_compartment_id

    def compartment(self, call: Any) -> str | None:
        """Compartment named by the call, or the configured default."""
        return getattr(call, "compartment_id", None) or self.default_compartment_id

    @staticmethod
    def limit(call: Any) -> int:
        return getattr(call, "limit", None) or DEFAULT_LIST_LIMIT

    async def call(self, operation: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run one blocking SDK operation off the event loop.

        Keyword arguments set to None are dropped so SDK defaults apply.
        """
        return await asyncio.to_thread(operation, *args, **compact(**kwargs))

    def require(self, value: Any, message: str) -> Any:
        """Return ``value`` or raise a precondition failure if it is empty."""
        if value is None or value == "" or value == []:
            raise PreconditionError(message)
        return value

    def check_target(self, verb: str, resource_type: str) -> None:
        """Reject a manage verb applied to a resource type it does not support."""
        allowed = self.verb_targets.get(verb)
        if allowed is not None and resource_type not in allowed:
            raise PreconditionError(
                f"Action '{verb}' is not supported for resource type '{resource_type}'; "
                f"expected {' or '.join(allowed)}"
            )

    async def execute(self, call: CallInput) -> Envelope:
        """Dispatch a call and always return an envelope.

        Backend failures are classified into a failure envelope here and
        nowhere else.
        """
        action = getattr(call, "action", None)
        resource_type = getattr(call, "resource_type", None)
        log = self._logger.bind(action=action, resource_type=resource_type)

        try:
            if action == "list":
                return await self.list_resources(call)
            if action == "get":
                return await self.get_resource(call)
            if action == "create":
                return await self.create_resource(call)
            if action in self.verb_targets:
                self.check_target(action, resource_type)
                return await self.manage_resource(call)
            raise UnsupportedOperationError("action", action)
        except DispatchError as e:
            log.info("Call rejected", reason=e.message)
            return failure_envelope(e.message)
        except Exception as e:
            classified = classify_error(e)
            log.warning(
                "OCI operation failed",
                kind=classified.kind.value,
                status=classified.status,
                code=classified.code,
                error=classified.message,
            )
            return failure_envelope(classified.message)

    async def list_resources(self, call: Any) -> Envelope:
        raise UnsupportedOperationError("action", "list")

    async def get_resource(self, call: Any) -> Envelope:
        raise UnsupportedOperationError("action", "get")

    async def create_resource(self, call: Any) -> Envelope:
        raise UnsupportedOperationError("action", "create")

    async def manage_resource(self, call: Any) -> Envelope:
        raise UnsupportedOperationError("action", call.action)

    @staticmethod
    def unsupported(resource_type: str) -> UnsupportedOperationError:
        return UnsupportedOperationError("resource type", resource_type)
