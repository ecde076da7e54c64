"""
Core infrastructure modules for the OCI Resource MCP Server.

This package contains:
- client: OCI SDK client manager (the backend collaborator)
- dispatcher: Base action dispatcher shared by the service domains
- errors: Error classification and protocol errors
- formatters: Response envelope building and serialization
- models: Call envelope bases and response envelope models
- observability: Structured logging
"""

from .client import OCIClientManager, get_client_manager, reset_client_manager
from .dispatcher import BaseDispatcher, compact, generated_name
from .errors import (
    ClassifiedError,
    DispatchError,
    ErrorKind,
    PartialCompletionError,
    PreconditionError,
    UnsupportedOperationError,
    classify_error,
    invalid_params,
    method_not_found,
    server_unavailable,
)
from .formatters import (
    JSONFormatter,
    detail_envelope,
    failure_envelope,
    list_envelope,
    operation_envelope,
    render_envelope,
    to_record,
)
from .models import (
    CallSchema,
    ConfigurationGuidance,
    DetailEnvelope,
    Envelope,
    ListEnvelope,
    OperationEnvelope,
    describe_validation_error,
)
from .observability import configure_logging, get_logger

__all__ = [
    # Client
    "OCIClientManager",
    "get_client_manager",
    "reset_client_manager",
    # Dispatch
    "BaseDispatcher",
    "compact",
    "generated_name",
    # Errors
    "ClassifiedError",
    "DispatchError",
    "ErrorKind",
    "PartialCompletionError",
    "PreconditionError",
    "UnsupportedOperationError",
    "classify_error",
    "invalid_params",
    "method_not_found",
    "server_unavailable",
    # Formatters
    "JSONFormatter",
    "detail_envelope",
    "failure_envelope",
    "list_envelope",
    "operation_envelope",
    "render_envelope",
    "to_record",
    # Models
    "CallSchema",
    "ConfigurationGuidance",
    "DetailEnvelope",
    "Envelope",
    "ListEnvelope",
    "OperationEnvelope",
    "describe_validation_error",
    # Observability
    "configure_logging",
    "get_logger",
]
