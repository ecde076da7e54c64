"""
Tests for core errors module.
"""
from __future__ import annotations

import pytest
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND

from mcp_oci_resources.core.errors import (
    ErrorKind,
    PartialCompletionError,
    PreconditionError,
    UnsupportedOperationError,
    classify_error,
    invalid_params,
    method_not_found,
    server_unavailable,
)


class MockServiceError(Exception):
    """Mock OCI ServiceError for testing."""
    def __init__(self, status: int, code: str, message: str):
        self.status = status
        self.code = code
        self.message = message
        super().__init__(message)


class CodeOnlyError(Exception):
    def __init__(self, code: str, message: str | None = None):
        self.code = code
        self.message = message
        super().__init__(message or "")


class TestClassifyError:
    """Tests for classify_error."""

    def test_status_coded(self):
        """HTTP status wins and formats as an API error."""
        classified = classify_error(MockServiceError(404, "NotAuthorizedOrNotFound", "NotFound"))
        assert classified.kind is ErrorKind.STATUS_CODED
        assert classified.message == "OCI API Error (404): NotFound"
        assert classified.status == 404

    def test_status_code_attribute_variants(self):
        """status_code and statusCode are recognized too."""
        error = Exception("boom")
        error.statusCode = 503
        assert classify_error(error).message == "OCI API Error (503): Unknown error"

        error = Exception("boom")
        error.status_code = 429
        error.message = "TooManyRequests"
        assert classify_error(error).message == "OCI API Error (429): TooManyRequests"

    def test_status_code_camel_case_not_found(self):
        error = Exception("NotFound")
        error.statusCode = 404
        error.message = "NotFound"
        assert classify_error(error).message == "OCI API Error (404): NotFound"

    def test_code_bearing(self):
        classified = classify_error(CodeOnlyError("InvalidParameter", "Bad shape"))
        assert classified.kind is ErrorKind.CODE_BEARING
        assert classified.message == "OCI Error (InvalidParameter): Bad shape"

    def test_code_bearing_without_message(self):
        assert classify_error(CodeOnlyError("Timeout")).message == "OCI Error (Timeout): Unknown error"

    def test_generic_uses_str(self):
        classified = classify_error(RuntimeError("connection reset"))
        assert classified.kind is ErrorKind.GENERIC
        assert classified.message == "OCI Error: connection reset"

    def test_generic_without_text(self):
        assert classify_error(RuntimeError()).message == "OCI Error: Unknown error"

    def test_status_and_code_kept(self):
        classified = classify_error(MockServiceError(409, "Conflict", "Already exists"))
        assert classified.kind is ErrorKind.STATUS_CODED
        assert classified.status == 409
        assert classified.code == "Conflict"


class TestDispatchErrors:
    """Tests for dispatcher-raised failures."""

    def test_precondition_message_verbatim(self):
        assert PreconditionError("Bucket name is required").message == "Bucket name is required"

    def test_unsupported(self):
        assert UnsupportedOperationError("resource type", "widgets").message == (
            "Unsupported resource type: widgets"
        )

    def test_partial_completion_reports_progress(self):
        error = PartialCompletionError(
            MockServiceError(400, "InvalidParameter", "Bad rule"),
            created="network security group ocid1.nsg.oc1..x",
            completed=1,
            total=3,
            step="security rules",
        )
        assert error.message == (
            "OCI API Error (400): Bad rule (network security group ocid1.nsg.oc1..x "
            "was created; 1 of 3 security rules applied before the failure)"
        )
        assert error.completed == 1


class TestProtocolErrors:
    """Tests for JSON-RPC error constructors."""

    def test_method_not_found(self):
        error = method_not_found("oci-nothing")
        assert isinstance(error, McpError)
        assert error.error.code == METHOD_NOT_FOUND
        assert error.error.message == "Unknown tool: oci-nothing"

    def test_invalid_params(self):
        assert invalid_params("bad").error.code == INVALID_PARAMS

    def test_server_unavailable(self):
        error = server_unavailable("shutting down")
        assert error.error.code == INTERNAL_ERROR
        assert "shutting down" in error.error.message

    def test_raisable(self):
        with pytest.raises(McpError):
            raise method_not_found("x")
