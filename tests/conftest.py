"""
Pytest configuration and shared fixtures for OCI Resource MCP Server tests.
"""
from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

import pytest

from mcp_oci_resources.config import AppConfig, OCIConfig, ServerConfig, reset_config
from mcp_oci_resources.core.client import reset_client_manager

COMPARTMENT_ID = "ocid1.compartment.oc1..aaaaaaaexample"
TENANCY_ID = "ocid1.tenancy.oc1..aaaaaaaexample"
INSTANCE_ID = "ocid1.instance.oc1.iad.aaaaaaaexample"
VOLUME_ID = "ocid1.volume.oc1.iad.aaaaaaaexample"
VCN_ID = "ocid1.vcn.oc1.iad.aaaaaaaexample"
ADB_ID = "ocid1.autonomousdatabase.oc1.iad.aaaaaaaexample"


def oci_response(data: Any = None, next_page: str | None = None, headers: dict | None = None):
    """Stand-in for oci.response.Response."""
    return SimpleNamespace(data=data, next_page=next_page, headers=headers or {})


def payload_of(envelope) -> dict[str, Any]:
    """Wire form of an envelope."""
    return envelope.to_payload()


def text_payload(content) -> dict[str, Any]:
    """Decode the single text item returned by a tool call."""
    assert len(content) == 1
    return json.loads(content[0].text)


class FakeClientManager:
    """Client manager double exposing MagicMock SDK clients."""

    SERVICES = (
        "compute", "block_storage", "virtual_network", "object_storage",
        "load_balancer", "database", "analytics", "data_safe", "monitoring",
        "logging", "notifications", "events", "vaults", "kms_vault",
        "certificates", "identity",
    )

    def __init__(self, default_compartment_id: str | None = COMPARTMENT_ID):
        self.default_compartment_id = default_compartment_id
        self.closed = False
        for service in self.SERVICES:
            setattr(self, service, MagicMock(name=service))

    @property
    def is_closed(self) -> bool:
        return self.closed

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def reset_globals():
    """Drop process-wide singletons between tests."""
    reset_config()
    reset_client_manager()
    yield
    reset_config()
    reset_client_manager()


@pytest.fixture
def mock_compartment_id() -> str:
    return COMPARTMENT_ID


@pytest.fixture
def fake_client() -> FakeClientManager:
    return FakeClientManager()


@pytest.fixture
def oci_config() -> OCIConfig:
    """Complete credentials."""
    return OCIConfig(
        tenancy_id=TENANCY_ID,
        user_id="ocid1.user.oc1..aaaaaaaexample",
        fingerprint="aa:bb:cc:dd:ee:ff:00:11:22:33:44:55:66:77:88:99",
        key_file="/mock/path/to/key.pem",
        region="us-ashburn-1",
        compartment_id=COMPARTMENT_ID,
    )


@pytest.fixture
def app_config(oci_config: OCIConfig) -> AppConfig:
    return AppConfig(server=ServerConfig(), oci=oci_config)


@pytest.fixture
def unconfigured_app_config(tmp_path) -> AppConfig:
    """No credentials at all, and no config file to fall back to."""
    return AppConfig(
        server=ServerConfig(),
        oci=OCIConfig(config_file=tmp_path / "missing-config"),
    )


@pytest.fixture
def mock_instance() -> dict[str, Any]:
    """Compute instance record as returned by oci.util.to_dict."""
    return {
        "id": INSTANCE_ID,
        "display_name": "test-instance-01",
        "lifecycle_state": "RUNNING",
        "availability_domain": "AD-1",
        "compartment_id": COMPARTMENT_ID,
        "shape": "VM.Standard.E4.Flex",
        "time_created": "2024-01-15T10:30:00Z",
    }
