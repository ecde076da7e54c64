"""
Tests for configuration loading.
"""
from __future__ import annotations

from pathlib import Path

import pytest

from mcp_oci_resources.config import (
    REQUIRED_CREDENTIALS,
    AppConfig,
    OCIConfig,
    ToolMode,
    get_config,
    reset_config,
)

CREDENTIAL_ENV = {
    "OCI_TENANCY_ID": "ocid1.tenancy.oc1..aaaaaaaexample",
    "OCI_USER_ID": "ocid1.user.oc1..aaaaaaaexample",
    "OCI_KEY_FINGERPRINT": "aa:bb:cc",
    "OCI_PRIVATE_KEY_PATH": "/keys/api.pem",
    "OCI_REGION": "us-ashburn-1",
}


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Environment with no OCI variables and no reachable config file."""
    for name in list(CREDENTIAL_ENV) + [
        "OCI_COMPARTMENT_ID", "OCI_KEY_PASSPHRASE", "OCI_PROFILE",
        "OCI_MCP_NAME", "OCI_MCP_LOG_LEVEL", "OCI_MCP_JSON_LOGS", "OCI_MCP_TOOL_MODE",
    ]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("OCI_CONFIG_FILE", str(tmp_path / "no-such-config"))
    return monkeypatch


class TestOCIConfig:
    """Tests for OCIConfig."""

    def test_missing_credentials_lists_env_names(self, tmp_path):
        config = OCIConfig(tenancy_id="t", region="r", config_file=tmp_path / "none")
        assert config.missing_credentials() == [
            "OCI_USER_ID", "OCI_KEY_FINGERPRINT", "OCI_PRIVATE_KEY_PATH",
        ]

    def test_blank_values_count_as_missing(self, tmp_path):
        config = OCIConfig(tenancy_id="  ", config_file=tmp_path / "none")
        assert "OCI_TENANCY_ID" in config.missing_credentials()

    def test_complete(self, oci_config):
        assert oci_config.missing_credentials() == []

    def test_default_compartment_falls_back_to_tenancy(self, oci_config):
        assert oci_config.model_copy(update={"compartment_id": None}).default_compartment_id == (
            oci_config.tenancy_id
        )

    def test_to_sdk_config(self, oci_config):
        sdk_config = oci_config.to_sdk_config()
        assert sdk_config["tenancy"] == oci_config.tenancy_id
        assert sdk_config["key_file"] == oci_config.key_file
        assert "pass_phrase" not in sdk_config

    def test_fill_from_config_file(self, tmp_path):
        config_file = tmp_path / "config"
        key_file = tmp_path / "file.pem"
        key_file.write_text("dummy")
        config_file.write_text(
            "[DEFAULT]\n"
            "user=ocid1.user.oc1..fromfile\n"
            "fingerprint=11:22:33\n"
            f"key_file={key_file}\n"
            "tenancy=ocid1.tenancy.oc1..fromfile\n"
            "region=eu-frankfurt-1\n"
        )
        config = OCIConfig(region="us-ashburn-1", config_file=config_file).fill_from_config_file()
        assert config.user_id == "ocid1.user.oc1..fromfile"
        assert config.tenancy_id == "ocid1.tenancy.oc1..fromfile"
        # Environment values win over the file
        assert config.region == "us-ashburn-1"
        assert config.missing_credentials() == []

    def test_unreadable_profile_keeps_config(self, tmp_path):
        config_file = tmp_path / "config"
        config_file.write_text("[OTHER]\nregion=x\n")
        config = OCIConfig(config_file=config_file, profile="MISSING")
        assert config.fill_from_config_file() is config


class TestAppConfig:
    """Tests for environment loading."""

    def test_from_env(self, clean_env):
        for name, value in CREDENTIAL_ENV.items():
            clean_env.setenv(name, value)
        clean_env.setenv("OCI_MCP_TOOL_MODE", "consolidated")

        config = AppConfig.from_env()
        assert config.validate_required() == []
        assert config.oci.key_file == "/keys/api.pem"
        assert config.server.tool_mode is ToolMode.CONSOLIDATED
        assert config.server.name == "oci-mcp-server"

    def test_from_env_missing_everything(self, clean_env):
        config = AppConfig.from_env()
        assert config.validate_required() == list(REQUIRED_CREDENTIALS.values())

    def test_get_config_is_cached(self, clean_env):
        assert get_config() is get_config()
        first = get_config()
        reset_config()
        assert get_config() is not first
