"""
OCI Resource MCP Server Configuration

Handles environment variables, OCI credentials and server settings.
Credentials are read from environment variables first; any that are missing
are filled from the OCI config file profile when one exists.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import oci
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from mcp_oci_resources import __version__
from mcp_oci_resources.core.observability import get_logger

logger = get_logger("oci-mcp.config")


class ToolMode(str, Enum):
    """How the tool catalog is exposed."""
    DOMAINS = "domains"
    CONSOLIDATED = "consolidated"


# Required credential field -> environment variable carrying it
REQUIRED_CREDENTIALS: dict[str, str] = {
    "tenancy_id": "OCI_TENANCY_ID",
    "user_id": "OCI_USER_ID",
    "fingerprint": "OCI_KEY_FINGERPRINT",
    "key_file": "OCI_PRIVATE_KEY_PATH",
    "region": "OCI_REGION",
}

CREDENTIAL_DESCRIPTIONS: dict[str, str] = {
    "OCI_TENANCY_ID": "Your OCI tenancy OCID",
    "OCI_USER_ID": "Your OCI user OCID",
    "OCI_KEY_FINGERPRINT": "Fingerprint of your API signing key",
    "OCI_PRIVATE_KEY_PATH": "Path to your private API key file",
    "OCI_REGION": "Your OCI region (e.g., us-ashburn-1)",
    "OCI_COMPARTMENT_ID": "Default compartment OCID (optional, defaults to the tenancy)",
}

# OCI config file key -> credential field
_CONFIG_FILE_KEYS: dict[str, str] = {
    "tenancy": "tenancy_id",
    "user": "user_id",
    "fingerprint": "fingerprint",
    "key_file": "key_file",
    "region": "region",
    "pass_phrase": "pass_phrase",
}


class ServerConfig(BaseModel):
    """MCP Server configuration."""
    name: str = Field(default="oci-mcp-server", description="Server name")
    version: str = Field(default=__version__, description="Server version")
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Render logs as JSON")
    tool_mode: ToolMode = Field(
        default=ToolMode.DOMAINS,
        description="domains: one tool per service domain; consolidated: single oci-manage tool"
    )


class OCIConfig(BaseModel):
    """OCI credentials and defaults."""
    tenancy_id: str | None = Field(default=None, description="Tenancy OCID")
    user_id: str | None = Field(default=None, description="User OCID")
    fingerprint: str | None = Field(default=None, description="API key fingerprint")
    key_file: str | None = Field(default=None, description="Private key file path")
    region: str | None = Field(default=None, description="OCI region")
    compartment_id: str | None = Field(default=None, description="Default compartment OCID")
    pass_phrase: str | None = Field(default=None, description="Private key passphrase")

    config_file: Path = Field(
        default=Path("~/.oci/config").expanduser(),
        description="OCI config file used to fill missing credentials"
    )
    profile: str = Field(default="DEFAULT", description="OCI config profile")

    @field_validator('config_file', mode='before')
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        return Path(v).expanduser()

    @field_validator(
        'tenancy_id', 'user_id', 'fingerprint', 'key_file', 'region',
        'compartment_id', 'pass_phrase',
        mode='before'
    )
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def missing_credentials(self) -> list[str]:
        """Environment variable names of the required values that are absent."""
        return [
            env_name
            for attr, env_name in REQUIRED_CREDENTIALS.items()
            if not getattr(self, attr)
        ]

    @property
    def default_compartment_id(self) -> str | None:
        """Configured compartment, falling back to the tenancy (root compartment)."""
        return self.compartment_id or self.tenancy_id

    def to_sdk_config(self) -> dict[str, Any]:
        """Config dict in the shape OCI SDK clients accept."""
        sdk_config = {
            "tenancy": self.tenancy_id,
            "user": self.user_id,
            "fingerprint": self.fingerprint,
            "key_file": self.key_file,
            "region": self.region,
        }
        if self.pass_phrase:
            sdk_config["pass_phrase"] = self.pass_phrase
        return sdk_config

    def fill_from_config_file(self) -> OCIConfig:
        """Return a copy with missing credentials taken from the config file profile."""
        if not self.missing_credentials() or not self.config_file.exists():
            return self

        try:
            file_config = oci.config.from_file(
                file_location=str(self.config_file),
                profile_name=self.profile
            )
        except Exception as e:
            logger.warning(
                "Could not read OCI config file profile",
                config_file=str(self.config_file),
                profile=self.profile,
                error=str(e)
            )
            return self

        updates = {
            attr: file_config[key]
            for key, attr in _CONFIG_FILE_KEYS.items()
            if not getattr(self, attr) and file_config.get(key)
        }
        if updates:
            logger.debug("Filled credentials from config file", fields=sorted(updates))
        return self.model_copy(update=updates)


@dataclass
class AppConfig:
    """Application configuration container."""
    server: ServerConfig = field(default_factory=ServerConfig)
    oci: OCIConfig = field(default_factory=OCIConfig)

    @classmethod
    def from_env(cls) -> AppConfig:
        """Load configuration from environment variables.

        Environment variables referenced:
        - OCI_MCP_NAME, OCI_MCP_LOG_LEVEL, OCI_MCP_JSON_LOGS, OCI_MCP_TOOL_MODE
        - OCI_TENANCY_ID, OCI_USER_ID, OCI_KEY_FINGERPRINT,
          OCI_PRIVATE_KEY_PATH, OCI_REGION (required)
        - OCI_COMPARTMENT_ID, OCI_KEY_PASSPHRASE (optional)
        - OCI_CONFIG_FILE, OCI_PROFILE (fallback credential source)
        """
        load_dotenv()

        oci_config = OCIConfig(
            tenancy_id=os.getenv("OCI_TENANCY_ID"),
            user_id=os.getenv("OCI_USER_ID"),
            fingerprint=os.getenv("OCI_KEY_FINGERPRINT"),
            key_file=os.getenv("OCI_PRIVATE_KEY_PATH"),
            region=os.getenv("OCI_REGION"),
            compartment_id=os.getenv("OCI_COMPARTMENT_ID"),
            pass_phrase=os.getenv("OCI_KEY_PASSPHRASE"),
            config_file=Path(os.getenv("OCI_CONFIG_FILE", "~/.oci/config")),
            profile=os.getenv("OCI_PROFILE", "DEFAULT"),
        )

        return cls(
            server=ServerConfig(
                name=os.getenv("OCI_MCP_NAME", "oci-mcp-server"),
                log_level=os.getenv("OCI_MCP_LOG_LEVEL", "INFO"),
                json_logs=os.getenv("OCI_MCP_JSON_LOGS", "false").lower() == "true",
                tool_mode=ToolMode(os.getenv("OCI_MCP_TOOL_MODE", "domains").lower()),
            ),
            oci=oci_config.fill_from_config_file(),
        )

    def validate_required(self) -> list[str]:
        """Validate required configuration and return list of missing items."""
        return self.oci.missing_credentials()


# Global config instance (lazy-loaded)
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
