"""
Pydantic models for the OCI Database and Analytics domain tool.

All models use Pydantic v2 with ConfigDict for validation.
"""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import Field

from mcp_oci_resources.core.models import (
    CallSchema,
    CreateInputBase,
    GetInputBase,
    ListInputBase,
    ManageInputBase,
    PayloadBase,
)

DatabaseListType = Literal[
    "db-systems",
    "databases",
    "autonomous-databases",
    "db-homes",
    "db-nodes",
    "backups",
    "data-safe-targets",
    "analytics-instances",
]
DatabaseGetType = Literal[
    "db-system",
    "database",
    "autonomous-database",
    "db-home",
    "backup",
    "data-safe-target",
    "analytics-instance",
]
DatabaseManageVerb = Literal[
    "start-database",
    "stop-database",
    "restart-database",
    "start-autonomous-db",
    "stop-autonomous-db",
    "scale-autonomous-db",
    "restore-database",
    "clone-database",
    "delete-backup",
]

ADMIN_PASSWORD_MIN_LENGTH = 12


# =============================================================================
# Creation payloads
# =============================================================================

class AutonomousDatabasePayload(PayloadBase):
    """Autonomous Database provisioning details."""
    resource_type: Literal["autonomous-database"]

    compartment_id: str = Field(..., description="Compartment OCID", min_length=1)
    db_name: str = Field(..., description="Database name (alphanumeric, max 14)", min_length=1, max_length=14)
    cpu_core_count: int = Field(..., description="OCPU count", ge=1)
    data_storage_size_in_tbs: int = Field(
        ...,
        alias="dataStorageSizeInTBs",
        description="Storage in TB",
        ge=1
    )
    admin_password: str = Field(
        ...,
        description="ADMIN user password",
        min_length=ADMIN_PASSWORD_MIN_LENGTH
    )
    display_name: str | None = Field(default=None, description="Display name (defaults to dbName)")
    db_version: str | None = None
    db_workload: Literal["OLTP", "DW", "AJD", "APEX"] = "OLTP"
    is_auto_scaling_enabled: bool = False
    is_free_tier: bool = False
    license_model: Literal["LICENSE_INCLUDED", "BRING_YOUR_OWN_LICENSE"] = "LICENSE_INCLUDED"
    subnet_id: str | None = Field(default=None, description="Subnet OCID for a private endpoint")
    nsg_ids: list[str] | None = Field(default=None, description="Network security group OCIDs")


class DatabasePayload(PayloadBase):
    """A new database in an existing DB home."""
    resource_type: Literal["database"]

    db_home_id: str = Field(..., description="DB home OCID", min_length=1)
    db_name: str = Field(..., description="Database name", min_length=1, max_length=8)
    admin_password: str = Field(
        ...,
        description="SYS/SYSTEM password",
        min_length=ADMIN_PASSWORD_MIN_LENGTH
    )
    db_version: str | None = None
    character_set: str = "AL32UTF8"
    ncharacter_set: str = "AL16UTF16"
    pdb_name: str | None = None


class BackupPayload(PayloadBase):
    resource_type: Literal["backup"]

    database_id: str = Field(..., description="Database OCID to back up", min_length=1)
    display_name: str = Field(..., description="Backup display name", min_length=1)


DatabasePayloadUnion = Annotated[
    Union[AutonomousDatabasePayload, DatabasePayload, BackupPayload],
    Field(discriminator="resource_type")
]


# =============================================================================
# Call variants
# =============================================================================

class DatabaseListInput(ListInputBase):
    resource_type: DatabaseListType
    db_system_id: str | None = Field(default=None, description="DB system OCID")
    db_home_id: str | None = Field(default=None, description="DB home OCID")


class DatabaseGetInput(GetInputBase):
    resource_type: DatabaseGetType


class DatabaseCreateInput(CreateInputBase):
    resource_type: Literal["autonomous-database", "database", "backup"]
    data: DatabasePayloadUnion


class DatabaseManageInput(ManageInputBase):
    action: DatabaseManageVerb
    resource_type: Literal["db-node", "database", "autonomous-database", "backup"]

    cpu_core_count: int | None = Field(default=None, description="New OCPU count (scale)", ge=1)
    data_storage_size_in_tbs: int | None = Field(
        default=None,
        alias="dataStorageSizeInTBs",
        description="New storage in TB (scale)",
        ge=1
    )
    timestamp: datetime | None = Field(default=None, description="Point in time (restore)")
    clone_name: str | None = Field(default=None, description="Clone display name (clone)")
    target_compartment_id: str | None = Field(
        default=None,
        description="Compartment for the clone (defaults to the configured compartment)"
    )


DATABASE_SCHEMA = CallSchema(
    "oci-database-analytics",
    (DatabaseListInput, DatabaseGetInput, DatabaseCreateInput, DatabaseManageInput),
)
