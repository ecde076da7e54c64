"""
Pydantic models for the OCI Compute domain tool.

Call variants: list, get, create (instance or volume payload) and the
instance/volume management verbs.
"""
from __future__ import annotations

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

ComputeListType = Literal["instances", "images", "shapes", "volumes", "volume-attachments"]
ComputeGetType = Literal["instance", "image", "volume", "volume-attachment"]
ComputeManageVerb = Literal[
    "start", "stop", "reboot", "terminate", "attach-volume", "detach-volume"
]


# =============================================================================
# Creation payloads
# =============================================================================

class InstancePayload(PayloadBase):
    """Launch details for a compute instance."""
    resource_type: Literal["instance"]

    availability_domain: str = Field(..., description="Availability domain name", min_length=1)
    compartment_id: str = Field(..., description="Compartment OCID", min_length=1)
    shape: str = Field(..., description="Instance shape (e.g., VM.Standard.E4.Flex)", min_length=1)
    image_id: str = Field(..., description="Image OCID to boot from", min_length=1)
    display_name: str | None = Field(default=None, description="Instance display name")
    metadata: dict[str, str] | None = Field(default=None, description="Instance metadata")
    subnet_id: str | None = Field(default=None, description="Subnet OCID for the primary VNIC")
    ssh_authorized_keys: list[str] | None = Field(
        default=None,
        description="SSH public keys written to ssh_authorized_keys metadata"
    )


class VolumePayload(PayloadBase):
    """Block volume creation details."""
    resource_type: Literal["volume"]

    availability_domain: str = Field(..., description="Availability domain name", min_length=1)
    compartment_id: str = Field(..., description="Compartment OCID", min_length=1)
    size_in_gbs: int = Field(..., alias="sizeInGBs", description="Size in GB (minimum 50)", ge=50)
    display_name: str | None = Field(default=None, description="Volume display name")
    vpus_per_gb: int | None = Field(
        default=None,
        alias="vpusPerGB",
        description="Performance units per GB (0, 10, 20, ...)",
        ge=0
    )


ComputePayload = Annotated[
    Union[InstancePayload, VolumePayload],
    Field(discriminator="resource_type")
]


# =============================================================================
# Call variants
# =============================================================================

class ComputeListInput(ListInputBase):
    resource_type: ComputeListType
    availability_domain: str | None = Field(default=None, description="Filter by availability domain")


class ComputeGetInput(GetInputBase):
    resource_type: ComputeGetType


class ComputeCreateInput(CreateInputBase):
    resource_type: Literal["instance", "volume"]
    data: ComputePayload


class ComputeManageInput(ManageInputBase):
    action: ComputeManageVerb
    resource_type: Literal["instance", "volume", "volume-attachment"]

    instance_id: str | None = Field(default=None, description="Instance OCID (attach-volume)")
    volume_id: str | None = Field(default=None, description="Volume OCID (attach-volume)")
    attachment_type: Literal["iscsi", "paravirtualized"] = Field(
        default="iscsi",
        description="Volume attachment type (attach-volume)"
    )


COMPUTE_SCHEMA = CallSchema(
    "oci-compute",
    (ComputeListInput, ComputeGetInput, ComputeCreateInput, ComputeManageInput),
)
