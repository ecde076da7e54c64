"""
Pydantic models for the OCI Storage and Networking domain tool.

Covers Object Storage buckets and objects, VCNs and their subnets, security
lists, route tables and gateways, and load balancers.
"""
from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mcp_oci_resources.core.models import (
    CallSchema,
    CreateInputBase,
    GetInputBase,
    ListInputBase,
    ManageInputBase,
    PayloadBase,
)
from mcp_oci_resources.tools.rules import SecurityRuleInput

StorageNetworkListType = Literal[
    "buckets",
    "objects",
    "vcns",
    "subnets",
    "security-lists",
    "route-tables",
    "internet-gateways",
    "nat-gateways",
    "load-balancers",
]
StorageNetworkGetType = Literal[
    "bucket",
    "object",
    "vcn",
    "subnet",
    "security-list",
    "route-table",
    "internet-gateway",
    "nat-gateway",
    "load-balancer",
]
StorageNetworkCreateType = Literal[
    "bucket",
    "vcn",
    "subnet",
    "security-list",
    "route-table",
    "internet-gateway",
    "nat-gateway",
]
StorageNetworkManageVerb = Literal[
    "upload-object",
    "download-object",
    "delete-object",
    "delete-bucket",
    "delete-vcn",
    "update-security-list",
]


class RouteRuleInput(BaseModel):
    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra='forbid',
        alias_generator=to_camel,
        populate_by_name=True,
    )

    network_entity_id: str = Field(..., description="Target gateway OCID", min_length=1)
    destination: str = Field(..., description="Destination CIDR", min_length=1)
    destination_type: Literal["CIDR_BLOCK", "SERVICE_CIDR_BLOCK"] = "CIDR_BLOCK"
    description: str | None = None


# =============================================================================
# Creation payloads
# =============================================================================

class BucketPayload(PayloadBase):
    resource_type: Literal["bucket"]

    name: str = Field(..., description="Bucket name", min_length=1)
    compartment_id: str = Field(..., description="Compartment OCID", min_length=1)
    namespace: str | None = Field(
        default=None,
        description="Object Storage namespace (defaults to the tenancy namespace)"
    )
    storage_tier: Literal["Standard", "InfrequentAccess", "Archive"] = "Standard"
    public_access_type: Literal["NoPublicAccess", "ObjectRead", "ObjectReadWithoutList"] = (
        "NoPublicAccess"
    )


class VcnPayload(PayloadBase):
    resource_type: Literal["vcn"]

    compartment_id: str = Field(..., description="Compartment OCID", min_length=1)
    cidr_block: str = Field(..., description="VCN CIDR block", min_length=1)
    display_name: str | None = None
    dns_label: str | None = Field(default=None, max_length=15)


class SubnetPayload(PayloadBase):
    resource_type: Literal["subnet"]

    compartment_id: str = Field(..., description="Compartment OCID", min_length=1)
    vcn_id: str = Field(..., description="Parent VCN OCID", min_length=1)
    cidr_block: str = Field(..., description="Subnet CIDR block", min_length=1)
    availability_domain: str | None = Field(
        default=None,
        description="Availability domain (omit for a regional subnet)"
    )
    display_name: str | None = None
    dns_label: str | None = Field(default=None, max_length=15)
    route_table_id: str | None = None
    security_list_ids: list[str] | None = None
    prohibit_public_ip_on_vnic: bool | None = None


class SecurityListPayload(PayloadBase):
    resource_type: Literal["security-list"]

    compartment_id: str = Field(..., description="Compartment OCID", min_length=1)
    vcn_id: str = Field(..., description="Parent VCN OCID", min_length=1)
    display_name: str | None = None
    security_rules: list[SecurityRuleInput] = Field(
        default_factory=list,
        description="Rules; each goes to the ingress or egress list by its direction"
    )


class RouteTablePayload(PayloadBase):
    resource_type: Literal["route-table"]

    compartment_id: str = Field(..., description="Compartment OCID", min_length=1)
    vcn_id: str = Field(..., description="Parent VCN OCID", min_length=1)
    display_name: str | None = None
    route_rules: list[RouteRuleInput] = Field(default_factory=list)


class GatewayPayload(PayloadBase):
    """Internet or NAT gateway."""
    resource_type: Literal["internet-gateway", "nat-gateway"]

    compartment_id: str = Field(..., description="Compartment OCID", min_length=1)
    vcn_id: str = Field(..., description="Parent VCN OCID", min_length=1)
    display_name: str | None = None
    is_enabled: bool = True


StorageNetworkPayload = Annotated[
    Union[
        BucketPayload,
        VcnPayload,
        SubnetPayload,
        SecurityListPayload,
        RouteTablePayload,
        GatewayPayload,
    ],
    Field(discriminator="resource_type")
]


# =============================================================================
# Call variants
# =============================================================================

class StorageNetworkListInput(ListInputBase):
    resource_type: StorageNetworkListType
    namespace_name: str | None = Field(
        default=None,
        description="Object Storage namespace (defaults to the tenancy namespace)"
    )
    bucket_name: str | None = Field(default=None, description="Bucket name (required for objects)")
    vcn_id: str | None = Field(default=None, description="Filter network resources by VCN")
    prefix: str | None = Field(default=None, description="Object name prefix (objects)")


class StorageNetworkGetInput(GetInputBase):
    resource_type: StorageNetworkGetType
    namespace_name: str | None = None
    bucket_name: str | None = Field(default=None, description="Bucket name (required for object)")
    object_name: str | None = Field(
        default=None,
        description="Object name (defaults to resourceId)"
    )


class StorageNetworkCreateInput(CreateInputBase):
    resource_type: StorageNetworkCreateType
    data: StorageNetworkPayload


class StorageNetworkManageInput(ManageInputBase):
    action: StorageNetworkManageVerb
    resource_type: Literal["bucket", "object", "vcn", "security-list"]

    namespace_name: str | None = None
    bucket_name: str | None = Field(default=None, description="Bucket name (object operations)")
    object_name: str | None = Field(
        default=None,
        description="Object name (defaults to resourceId)"
    )
    object_content: str | None = Field(default=None, description="Object body (upload-object)")
    content_type: str | None = Field(default=None, description="Content type (upload-object)")
    security_rules: list[SecurityRuleInput] | None = Field(
        default=None,
        description="Replacement rules (update-security-list)"
    )


STORAGE_NETWORK_SCHEMA = CallSchema(
    "oci-storage-network",
    (
        StorageNetworkListInput,
        StorageNetworkGetInput,
        StorageNetworkCreateInput,
        StorageNetworkManageInput,
    ),
)
