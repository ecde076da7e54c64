"""
Tool catalog: the fixed set of tools the server advertises, and resolution
of an inbound call (tool name + argument bag) to a validated call envelope.

Two deployment modes:
- domains: one tool per service domain (oci-compute, oci-storage-network,
  oci-database-analytics, oci-monitoring-security)
- consolidated: a single oci-manage tool routed by ``service``
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from mcp import types
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from mcp_oci_resources.config import ToolMode
from mcp_oci_resources.core.dispatcher import BaseDispatcher
from mcp_oci_resources.core.errors import invalid_params, method_not_found
from mcp_oci_resources.core.models import CallInput, CallSchema, describe_validation_error
from mcp_oci_resources.core.observability import get_logger

from .compute import COMPUTE_SCHEMA, ComputeDispatcher
from .database_analytics import DATABASE_SCHEMA, DatabaseAnalyticsDispatcher
from .monitoring_security import MONITORING_SCHEMA, MonitoringSecurityDispatcher
from .storage_network import STORAGE_NETWORK_SCHEMA, StorageNetworkDispatcher

logger = get_logger("oci-mcp.catalog")

EXAMPLE_COMPARTMENT = "ocid1.compartment.oc1..aaaaaaaexample"


@dataclass(frozen=True)
class ToolDefinition:
    """One advertised tool and the domain that serves it."""

    name: str
    title: str
    description: str
    schema: CallSchema
    dispatcher_cls: type[BaseDispatcher]
    example: dict[str, Any] = field(default_factory=dict)

    def to_tool(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.schema.input_schema(),
            annotations=types.ToolAnnotations(
                title=self.title,
                readOnlyHint=False,
                destructiveHint=True,
                idempotentHint=False,
                openWorldHint=True,
            ),
        )


COMPUTE_TOOL = ToolDefinition(
    name="oci-compute",
    title="OCI Compute",
    description=(
        "Manage OCI compute resources: list, get, create and manage instances, "
        "images, shapes, block volumes and volume attachments. Manage actions: "
        "start, stop, reboot, terminate, attach-volume, detach-volume."
    ),
    schema=COMPUTE_SCHEMA,
    dispatcher_cls=ComputeDispatcher,
    example={"action": "list", "resourceType": "instances", "compartmentId": EXAMPLE_COMPARTMENT},
)

STORAGE_NETWORK_TOOL = ToolDefinition(
    name="oci-storage-network",
    title="OCI Storage and Networking",
    description=(
        "Manage OCI Object Storage and networking: buckets and objects, VCNs, "
        "subnets, security lists, route tables, internet and NAT gateways, and "
        "load balancers. Manage actions: upload-object, download-object, "
        "delete-object, delete-bucket, delete-vcn, update-security-list."
    ),
    schema=STORAGE_NETWORK_SCHEMA,
    dispatcher_cls=StorageNetworkDispatcher,
    example={"action": "list", "resourceType": "buckets", "compartmentId": EXAMPLE_COMPARTMENT},
)

DATABASE_TOOL = ToolDefinition(
    name="oci-database-analytics",
    title="OCI Database and Analytics",
    description=(
        "Manage OCI databases and analytics: DB systems, databases, Autonomous "
        "Databases, DB homes and nodes, backups, Data Safe targets and Analytics "
        "instances. Manage actions: start/stop/restart-database, "
        "start/stop/scale-autonomous-db, restore-database, clone-database, delete-backup."
    ),
    schema=DATABASE_SCHEMA,
    dispatcher_cls=DatabaseAnalyticsDispatcher,
    example={
        "action": "list",
        "resourceType": "autonomous-databases",
        "compartmentId": EXAMPLE_COMPARTMENT,
    },
)

MONITORING_TOOL = ToolDefinition(
    name="oci-monitoring-security",
    title="OCI Monitoring and Security",
    description=(
        "Manage OCI monitoring and security: alarms, metrics, notification topics, "
        "event rules, logging, network security groups, vaults and secrets, "
        "certificates, and IAM users, groups and policies."
    ),
    schema=MONITORING_SCHEMA,
    dispatcher_cls=MonitoringSecurityDispatcher,
    example={"action": "list", "resourceType": "alarms", "compartmentId": EXAMPLE_COMPARTMENT},
)

DOMAIN_TOOLS: tuple[ToolDefinition, ...] = (
    COMPUTE_TOOL,
    STORAGE_NETWORK_TOOL,
    DATABASE_TOOL,
    MONITORING_TOOL,
)

# Consolidated-mode service name -> owning domain tool
SERVICE_TOOLS: dict[str, ToolDefinition] = {
    "compute": COMPUTE_TOOL,
    "storage": STORAGE_NETWORK_TOOL,
    "network": STORAGE_NETWORK_TOOL,
    "database": DATABASE_TOOL,
    "analytics": DATABASE_TOOL,
    "monitoring": MONITORING_TOOL,
    "security": MONITORING_TOOL,
    "identity": MONITORING_TOOL,
}

CONSOLIDATED_TOOL_NAME = "oci-manage"


class ConsolidatedInput(BaseModel):
    """Arguments of the single oci-manage tool."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra='ignore',
        alias_generator=to_camel,
        populate_by_name=True,
    )

    service: Literal[
        "compute", "storage", "network", "database",
        "analytics", "monitoring", "security", "identity",
    ] = Field(..., description="OCI service to work with")
    action: str = Field(
        ...,
        description="list, get, create, or a manage verb (e.g., start, delete-bucket)",
        min_length=1
    )
    resource_type: str = Field(
        ...,
        description="Resource type (e.g., instances, buckets, vcns, autonomous-database)",
        min_length=1
    )
    resource_id: str | None = Field(default=None, description="Resource OCID (get/manage)")
    compartment_id: str | None = Field(default=None, description="Compartment OCID")
    parameters: dict[str, Any] = Field(
        default_factory=dict,
        description="Action-specific fields; for create, the payload (or {'data': payload})"
    )

    def to_domain_arguments(self) -> dict[str, Any]:
        """Argument bag for the owning domain tool."""
        explicit: dict[str, Any] = {"action": self.action, "resourceType": self.resource_type}
        if self.resource_id:
            explicit["resourceId"] = self.resource_id
        if self.compartment_id:
            explicit["compartmentId"] = self.compartment_id

        if self.action == "create":
            return {**explicit, "data": self.parameters.get("data", self.parameters)}
        return {**self.parameters, **explicit}


CONSOLIDATED_EXAMPLE = {
    "service": "compute",
    "action": "list",
    "resourceType": "instances",
    "compartmentId": EXAMPLE_COMPARTMENT,
}


def consolidated_tool() -> types.Tool:
    return types.Tool(
        name=CONSOLIDATED_TOOL_NAME,
        description=(
            "Manage Oracle Cloud Infrastructure resources (compute, storage, network, "
            "database, monitoring, identity) with one tool. Choose the service, an "
            "action (list, get, create or a manage verb) and a resource type."
        ),
        inputSchema=ConsolidatedInput.model_json_schema(by_alias=True),
        annotations=types.ToolAnnotations(
            title="OCI Manage",
            readOnlyHint=False,
            destructiveHint=True,
            idempotentHint=False,
            openWorldHint=True,
        ),
    )


class ToolCatalog:
    """Static tool listing plus call resolution for one deployment mode."""

    def __init__(self, mode: ToolMode = ToolMode.DOMAINS):
        self.mode = ToolMode(mode)
        if self.mode is ToolMode.CONSOLIDATED:
            self._tools = [consolidated_tool()]
        else:
            self._tools = [tool.to_tool() for tool in DOMAIN_TOOLS]
        self._domain_tools = {tool.name: tool for tool in DOMAIN_TOOLS}

    def list_tools(self) -> list[types.Tool]:
        return list(self._tools)

    def tool_names(self) -> list[str]:
        return [tool.name for tool in self._tools]

    def resolve(
        self,
        name: str,
        arguments: dict[str, Any] | None
    ) -> tuple[ToolDefinition, CallInput]:
        """Validate a call against the named tool.

        Returns:
            The owning domain tool and the narrowed call envelope

        Raises:
            McpError: METHOD_NOT_FOUND for an unknown tool,
                INVALID_PARAMS when the arguments match no variant
        """
        if name not in self.tool_names():
            raise method_not_found(name)

        if self.mode is ToolMode.CONSOLIDATED:
            try:
                consolidated = ConsolidatedInput.model_validate(arguments or {})
            except ValidationError as e:
                raise self._invalid(name, e) from None
            tool = SERVICE_TOOLS[consolidated.service]
            arguments = consolidated.to_domain_arguments()
        else:
            tool = self._domain_tools[name]

        try:
            call = tool.schema.validate(arguments)
        except ValidationError as e:
            raise self._invalid(tool.name, e) from None
        return tool, call

    @staticmethod
    def _invalid(tool_name: str, e: ValidationError):
        description = describe_validation_error(e)
        logger.info("Rejected invalid arguments", tool=tool_name, errors=description)
        return invalid_params(f"Invalid arguments for {tool_name}: {description}")
