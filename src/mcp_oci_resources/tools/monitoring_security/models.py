"""
Pydantic models for the OCI Monitoring and Security domain tool.

Covers alarms and metrics, notifications, events, logging, network security
groups, vaults and secrets, certificates, and IAM users, groups and policies.
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
from mcp_oci_resources.tools.rules import SecurityRuleInput

MonitoringListType = Literal[
    "alarms",
    "metrics",
    "metric-data",
    "notifications",
    "events",
    "log-groups",
    "logs",
    "network-security-groups",
    "security-lists",
    "vault-secrets",
    "certificates",
    "policies",
    "users",
    "groups",
]
MonitoringGetType = Literal[
    "alarm",
    "notification-topic",
    "log-group",
    "log",
    "network-security-group",
    "security-list",
    "vault",
    "secret",
    "certificate",
    "policy",
    "user",
    "group",
]
MonitoringCreateType = Literal[
    "alarm",
    "notification-topic",
    "log-group",
    "network-security-group",
    "vault",
    "policy",
    "user",
    "group",
]
MonitoringManageVerb = Literal[
    "enable-alarm",
    "disable-alarm",
    "update-alarm",
    "delete-alarm",
    "add-security-rule",
    "remove-security-rule",
    "update-secret",
    "rotate-secret",
    "add-user-to-group",
    "remove-user-from-group",
    "attach-policy",
    "detach-policy",
]

Severity = Literal["CRITICAL", "ERROR", "WARNING", "INFO"]


# =============================================================================
# Creation payloads
# =============================================================================

class AlarmPayload(PayloadBase):
    resource_type: Literal["alarm"]

    compartment_id: str = Field(..., description="Compartment OCID", min_length=1)
    display_name: str = Field(..., description="Alarm name", min_length=1)
    metric_compartment_id: str = Field(..., description="Compartment of the metric", min_length=1)
    namespace: str = Field(..., description="Metric namespace (e.g., oci_computeagent)", min_length=1)
    query: str = Field(..., description="MQL query (e.g., CpuUtilization[1m].mean() > 80)", min_length=1)
    severity: Severity
    destinations: list[str] = Field(..., description="Notification topic OCIDs", min_length=1)
    is_enabled: bool = True
    body: str | None = Field(default=None, description="Notification message body")
    pending_duration: str = Field(default="PT5M", description="ISO 8601 duration")


class NotificationTopicPayload(PayloadBase):
    resource_type: Literal["notification-topic"]

    compartment_id: str = Field(..., description="Compartment OCID", min_length=1)
    name: str = Field(..., description="Topic name", min_length=1)
    description: str | None = None


class LogGroupPayload(PayloadBase):
    resource_type: Literal["log-group"]

    compartment_id: str = Field(..., description="Compartment OCID", min_length=1)
    display_name: str = Field(..., description="Log group name", min_length=1)
    description: str | None = None


class NetworkSecurityGroupPayload(PayloadBase):
    resource_type: Literal["network-security-group"]

    compartment_id: str = Field(..., description="Compartment OCID", min_length=1)
    vcn_id: str = Field(..., description="VCN OCID", min_length=1)
    display_name: str = Field(..., description="NSG name", min_length=1)
    security_rules: list[SecurityRuleInput] = Field(
        default_factory=list,
        description="Rules added one call at a time after the group is created"
    )


class VaultPayload(PayloadBase):
    resource_type: Literal["vault"]

    compartment_id: str = Field(..., description="Compartment OCID", min_length=1)
    display_name: str = Field(..., description="Vault name", min_length=1)
    vault_type: Literal["DEFAULT", "VIRTUAL_PRIVATE"] = "DEFAULT"


class PolicyPayload(PayloadBase):
    resource_type: Literal["policy"]

    compartment_id: str = Field(..., description="Compartment OCID", min_length=1)
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    statements: list[str] = Field(..., description="Policy statements", min_length=1)


class UserPayload(PayloadBase):
    resource_type: Literal["user"]

    compartment_id: str = Field(..., description="Tenancy OCID", min_length=1)
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    email: str | None = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class GroupPayload(PayloadBase):
    resource_type: Literal["group"]

    compartment_id: str = Field(..., description="Tenancy OCID", min_length=1)
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    members: list[str] = Field(
        default_factory=list,
        description="User OCIDs added one call at a time after the group is created"
    )


MonitoringPayload = Annotated[
    Union[
        AlarmPayload,
        NotificationTopicPayload,
        LogGroupPayload,
        NetworkSecurityGroupPayload,
        VaultPayload,
        PolicyPayload,
        UserPayload,
        GroupPayload,
    ],
    Field(discriminator="resource_type")
]


# =============================================================================
# Call variants
# =============================================================================

class MonitoringListInput(ListInputBase):
    resource_type: MonitoringListType
    metric_namespace: str | None = Field(default=None, description="Metric namespace (metrics)")
    metric_query: str | None = Field(default=None, description="MQL query (metric-data)")
    start_time: datetime | None = Field(default=None, description="Window start (metric-data)")
    end_time: datetime | None = Field(default=None, description="Window end (metric-data)")
    log_group_id: str | None = Field(default=None, description="Log group OCID (logs)")
    vault_id: str | None = Field(default=None, description="Vault OCID (vault-secrets)")
    vcn_id: str | None = Field(default=None, description="VCN OCID (network security groups)")


class MonitoringGetInput(GetInputBase):
    resource_type: MonitoringGetType
    log_group_id: str | None = Field(default=None, description="Log group OCID (log)")


class MonitoringCreateInput(CreateInputBase):
    resource_type: MonitoringCreateType
    data: MonitoringPayload


class MonitoringManageInput(ManageInputBase):
    action: MonitoringManageVerb
    resource_type: Literal["alarm", "network-security-group", "secret", "group", "policy"]

    # Alarm update
    query: str | None = None
    severity: Severity | None = None
    is_enabled: bool | None = None
    # Network security group rules
    security_rule: SecurityRuleInput | None = None
    security_rule_id: str | None = None
    # Secret content, base64 encoded
    secret_content: str | None = None
    # Group membership
    user_id: str | None = None
    group_id: str | None = Field(default=None, description="Group OCID (defaults to resourceId)")
    # Policy statements
    statements: list[str] | None = None


MONITORING_SCHEMA = CallSchema(
    "oci-monitoring-security",
    (MonitoringListInput, MonitoringGetInput, MonitoringCreateInput, MonitoringManageInput),
)
