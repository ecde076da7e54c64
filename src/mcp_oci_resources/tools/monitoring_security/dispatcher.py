"""
Monitoring and security dispatcher: alarms, metrics, notifications, events,
logging, network security groups, vaults, certificates and IAM.

Two create paths issue several backend calls: a network security group with
inline rules (one call per rule after the group exists) and a group with
initial members (one call per member). These are not transactional; a
failure part way leaves the created resource in place and the failure
message says how far it got.
"""
from __future__ import annotations

import base64
import binascii

import oci

from mcp_oci_resources.core.dispatcher import BaseDispatcher
from mcp_oci_resources.core.errors import PartialCompletionError, PreconditionError
from mcp_oci_resources.core.formatters import (
    detail_envelope,
    list_envelope,
    operation_envelope,
    record_id,
    to_record,
)
from mcp_oci_resources.core.models import Envelope
from mcp_oci_resources.tools.rules import nsg_rule

from .models import (
    AlarmPayload,
    GroupPayload,
    LogGroupPayload,
    MonitoringCreateInput,
    MonitoringGetInput,
    MonitoringListInput,
    MonitoringManageInput,
    NetworkSecurityGroupPayload,
    NotificationTopicPayload,
    PolicyPayload,
    UserPayload,
    VaultPayload,
)

LIST_LABELS = {
    "alarms": "alarms",
    "notifications": "notification topics",
    "events": "event rules",
    "log-groups": "log groups",
    "logs": "logs",
    "network-security-groups": "network security groups",
    "security-lists": "security lists",
    "vault-secrets": "secrets",
    "certificates": "certificates",
    "policies": "policies",
    "users": "users",
    "groups": "groups",
}

# resourceType -> (client property, get method, label)
GETTERS = {
    "alarm": ("monitoring", "get_alarm", "alarm"),
    "notification-topic": ("notifications", "get_topic", "notification topic"),
    "log-group": ("logging", "get_log_group", "log group"),
    "network-security-group": (
        "virtual_network", "get_network_security_group", "network security group"
    ),
    "security-list": ("virtual_network", "get_security_list", "security list"),
    "vault": ("kms_vault", "get_vault", "vault"),
    "secret": ("vaults", "get_secret", "secret"),
    "certificate": ("certificates", "get_certificate", "certificate"),
    "policy": ("identity", "get_policy", "policy"),
    "user": ("identity", "get_user", "user"),
    "group": ("identity", "get_group", "group"),
}


class MonitoringSecurityDispatcher(BaseDispatcher):
    """Routes oci-monitoring-security calls to the monitoring, logging, vault and IAM clients."""

    domain = "monitoring-security"

    verb_targets = {
        "enable-alarm": ("alarm",),
        "disable-alarm": ("alarm",),
        "update-alarm": ("alarm",),
        "delete-alarm": ("alarm",),
        "add-security-rule": ("network-security-group",),
        "remove-security-rule": ("network-security-group",),
        "update-secret": ("secret",),
        "rotate-secret": ("secret",),
        "add-user-to-group": ("group",),
        "remove-user-from-group": ("group",),
        "attach-policy": ("policy",),
        "detach-policy": ("policy",),
    }

    # -------------------------------------------------------------------------
    # list
    # -------------------------------------------------------------------------

    async def list_resources(self, call: MonitoringListInput) -> Envelope:
        compartment_id = self.compartment(call)
        limit = self.limit(call)

        if call.resource_type == "metrics":
            namespace = self.require(call.metric_namespace, "Listing metrics requires metricNamespace")
            response = await self.call(
                self._client.monitoring.list_metrics,
                compartment_id,
                oci.monitoring.models.ListMetricsDetails(namespace=namespace),
                limit=limit,
            )
            return list_envelope(
                response.data,
                "metrics",
                next_page=response.next_page,
                message=f"Found {len(response.data or [])} metrics in namespace {namespace}",
            )

        if call.resource_type == "metric-data":
            return await self._summarize_metrics(call, compartment_id)

        if call.resource_type == "alarms":
            response = await self.call(
                self._client.monitoring.list_alarms,
                compartment_id,
                display_name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                limit=limit,
            )
        elif call.resource_type == "notifications":
            response = await self.call(
                self._client.notifications.list_topics,
                compartment_id,
                name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                limit=limit,
            )
        elif call.resource_type == "events":
            response = await self.call(
                self._client.events.list_rules,
                compartment_id,
                display_name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                limit=limit,
            )
        elif call.resource_type == "log-groups":
            response = await self.call(
                self._client.logging.list_log_groups,
                compartment_id,
                display_name=call.display_name,
                limit=limit,
            )
        elif call.resource_type == "logs":
            log_group_id = self.require(call.log_group_id, "Listing logs requires logGroupId")
            response = await self.call(
                self._client.logging.list_logs,
                log_group_id,
                display_name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                limit=limit,
            )
        elif call.resource_type == "network-security-groups":
            response = await self.call(
                self._client.virtual_network.list_network_security_groups,
                compartment_id=compartment_id,
                vcn_id=call.vcn_id,
                display_name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                limit=limit,
            )
        elif call.resource_type == "security-lists":
            response = await self.call(
                self._client.virtual_network.list_security_lists,
                compartment_id,
                vcn_id=call.vcn_id,
                display_name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                limit=limit,
            )
        elif call.resource_type == "vault-secrets":
            response = await self.call(
                self._client.vaults.list_secrets,
                compartment_id,
                vault_id=call.vault_id,
                name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                limit=limit,
            )
        elif call.resource_type == "certificates":
            response = await self.call(
                self._client.certificates.list_certificates,
                compartment_id=compartment_id,
                name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                limit=limit,
            )
            # CertificateCollection wraps its items
            return list_envelope(
                response.data.items, LIST_LABELS["certificates"], next_page=response.next_page
            )
        elif call.resource_type == "policies":
            response = await self.call(self._client.identity.list_policies, compartment_id, limit=limit)
        elif call.resource_type == "users":
            response = await self.call(self._client.identity.list_users, compartment_id, limit=limit)
        elif call.resource_type == "groups":
            response = await self.call(self._client.identity.list_groups, compartment_id, limit=limit)
        else:
            raise self.unsupported(call.resource_type)

        return list_envelope(
            response.data, LIST_LABELS[call.resource_type], next_page=response.next_page
        )

    async def _summarize_metrics(self, call: MonitoringListInput, compartment_id: str) -> Envelope:
        namespace = self.require(call.metric_namespace, "Listing metric data requires metricNamespace")
        query = self.require(call.metric_query, "Listing metric data requires metricQuery")
        if call.start_time is None or call.end_time is None:
            raise PreconditionError("Listing metric data requires startTime and endTime")

        details = oci.monitoring.models.SummarizeMetricsDataDetails(
            namespace=namespace,
            query=query,
            start_time=call.start_time,
            end_time=call.end_time,
        )
        response = await self.call(
            self._client.monitoring.summarize_metrics_data, compartment_id, details
        )
        return list_envelope(
            response.data,
            "metric streams",
            message=f"Retrieved metric data for {namespace}",
        )

    # -------------------------------------------------------------------------
    # get
    # -------------------------------------------------------------------------

    async def get_resource(self, call: MonitoringGetInput) -> Envelope:
        if call.resource_type == "log":
            log_group_id = self.require(call.log_group_id, "Getting a log requires logGroupId")
            response = await self.call(self._client.logging.get_log, log_group_id, call.resource_id)
            return detail_envelope(response.data, "log", call.resource_id)

        if call.resource_type not in GETTERS:
            raise self.unsupported(call.resource_type)

        client_name, method, label = GETTERS[call.resource_type]
        client = getattr(self._client, client_name)
        response = await self.call(getattr(client, method), call.resource_id)
        return detail_envelope(response.data, label, call.resource_id)

    # -------------------------------------------------------------------------
    # create
    # -------------------------------------------------------------------------

    async def create_resource(self, call: MonitoringCreateInput) -> Envelope:
        payload = call.data
        identity = self._client.identity

        if isinstance(payload, AlarmPayload):
            details = oci.monitoring.models.CreateAlarmDetails(
                display_name=payload.display_name,
                compartment_id=payload.compartment_id,
                metric_compartment_id=payload.metric_compartment_id,
                namespace=payload.namespace,
                query=payload.query,
                severity=payload.severity,
                destinations=payload.destinations,
                is_enabled=payload.is_enabled,
                body=payload.body,
                pending_duration=payload.pending_duration,
            )
            response = await self.call(self._client.monitoring.create_alarm, details)
            return operation_envelope(
                f"Alarm created successfully: {payload.display_name}", response.data
            )

        if isinstance(payload, NotificationTopicPayload):
            details = oci.ons.models.CreateTopicDetails(
                name=payload.name,
                compartment_id=payload.compartment_id,
                description=payload.description,
            )
            response = await self.call(self._client.notifications.create_topic, details)
            return operation_envelope(
                f"Notification topic created successfully: {payload.name}", response.data
            )

        if isinstance(payload, LogGroupPayload):
            details = oci.logging.models.CreateLogGroupDetails(
                compartment_id=payload.compartment_id,
                display_name=payload.display_name,
                description=payload.description,
            )
            response = await self.call(self._client.logging.create_log_group, details)
            # Log group creation is asynchronous; the work request is the handle
            headers = response.headers or {}
            return operation_envelope(
                f"Log group creation initiated: {payload.display_name}",
                fallback_id=headers.get("opc-work-request-id"),
            )

        if isinstance(payload, NetworkSecurityGroupPayload):
            return await self._create_network_security_group(payload)

        if isinstance(payload, VaultPayload):
            details = oci.key_management.models.CreateVaultDetails(
                compartment_id=payload.compartment_id,
                display_name=payload.display_name,
                vault_type=payload.vault_type,
            )
            response = await self.call(self._client.kms_vault.create_vault, details)
            return operation_envelope(
                f"Vault creation initiated: {payload.display_name}", response.data
            )

        if isinstance(payload, PolicyPayload):
            details = oci.identity.models.CreatePolicyDetails(
                compartment_id=payload.compartment_id,
                name=payload.name,
                description=payload.description,
                statements=payload.statements,
            )
            response = await self.call(identity.create_policy, details)
            return operation_envelope(f"Policy created successfully: {payload.name}", response.data)

        if isinstance(payload, UserPayload):
            details = oci.identity.models.CreateUserDetails(
                compartment_id=payload.compartment_id,
                name=payload.name,
                description=payload.description,
                email=payload.email,
            )
            response = await self.call(identity.create_user, details)
            return operation_envelope(f"User created successfully: {payload.name}", response.data)

        if isinstance(payload, GroupPayload):
            return await self._create_group(payload)

        raise self.unsupported(call.resource_type)

    async def _create_network_security_group(
        self, payload: NetworkSecurityGroupPayload
    ) -> Envelope:
        network = self._client.virtual_network
        details = oci.core.models.CreateNetworkSecurityGroupDetails(
            compartment_id=payload.compartment_id,
            vcn_id=payload.vcn_id,
            display_name=payload.display_name,
        )
        response = await self.call(network.create_network_security_group, details)
        nsg = response.data
        nsg_id = record_id(to_record(nsg))

        total = len(payload.security_rules)
        for applied, rule in enumerate(payload.security_rules):
            try:
                await self.call(
                    network.add_network_security_group_security_rules,
                    nsg_id,
                    oci.core.models.AddNetworkSecurityGroupSecurityRulesDetails(
                        security_rules=[nsg_rule(rule)]
                    ),
                )
            except Exception as e:
                raise PartialCompletionError(
                    e, f"network security group {nsg_id}", applied, total, "security rules"
                ) from e

        return operation_envelope(
            f"Network security group created successfully: {payload.display_name}", nsg
        )

    async def _create_group(self, payload: GroupPayload) -> Envelope:
        identity = self._client.identity
        details = oci.identity.models.CreateGroupDetails(
            compartment_id=payload.compartment_id,
            name=payload.name,
            description=payload.description,
        )
        response = await self.call(identity.create_group, details)
        group = response.data
        group_id = record_id(to_record(group))

        total = len(payload.members)
        for added, user_id in enumerate(payload.members):
            try:
                await self.call(
                    identity.add_user_to_group,
                    oci.identity.models.AddUserToGroupDetails(user_id=user_id, group_id=group_id),
                )
            except Exception as e:
                raise PartialCompletionError(
                    e, f"group {group_id}", added, total, "members"
                ) from e

        return operation_envelope(f"Group created successfully: {payload.name}", group)

    # -------------------------------------------------------------------------
    # manage
    # -------------------------------------------------------------------------

    async def manage_resource(self, call: MonitoringManageInput) -> Envelope:
        if call.action.endswith("-alarm"):
            return await self._manage_alarm(call)
        if call.action in ("add-security-rule", "remove-security-rule"):
            return await self._manage_security_rule(call)
        if call.action in ("update-secret", "rotate-secret"):
            return await self._manage_secret(call)
        if call.action in ("add-user-to-group", "remove-user-from-group"):
            return await self._manage_membership(call)
        if call.action in ("attach-policy", "detach-policy"):
            return await self._manage_policy(call)
        raise self.unsupported(call.resource_type)

    async def _manage_alarm(self, call: MonitoringManageInput) -> Envelope:
        monitoring = self._client.monitoring
        alarm_id = call.resource_id

        if call.action == "delete-alarm":
            await self.call(monitoring.delete_alarm, alarm_id)
            return operation_envelope(f"Alarm deletion initiated: {alarm_id}", fallback_id=alarm_id)

        if call.action == "enable-alarm":
            details = oci.monitoring.models.UpdateAlarmDetails(is_enabled=True)
            message = f"Alarm enabled: {alarm_id}"
        elif call.action == "disable-alarm":
            details = oci.monitoring.models.UpdateAlarmDetails(is_enabled=False)
            message = f"Alarm disabled: {alarm_id}"
        else:
            if call.query is None and call.severity is None and call.is_enabled is None:
                raise PreconditionError("update-alarm requires query, severity or isEnabled")
            details = oci.monitoring.models.UpdateAlarmDetails(
                query=call.query,
                severity=call.severity,
                is_enabled=call.is_enabled,
            )
            message = f"Alarm updated: {alarm_id}"

        response = await self.call(monitoring.update_alarm, alarm_id, details)
        return operation_envelope(message, response.data, fallback_id=alarm_id)

    async def _manage_security_rule(self, call: MonitoringManageInput) -> Envelope:
        network = self._client.virtual_network
        nsg_id = call.resource_id

        if call.action == "add-security-rule":
            rule = self.require(call.security_rule, "add-security-rule requires securityRule")
            response = await self.call(
                network.add_network_security_group_security_rules,
                nsg_id,
                oci.core.models.AddNetworkSecurityGroupSecurityRulesDetails(
                    security_rules=[nsg_rule(rule)]
                ),
            )
            return operation_envelope(
                f"Security rule added to NSG: {nsg_id}", response.data, fallback_id=nsg_id
            )

        rule_id = self.require(call.security_rule_id, "remove-security-rule requires securityRuleId")
        await self.call(
            network.remove_network_security_group_security_rules,
            nsg_id,
            oci.core.models.RemoveNetworkSecurityGroupSecurityRulesDetails(
                security_rule_ids=[rule_id]
            ),
        )
        return operation_envelope(
            f"Security rule {rule_id} removed from NSG: {nsg_id}", fallback_id=nsg_id
        )

    async def _manage_secret(self, call: MonitoringManageInput) -> Envelope:
        vaults = self._client.vaults
        secret_id = call.resource_id

        if call.action == "rotate-secret":
            await self.call(vaults.rotate_secret, secret_id)
            return operation_envelope(
                f"Secret rotation initiated: {secret_id}", fallback_id=secret_id
            )

        content = self.require(call.secret_content, "update-secret requires secretContent")
        try:
            base64.b64decode(content, validate=True)
        except (binascii.Error, ValueError):
            raise PreconditionError("secretContent must be base64 encoded") from None

        details = oci.vault.models.UpdateSecretDetails(
            secret_content=oci.vault.models.Base64SecretContentDetails(
                content=content,
                stage="CURRENT",
            )
        )
        response = await self.call(vaults.update_secret, secret_id, details)
        return operation_envelope(
            f"Secret updated: {secret_id}", response.data, fallback_id=secret_id
        )

    async def _manage_membership(self, call: MonitoringManageInput) -> Envelope:
        identity = self._client.identity

        if call.action == "add-user-to-group":
            user_id = self.require(call.user_id, "add-user-to-group requires userId")
            group_id = call.group_id or call.resource_id
            response = await self.call(
                identity.add_user_to_group,
                oci.identity.models.AddUserToGroupDetails(user_id=user_id, group_id=group_id),
            )
            return operation_envelope(
                f"User {user_id} added to group: {group_id}",
                response.data,
                fallback_id=group_id,
            )

        # resourceId is the user-group membership
        await self.call(identity.remove_user_from_group, call.resource_id)
        return operation_envelope(
            f"User removed from group (membership {call.resource_id})",
            fallback_id=call.resource_id,
        )

    async def _manage_policy(self, call: MonitoringManageInput) -> Envelope:
        identity = self._client.identity
        policy_id = call.resource_id
        statements = self.require(call.statements, f"{call.action} requires statements")

        current = await self.call(identity.get_policy, policy_id)
        existing = list(current.data.statements or [])

        if call.action == "attach-policy":
            updated = existing + [s for s in statements if s not in existing]
            verb = "attached to"
        else:
            updated = [s for s in existing if s not in statements]
            verb = "detached from"
            if not updated:
                raise PreconditionError(
                    "detach-policy would remove every statement; delete the policy instead"
                )

        response = await self.call(
            identity.update_policy,
            policy_id,
            oci.identity.models.UpdatePolicyDetails(statements=updated),
        )
        return operation_envelope(
            f"Statements {verb} policy: {policy_id}", response.data, fallback_id=policy_id
        )
