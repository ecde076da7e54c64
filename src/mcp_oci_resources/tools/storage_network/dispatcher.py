"""
Storage and networking dispatcher: Object Storage, virtual networking and
load balancers.
"""
from __future__ import annotations

from typing import Any

import oci

from mcp_oci_resources.core.dispatcher import BaseDispatcher, generated_name
from mcp_oci_resources.core.formatters import (
    detail_envelope,
    list_envelope,
    operation_envelope,
)
from mcp_oci_resources.core.models import DetailEnvelope, Envelope
from mcp_oci_resources.tools.rules import SecurityRuleInput, egress_rule, ingress_rule

from .models import (
    BucketPayload,
    GatewayPayload,
    RouteTablePayload,
    SecurityListPayload,
    StorageNetworkCreateInput,
    StorageNetworkGetInput,
    StorageNetworkListInput,
    StorageNetworkManageInput,
    SubnetPayload,
    VcnPayload,
)

# resourceType -> (VirtualNetworkClient list method, label)
NETWORK_LISTS = {
    "vcns": ("list_vcns", "VCNs"),
    "subnets": ("list_subnets", "subnets"),
    "security-lists": ("list_security_lists", "security lists"),
    "route-tables": ("list_route_tables", "route tables"),
    "internet-gateways": ("list_internet_gateways", "internet gateways"),
    "nat-gateways": ("list_nat_gateways", "NAT gateways"),
}

# resourceType -> (VirtualNetworkClient get method, label)
NETWORK_GETS = {
    "vcn": ("get_vcn", "VCN"),
    "subnet": ("get_subnet", "subnet"),
    "security-list": ("get_security_list", "security list"),
    "route-table": ("get_route_table", "route table"),
    "internet-gateway": ("get_internet_gateway", "internet gateway"),
    "nat-gateway": ("get_nat_gateway", "NAT gateway"),
}

# Response headers reported for an object
OBJECT_HEADERS = {
    "content-length": "contentLength",
    "content-type": "contentType",
    "content-md5": "contentMd5",
    "etag": "etag",
    "last-modified": "lastModified",
    "storage-tier": "storageTier",
    "archival-state": "archivalState",
}


def split_rules(
    rules: list[SecurityRuleInput]
) -> tuple[list[oci.core.models.IngressSecurityRule], list[oci.core.models.EgressSecurityRule]]:
    """Convert rules to SDK ingress and egress lists by direction."""
    ingress = [ingress_rule(rule) for rule in rules if rule.direction == "INGRESS"]
    egress = [egress_rule(rule) for rule in rules if rule.direction == "EGRESS"]
    return ingress, egress


class StorageNetworkDispatcher(BaseDispatcher):
    """Routes oci-storage-network calls to Object Storage, VirtualNetwork and LB clients."""

    domain = "storage-network"

    verb_targets = {
        "upload-object": ("object", "bucket"),
        "download-object": ("object",),
        "delete-object": ("object",),
        "delete-bucket": ("bucket",),
        "delete-vcn": ("vcn",),
        "update-security-list": ("security-list",),
    }

    async def namespace(self, namespace_name: str | None) -> str:
        """Given namespace, or the tenancy's Object Storage namespace."""
        if namespace_name:
            return namespace_name
        response = await self.call(self._client.object_storage.get_namespace)
        return response.data

    def object_name(self, call: Any) -> str:
        return call.object_name or call.resource_id

    # -------------------------------------------------------------------------
    # list
    # -------------------------------------------------------------------------

    async def list_resources(self, call: StorageNetworkListInput) -> Envelope:
        if call.resource_type == "buckets":
            namespace = await self.namespace(call.namespace_name)
            response = await self.call(
                self._client.object_storage.list_buckets,
                namespace,
                self.compartment(call),
                limit=self.limit(call),
            )
            return list_envelope(response.data, "buckets", next_page=response.next_page)

        if call.resource_type == "objects":
            bucket_name = self.require(call.bucket_name, "Listing objects requires bucketName")
            namespace = await self.namespace(call.namespace_name)
            response = await self.call(
                self._client.object_storage.list_objects,
                namespace,
                bucket_name,
                prefix=call.prefix,
                limit=self.limit(call),
            )
            listing = response.data
            return list_envelope(
                listing.objects,
                "objects",
                next_page=listing.next_start_with,
                message=f"Found {len(listing.objects or [])} objects in bucket {bucket_name}",
            )

        if call.resource_type == "load-balancers":
            response = await self.call(
                self._client.load_balancer.list_load_balancers,
                self.compartment(call),
                display_name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                limit=self.limit(call),
            )
            return list_envelope(response.data, "load balancers", next_page=response.next_page)

        if call.resource_type in NETWORK_LISTS:
            method, label = NETWORK_LISTS[call.resource_type]
            response = await self.call(
                getattr(self._client.virtual_network, method),
                self.compartment(call),
                vcn_id=call.vcn_id if call.resource_type != "vcns" else None,
                display_name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                limit=self.limit(call),
            )
            return list_envelope(response.data, label, next_page=response.next_page)

        raise self.unsupported(call.resource_type)

    # -------------------------------------------------------------------------
    # get
    # -------------------------------------------------------------------------

    async def get_resource(self, call: StorageNetworkGetInput) -> Envelope:
        if call.resource_type == "bucket":
            namespace = await self.namespace(call.namespace_name)
            response = await self.call(
                self._client.object_storage.get_bucket, namespace, call.resource_id
            )
            return detail_envelope(response.data, "bucket", call.resource_id)

        if call.resource_type == "object":
            return await self._head_object(call)

        if call.resource_type == "load-balancer":
            response = await self.call(
                self._client.load_balancer.get_load_balancer, call.resource_id
            )
            return detail_envelope(response.data, "load balancer", call.resource_id)

        if call.resource_type in NETWORK_GETS:
            method, label = NETWORK_GETS[call.resource_type]
            response = await self.call(
                getattr(self._client.virtual_network, method), call.resource_id
            )
            return detail_envelope(response.data, label, call.resource_id)

        raise self.unsupported(call.resource_type)

    async def _head_object(self, call: StorageNetworkGetInput) -> DetailEnvelope:
        bucket_name = self.require(call.bucket_name, "Getting an object requires bucketName")
        object_name = self.object_name(call)
        namespace = await self.namespace(call.namespace_name)

        response = await self.call(
            self._client.object_storage.head_object, namespace, bucket_name, object_name
        )
        headers = response.headers or {}
        record = {"name": object_name, "bucketName": bucket_name, "namespace": namespace}
        for header, key in OBJECT_HEADERS.items():
            if headers.get(header) is not None:
                record[key] = headers.get(header)
        return detail_envelope(record, "object", object_name)

    # -------------------------------------------------------------------------
    # create
    # -------------------------------------------------------------------------

    async def create_resource(self, call: StorageNetworkCreateInput) -> Envelope:
        payload = call.data
        network = self._client.virtual_network

        if isinstance(payload, BucketPayload):
            namespace = await self.namespace(payload.namespace)
            details = oci.object_storage.models.CreateBucketDetails(
                name=payload.name,
                compartment_id=payload.compartment_id,
                storage_tier=payload.storage_tier,
                public_access_type=payload.public_access_type,
            )
            response = await self.call(self._client.object_storage.create_bucket, namespace, details)
            return operation_envelope(
                f"Bucket created successfully: {payload.name}",
                response.data,
                fallback_id=payload.name,
            )

        if isinstance(payload, VcnPayload):
            display_name = payload.display_name or generated_name("vcn")
            details = oci.core.models.CreateVcnDetails(
                compartment_id=payload.compartment_id,
                cidr_block=payload.cidr_block,
                display_name=display_name,
                dns_label=payload.dns_label,
            )
            response = await self.call(network.create_vcn, details)
            return operation_envelope(f"VCN created successfully: {display_name}", response.data)

        if isinstance(payload, SubnetPayload):
            display_name = payload.display_name or generated_name("subnet")
            details = oci.core.models.CreateSubnetDetails(
                compartment_id=payload.compartment_id,
                vcn_id=payload.vcn_id,
                cidr_block=payload.cidr_block,
                availability_domain=payload.availability_domain,
                display_name=display_name,
                dns_label=payload.dns_label,
                route_table_id=payload.route_table_id,
                security_list_ids=payload.security_list_ids,
                prohibit_public_ip_on_vnic=payload.prohibit_public_ip_on_vnic,
            )
            response = await self.call(network.create_subnet, details)
            return operation_envelope(f"Subnet created successfully: {display_name}", response.data)

        if isinstance(payload, SecurityListPayload):
            display_name = payload.display_name or generated_name("security-list")
            ingress, egress = split_rules(payload.security_rules)
            details = oci.core.models.CreateSecurityListDetails(
                compartment_id=payload.compartment_id,
                vcn_id=payload.vcn_id,
                display_name=display_name,
                ingress_security_rules=ingress,
                egress_security_rules=egress,
            )
            response = await self.call(network.create_security_list, details)
            return operation_envelope(
                f"Security list created successfully: {display_name}", response.data
            )

        if isinstance(payload, RouteTablePayload):
            display_name = payload.display_name or generated_name("route-table")
            details = oci.core.models.CreateRouteTableDetails(
                compartment_id=payload.compartment_id,
                vcn_id=payload.vcn_id,
                display_name=display_name,
                route_rules=[
                    oci.core.models.RouteRule(
                        network_entity_id=rule.network_entity_id,
                        destination=rule.destination,
                        destination_type=rule.destination_type,
                        description=rule.description,
                    )
                    for rule in payload.route_rules
                ],
            )
            response = await self.call(network.create_route_table, details)
            return operation_envelope(
                f"Route table created successfully: {display_name}", response.data
            )

        if isinstance(payload, GatewayPayload):
            return await self._create_gateway(payload)

        raise self.unsupported(call.resource_type)

    async def _create_gateway(self, payload: GatewayPayload) -> Envelope:
        network = self._client.virtual_network
        display_name = payload.display_name or generated_name(payload.resource_type)

        if payload.resource_type == "internet-gateway":
            details = oci.core.models.CreateInternetGatewayDetails(
                compartment_id=payload.compartment_id,
                vcn_id=payload.vcn_id,
                display_name=display_name,
                is_enabled=payload.is_enabled,
            )
            response = await self.call(network.create_internet_gateway, details)
            label = "Internet gateway"
        else:
            details = oci.core.models.CreateNatGatewayDetails(
                compartment_id=payload.compartment_id,
                vcn_id=payload.vcn_id,
                display_name=display_name,
                block_traffic=not payload.is_enabled,
            )
            response = await self.call(network.create_nat_gateway, details)
            label = "NAT gateway"

        return operation_envelope(f"{label} created successfully: {display_name}", response.data)

    # -------------------------------------------------------------------------
    # manage
    # -------------------------------------------------------------------------

    async def manage_resource(self, call: StorageNetworkManageInput) -> Envelope:
        object_storage = self._client.object_storage

        if call.action in ("upload-object", "download-object", "delete-object"):
            bucket_name = self.require(call.bucket_name, f"{call.action} requires bucketName")
            object_name = self.object_name(call)
            namespace = await self.namespace(call.namespace_name)

            if call.action == "upload-object":
                content = self.require(call.object_content, "upload-object requires objectContent")
                await self.call(
                    object_storage.put_object,
                    namespace,
                    bucket_name,
                    object_name,
                    content.encode("utf-8"),
                    content_type=call.content_type or "application/octet-stream",
                )
                return operation_envelope(
                    f"Object uploaded successfully: {object_name}",
                    fallback_id=object_name,
                )

            if call.action == "download-object":
                response = await self.call(
                    object_storage.get_object, namespace, bucket_name, object_name
                )
                body = response.data.content
                content = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
                return operation_envelope(
                    f"Object downloaded successfully: {object_name}",
                    {"name": object_name, "bucketName": bucket_name, "content": content},
                    fallback_id=object_name,
                )

            await self.call(object_storage.delete_object, namespace, bucket_name, object_name)
            return operation_envelope(
                f"Object deletion initiated: {object_name}",
                fallback_id=object_name,
            )

        if call.action == "delete-bucket":
            bucket_name = call.bucket_name or call.resource_id
            namespace = await self.namespace(call.namespace_name)
            await self.call(object_storage.delete_bucket, namespace, bucket_name)
            return operation_envelope(
                f"Bucket deletion initiated: {bucket_name}",
                fallback_id=bucket_name,
            )

        if call.action == "delete-vcn":
            await self.call(self._client.virtual_network.delete_vcn, call.resource_id)
            return operation_envelope(
                f"VCN deletion initiated: {call.resource_id}",
                fallback_id=call.resource_id,
            )

        if call.action == "update-security-list":
            rules = self.require(
                call.security_rules,
                "update-security-list requires at least one entry in securityRules"
            )
            ingress, egress = split_rules(rules)
            details = oci.core.models.UpdateSecurityListDetails(
                ingress_security_rules=ingress or None,
                egress_security_rules=egress or None,
            )
            response = await self.call(
                self._client.virtual_network.update_security_list, call.resource_id, details
            )
            return operation_envelope(
                f"Security list updated: {call.resource_id}",
                response.data,
                fallback_id=call.resource_id,
            )

        raise self.unsupported(call.resource_type)
