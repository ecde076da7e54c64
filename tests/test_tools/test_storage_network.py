"""
Tests for the oci-storage-network domain tool.
"""
from __future__ import annotations

import asyncio
from types import SimpleNamespace

import oci
import pytest
from pydantic import ValidationError

from mcp_oci_resources.tools.storage_network import (
    STORAGE_NETWORK_SCHEMA,
    StorageNetworkDispatcher,
)

from tests.conftest import COMPARTMENT_ID, VCN_ID, oci_response, payload_of

NAMESPACE = "axaxnpcrorw5"
SECURITY_LIST_ID = "ocid1.securitylist.oc1.iad.aaaaaaaexample"

SSH_RULE = {
    "direction": "INGRESS",
    "protocol": "6",
    "source": "0.0.0.0/0",
    "tcpOptions": {"min": 22, "max": 22},
}
EGRESS_ALL = {"direction": "EGRESS", "protocol": "all", "destination": "0.0.0.0/0"}


def run(dispatcher: StorageNetworkDispatcher, arguments: dict) -> dict:
    call = STORAGE_NETWORK_SCHEMA.validate(arguments)
    return payload_of(asyncio.run(dispatcher.execute(call)))


@pytest.fixture
def dispatcher(fake_client) -> StorageNetworkDispatcher:
    fake_client.object_storage.get_namespace.return_value = oci_response(NAMESPACE)
    return StorageNetworkDispatcher(fake_client)


class TestObjectStorage:
    """Tests for bucket and object operations."""

    def test_list_buckets_resolves_namespace(self, dispatcher, fake_client):
        fake_client.object_storage.list_buckets.return_value = oci_response(
            [{"name": "logs"}, {"name": "backups"}]
        )

        payload = run(dispatcher, {"action": "list", "resourceType": "buckets"})

        assert payload["count"] == 2
        assert payload["message"] == "Found 2 buckets"
        fake_client.object_storage.list_buckets.assert_called_once_with(
            NAMESPACE, COMPARTMENT_ID, limit=50
        )

    def test_explicit_namespace_skips_lookup(self, dispatcher, fake_client):
        fake_client.object_storage.list_buckets.return_value = oci_response([])

        run(dispatcher, {"action": "list", "resourceType": "buckets", "namespaceName": "other"})

        fake_client.object_storage.get_namespace.assert_not_called()

    def test_list_objects(self, dispatcher, fake_client):
        listing = SimpleNamespace(objects=[{"name": "a.txt"}, {"name": "b.txt"}], next_start_with="c.txt")
        fake_client.object_storage.list_objects.return_value = oci_response(listing)

        payload = run(dispatcher, {
            "action": "list",
            "resourceType": "objects",
            "bucketName": "logs",
            "prefix": "a",
        })

        assert payload["count"] == 2
        assert payload["message"] == "Found 2 objects in bucket logs"
        assert payload["nextPage"] == "c.txt"

    def test_list_objects_requires_bucket(self, dispatcher, fake_client):
        payload = run(dispatcher, {"action": "list", "resourceType": "objects"})

        assert payload == {"success": False, "message": "Listing objects requires bucketName"}
        fake_client.object_storage.list_objects.assert_not_called()

    def test_get_object_metadata(self, dispatcher, fake_client):
        fake_client.object_storage.head_object.return_value = oci_response(
            headers={"content-length": "12", "content-type": "text/plain", "etag": "abc"}
        )

        payload = run(dispatcher, {
            "action": "get",
            "resourceType": "object",
            "resourceId": "notes.txt",
            "bucketName": "logs",
        })

        assert payload["data"] == {
            "name": "notes.txt",
            "bucketName": "logs",
            "namespace": NAMESPACE,
            "contentLength": "12",
            "contentType": "text/plain",
            "etag": "abc",
        }

    def test_create_bucket(self, dispatcher, fake_client):
        fake_client.object_storage.create_bucket.return_value = oci_response({"name": "logs"})

        payload = run(dispatcher, {
            "action": "create",
            "resourceType": "bucket",
            "data": {"name": "logs", "compartmentId": COMPARTMENT_ID},
        })

        assert payload["message"] == "Bucket created successfully: logs"
        assert payload["operationId"] == "logs"
        namespace, details = fake_client.object_storage.create_bucket.call_args.args
        assert namespace == NAMESPACE
        assert details.storage_tier == "Standard"
        assert details.public_access_type == "NoPublicAccess"

    def test_upload_object(self, dispatcher, fake_client):
        fake_client.object_storage.put_object.return_value = oci_response()

        payload = run(dispatcher, {
            "action": "upload-object",
            "resourceType": "object",
            "resourceId": "hello.txt",
            "bucketName": "logs",
            "objectContent": "hello",
        })

        assert payload["message"] == "Object uploaded successfully: hello.txt"
        fake_client.object_storage.put_object.assert_called_once_with(
            NAMESPACE, "logs", "hello.txt", b"hello", content_type="application/octet-stream"
        )

    def test_upload_requires_content(self, dispatcher, fake_client):
        payload = run(dispatcher, {
            "action": "upload-object",
            "resourceType": "object",
            "resourceId": "hello.txt",
            "bucketName": "logs",
        })

        assert payload["success"] is False
        fake_client.object_storage.put_object.assert_not_called()

    def test_download_object(self, dispatcher, fake_client):
        fake_client.object_storage.get_object.return_value = oci_response(
            SimpleNamespace(content=b"hello")
        )

        payload = run(dispatcher, {
            "action": "download-object",
            "resourceType": "object",
            "resourceId": "hello.txt",
            "bucketName": "logs",
        })

        assert payload["data"]["content"] == "hello"

    def test_delete_bucket_uses_resource_id(self, dispatcher, fake_client):
        fake_client.object_storage.delete_bucket.return_value = oci_response()

        payload = run(dispatcher, {"action": "delete-bucket", "resourceType": "bucket", "resourceId": "logs"})

        assert payload["operationId"] == "logs"
        fake_client.object_storage.delete_bucket.assert_called_once_with(NAMESPACE, "logs")


class TestNetworking:
    """Tests for VCN, subnet, security list and gateway operations."""

    def test_list_vcns_omits_vcn_filter(self, dispatcher, fake_client):
        fake_client.virtual_network.list_vcns.return_value = oci_response([{"id": VCN_ID}])

        payload = run(dispatcher, {"action": "list", "resourceType": "vcns", "vcnId": VCN_ID})

        assert payload["message"] == "Found 1 VCNs"
        fake_client.virtual_network.list_vcns.assert_called_once_with(COMPARTMENT_ID, limit=50)

    def test_list_subnets_by_vcn(self, dispatcher, fake_client):
        fake_client.virtual_network.list_subnets.return_value = oci_response([])

        run(dispatcher, {"action": "list", "resourceType": "subnets", "vcnId": VCN_ID})

        fake_client.virtual_network.list_subnets.assert_called_once_with(
            COMPARTMENT_ID, vcn_id=VCN_ID, limit=50
        )

    def test_get_vcn(self, dispatcher, fake_client):
        fake_client.virtual_network.get_vcn.return_value = oci_response({"id": VCN_ID})

        payload = run(dispatcher, {"action": "get", "resourceType": "vcn", "resourceId": VCN_ID})

        assert payload["message"] == f"Retrieved VCN details for {VCN_ID}"

    def test_create_security_list_splits_rules(self, dispatcher, fake_client):
        fake_client.virtual_network.create_security_list.return_value = oci_response({"id": SECURITY_LIST_ID})

        payload = run(dispatcher, {
            "action": "create",
            "resourceType": "security-list",
            "data": {
                "compartmentId": COMPARTMENT_ID,
                "vcnId": VCN_ID,
                "displayName": "web",
                "securityRules": [SSH_RULE, EGRESS_ALL],
            },
        })

        assert payload["operationId"] == SECURITY_LIST_ID
        details = fake_client.virtual_network.create_security_list.call_args.args[0]
        assert len(details.ingress_security_rules) == 1
        assert details.ingress_security_rules[0].tcp_options.destination_port_range.min == 22
        assert details.egress_security_rules[0].destination == "0.0.0.0/0"

    def test_ingress_rule_requires_source(self):
        with pytest.raises(ValidationError):
            STORAGE_NETWORK_SCHEMA.validate({
                "action": "create",
                "resourceType": "security-list",
                "data": {
                    "compartmentId": COMPARTMENT_ID,
                    "vcnId": VCN_ID,
                    "securityRules": [{"direction": "INGRESS", "protocol": "6"}],
                },
            })

    def test_create_nat_gateway(self, dispatcher, fake_client):
        fake_client.virtual_network.create_nat_gateway.return_value = oci_response({"id": "ocid1.natgateway.oc1..x"})

        payload = run(dispatcher, {
            "action": "create",
            "resourceType": "nat-gateway",
            "data": {"compartmentId": COMPARTMENT_ID, "vcnId": VCN_ID, "displayName": "nat"},
        })

        assert payload["message"] == "NAT gateway created successfully: nat"
        details = fake_client.virtual_network.create_nat_gateway.call_args.args[0]
        assert isinstance(details, oci.core.models.CreateNatGatewayDetails)
        assert details.block_traffic is False

    def test_update_security_list(self, dispatcher, fake_client):
        fake_client.virtual_network.update_security_list.return_value = oci_response({"id": SECURITY_LIST_ID})

        payload = run(dispatcher, {
            "action": "update-security-list",
            "resourceType": "security-list",
            "resourceId": SECURITY_LIST_ID,
            "securityRules": [SSH_RULE],
        })

        assert payload["message"] == f"Security list updated: {SECURITY_LIST_ID}"
        resource_id, details = fake_client.virtual_network.update_security_list.call_args.args
        assert resource_id == SECURITY_LIST_ID
        assert len(details.ingress_security_rules) == 1
        assert details.egress_security_rules is None

    def test_update_security_list_requires_rules(self, dispatcher, fake_client):
        payload = run(dispatcher, {
            "action": "update-security-list",
            "resourceType": "security-list",
            "resourceId": SECURITY_LIST_ID,
        })

        assert payload["success"] is False
        fake_client.virtual_network.update_security_list.assert_not_called()

    def test_inverted_port_range_rejected(self, fake_client):
        """An inverted range never reaches the backend."""
        with pytest.raises(ValidationError, match="exceeds max"):
            STORAGE_NETWORK_SCHEMA.validate({
                "action": "update-security-list",
                "resourceType": "security-list",
                "resourceId": SECURITY_LIST_ID,
                "securityRules": [{**SSH_RULE, "tcpOptions": {"min": 443, "max": 22}}],
            })
        fake_client.virtual_network.update_security_list.assert_not_called()

    def test_delete_vcn_conflict(self, dispatcher, fake_client):
        fake_client.virtual_network.delete_vcn.side_effect = oci.exceptions.ServiceError(
            status=409, code="Conflict", headers={}, message="VCN has dependent resources"
        )

        payload = run(dispatcher, {"action": "delete-vcn", "resourceType": "vcn", "resourceId": VCN_ID})

        assert payload == {
            "success": False,
            "message": "OCI API Error (409): VCN has dependent resources",
        }
