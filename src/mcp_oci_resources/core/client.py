"""
OCI SDK Client Manager.

Owns the single long-lived backend connection for the server process:
- SDK config built from the resolved credentials, validated lazily on first use
- one cached client per service class, created on demand
- convenient properties for every service the tools call
- one teardown path (``close``) invoked at shutdown

Environment Variables:
- OCI_ENABLE_RETRIES: Use the SDK default retry strategy (default: true)
- OCI_REQUEST_TIMEOUT: Per-request timeout in seconds
"""
from __future__ import annotations

import os
import threading
from typing import TYPE_CHECKING, Any, Dict, Optional, Type, TypeVar

import oci
from oci.config import validate_config

from .observability import get_logger

if TYPE_CHECKING:
    from mcp_oci_resources.config import OCIConfig

T = TypeVar("T")


class OCIClientManager:
    """Manages OCI SDK clients with caching and a single teardown path.

    Clients are created lazily, so a manager built from incomplete
    credentials can exist; the first client request validates the config.

    Example:
        manager = OCIClientManager(config.oci)
        instances = manager.compute.list_instances(compartment_id).data
    """

    def __init__(self, oci_config: OCIConfig):
        """Initialize the client manager.

        Args:
            oci_config: Resolved OCI credentials and defaults
        """
        self._oci_config = oci_config
        self._sdk_config: Optional[Dict[str, Any]] = None
        self._clients: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._closed = False

        self._logger = get_logger("oci-mcp.client")

    @property
    def default_compartment_id(self) -> Optional[str]:
        """Compartment used when a call does not name one."""
        return self._oci_config.default_compartment_id

    @property
    def is_closed(self) -> bool:
        return self._closed

    def _build_sdk_config(self) -> Dict[str, Any]:
        if self._sdk_config is None:
            sdk_config = self._oci_config.to_sdk_config()
            validate_config(sdk_config)
            self._sdk_config = sdk_config
            self._logger.info("OCI SDK config validated", region=sdk_config.get("region"))
        return self._sdk_config

    def get_client(self, client_class: Type[T]) -> T:
        """Get or create a cached OCI client instance.

        Args:
            client_class: OCI SDK client class (e.g., oci.core.ComputeClient)

        Returns:
            Cached client instance
        """
        cache_key = f"{client_class.__module__}.{client_class.__name__}"

        with self._lock:
            if self._closed:
                raise RuntimeError("OCI client manager has been closed")

            if cache_key in self._clients:
                return self._clients[cache_key]

            client_config = dict(self._build_sdk_config())

            kwargs: Dict[str, Any] = {}

            if os.getenv("OCI_ENABLE_RETRIES", "true").lower() == "true":
                kwargs["retry_strategy"] = oci.retry.DEFAULT_RETRY_STRATEGY

            timeout = os.getenv("OCI_REQUEST_TIMEOUT")
            if timeout:
                kwargs["timeout"] = float(timeout)

            client = client_class(client_config, **kwargs)
            self._clients[cache_key] = client
            self._logger.debug("Created OCI client", client=client_class.__name__)
            return client

    # Convenience properties, one per service used by the tools

    @property
    def compute(self) -> oci.core.ComputeClient:
        """Get Compute client for instance, image and attachment operations."""
        return self.get_client(oci.core.ComputeClient)

    @property
    def block_storage(self) -> oci.core.BlockstorageClient:
        """Get BlockStorage client for volume operations."""
        return self.get_client(oci.core.BlockstorageClient)

    @property
    def virtual_network(self) -> oci.core.VirtualNetworkClient:
        """Get VirtualNetwork client for VCN, subnet, gateway and NSG operations."""
        return self.get_client(oci.core.VirtualNetworkClient)

    @property
    def object_storage(self) -> oci.object_storage.ObjectStorageClient:
        """Get ObjectStorage client for bucket and object operations."""
        return self.get_client(oci.object_storage.ObjectStorageClient)

    @property
    def load_balancer(self) -> oci.load_balancer.LoadBalancerClient:
        return self.get_client(oci.load_balancer.LoadBalancerClient)

    @property
    def database(self) -> oci.database.DatabaseClient:
        """Get Database client for DB system, database and ADB operations."""
        return self.get_client(oci.database.DatabaseClient)

    @property
    def analytics(self) -> oci.analytics.AnalyticsClient:
        return self.get_client(oci.analytics.AnalyticsClient)

    @property
    def data_safe(self) -> oci.data_safe.DataSafeClient:
        return self.get_client(oci.data_safe.DataSafeClient)

    @property
    def monitoring(self) -> oci.monitoring.MonitoringClient:
        """Get Monitoring client for alarms and metrics."""
        return self.get_client(oci.monitoring.MonitoringClient)

    @property
    def logging(self) -> oci.logging.LoggingManagementClient:
        """Get LoggingManagement client."""
        return self.get_client(oci.logging.LoggingManagementClient)

    @property
    def notifications(self) -> oci.ons.NotificationControlPlaneClient:
        """Get Notifications control plane client for topics."""
        return self.get_client(oci.ons.NotificationControlPlaneClient)

    @property
    def events(self) -> oci.events.EventsClient:
        return self.get_client(oci.events.EventsClient)

    @property
    def vaults(self) -> oci.vault.VaultsClient:
        """Get Vaults client for secret operations."""
        return self.get_client(oci.vault.VaultsClient)

    @property
    def kms_vault(self) -> oci.key_management.KmsVaultClient:
        """Get KMS vault client for vault operations."""
        return self.get_client(oci.key_management.KmsVaultClient)

    @property
    def certificates(self) -> oci.certificates_management.CertificatesManagementClient:
        return self.get_client(oci.certificates_management.CertificatesManagementClient)

    @property
    def identity(self) -> oci.identity.IdentityClient:
        """Get Identity client for IAM operations."""
        return self.get_client(oci.identity.IdentityClient)

    def close(self) -> None:
        """Release every cached client. The manager cannot be reused afterwards."""
        with self._lock:
            if self._closed:
                return
            count = len(self._clients)
            self._clients.clear()
            self._sdk_config = None
            self._closed = True
        self._logger.info("OCI client manager closed", released_clients=count)


# Global client instance, owned by the process entry point
_client_manager: Optional[OCIClientManager] = None


def get_client_manager(oci_config: Optional[OCIConfig] = None) -> OCIClientManager:
    """Get the global OCI client manager instance.

    Creates a new instance from ``oci_config`` (or the loaded application
    config) if one doesn't exist.
    """
    global _client_manager
    if _client_manager is None:
        if oci_config is None:
            from mcp_oci_resources.config import get_config
            oci_config = get_config().oci
        _client_manager = OCIClientManager(oci_config)
    return _client_manager


def reset_client_manager() -> None:
    """Close and drop the global client manager (shutdown hook)."""
    global _client_manager
    if _client_manager is not None:
        _client_manager.close()
    _client_manager = None
