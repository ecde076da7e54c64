"""
OCI Storage and Networking domain tool.

Object Storage buckets and objects, VCNs, subnets, security lists, route
tables, internet and NAT gateways, and load balancers.
"""
from __future__ import annotations

from .dispatcher import StorageNetworkDispatcher
from .models import (
    STORAGE_NETWORK_SCHEMA,
    StorageNetworkCreateInput,
    StorageNetworkGetInput,
    StorageNetworkListInput,
    StorageNetworkManageInput,
)

__all__ = [
    "STORAGE_NETWORK_SCHEMA",
    "StorageNetworkDispatcher",
    "StorageNetworkListInput",
    "StorageNetworkGetInput",
    "StorageNetworkCreateInput",
    "StorageNetworkManageInput",
]
