"""
OCI Compute domain tool.

Lists, inspects, launches and manages compute instances, images, shapes,
block volumes and volume attachments.
"""
from __future__ import annotations

from .dispatcher import ComputeDispatcher
from .models import (
    COMPUTE_SCHEMA,
    ComputeCreateInput,
    ComputeGetInput,
    ComputeListInput,
    ComputeManageInput,
    InstancePayload,
    VolumePayload,
)

__all__ = [
    "COMPUTE_SCHEMA",
    "ComputeDispatcher",
    # Call variants
    "ComputeListInput",
    "ComputeGetInput",
    "ComputeCreateInput",
    "ComputeManageInput",
    # Payloads
    "InstancePayload",
    "VolumePayload",
]
