"""
OCI Monitoring and Security domain tool.
"""
from __future__ import annotations

from .dispatcher import MonitoringSecurityDispatcher
from .models import (
    MONITORING_SCHEMA,
    MonitoringCreateInput,
    MonitoringGetInput,
    MonitoringListInput,
    MonitoringManageInput,
)

__all__ = [
    "MONITORING_SCHEMA",
    "MonitoringSecurityDispatcher",
    "MonitoringListInput",
    "MonitoringGetInput",
    "MonitoringCreateInput",
    "MonitoringManageInput",
]
