"""
OCI Database and Analytics domain tool.

DB systems, databases, Autonomous Databases, backups, Data Safe targets and
Analytics instances.
"""
from __future__ import annotations

from .dispatcher import DatabaseAnalyticsDispatcher
from .models import (
    DATABASE_SCHEMA,
    AutonomousDatabasePayload,
    BackupPayload,
    DatabaseCreateInput,
    DatabaseGetInput,
    DatabaseListInput,
    DatabaseManageInput,
    DatabasePayload,
)

__all__ = [
    "DATABASE_SCHEMA",
    "DatabaseAnalyticsDispatcher",
    # Call variants
    "DatabaseListInput",
    "DatabaseGetInput",
    "DatabaseCreateInput",
    "DatabaseManageInput",
    # Payloads
    "AutonomousDatabasePayload",
    "DatabasePayload",
    "BackupPayload",
]
