"""
Database and analytics dispatcher: DB systems, databases, Autonomous
Databases, backups, Data Safe targets and Analytics instances.
"""
from __future__ import annotations

import oci

from mcp_oci_resources.core.dispatcher import BaseDispatcher, generated_name
from mcp_oci_resources.core.errors import PreconditionError
from mcp_oci_resources.core.formatters import (
    detail_envelope,
    list_envelope,
    operation_envelope,
)
from mcp_oci_resources.core.models import Envelope

from .models import (
    AutonomousDatabasePayload,
    BackupPayload,
    DatabaseCreateInput,
    DatabaseGetInput,
    DatabaseListInput,
    DatabaseManageInput,
    DatabasePayload,
)

LIST_LABELS = {
    "db-systems": "DB systems",
    "databases": "databases",
    "autonomous-databases": "autonomous databases",
    "db-homes": "DB homes",
    "db-nodes": "DB nodes",
    "backups": "backups",
    "data-safe-targets": "Data Safe target databases",
    "analytics-instances": "analytics instances",
}

# resourceType -> (client property, get method, label)
GETTERS = {
    "db-system": ("database", "get_db_system", "DB system"),
    "database": ("database", "get_database", "database"),
    "autonomous-database": ("database", "get_autonomous_database", "autonomous database"),
    "db-home": ("database", "get_db_home", "DB home"),
    "backup": ("database", "get_backup", "backup"),
    "data-safe-target": ("data_safe", "get_target_database", "Data Safe target database"),
    "analytics-instance": ("analytics", "get_analytics_instance", "analytics instance"),
}

# Verb -> (db_node_action value, message stem)
NODE_ACTIONS = {
    "start-database": ("START", "Database start"),
    "stop-database": ("STOP", "Database stop"),
    "restart-database": ("SOFTRESET", "Database restart"),
}


class DatabaseAnalyticsDispatcher(BaseDispatcher):
    """Routes oci-database-analytics calls to the Database, Data Safe and Analytics clients."""

    domain = "database-analytics"

    verb_targets = {
        "start-database": ("db-node",),
        "stop-database": ("db-node",),
        "restart-database": ("db-node",),
        "start-autonomous-db": ("autonomous-database",),
        "stop-autonomous-db": ("autonomous-database",),
        "scale-autonomous-db": ("autonomous-database",),
        "restore-database": ("database", "autonomous-database"),
        "clone-database": ("autonomous-database",),
        "delete-backup": ("backup",),
    }

    async def list_resources(self, call: DatabaseListInput) -> Envelope:
        database = self._client.database
        compartment_id = self.compartment(call)
        limit = self.limit(call)

        if call.resource_type == "db-systems":
            response = await self.call(
                database.list_db_systems,
                compartment_id,
                display_name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                limit=limit,
            )
        elif call.resource_type == "databases":
            if not call.db_system_id and not call.db_home_id:
                raise PreconditionError("Listing databases requires either dbSystemId or dbHomeId")
            response = await self.call(
                database.list_databases,
                compartment_id,
                system_id=call.db_system_id,
                db_home_id=call.db_home_id,
                lifecycle_state=call.lifecycle_state,
                limit=limit,
            )
        elif call.resource_type == "autonomous-databases":
            response = await self.call(
                database.list_autonomous_databases,
                compartment_id,
                display_name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                limit=limit,
            )
        elif call.resource_type == "db-homes":
            db_system_id = self.require(call.db_system_id, "Listing DB homes requires dbSystemId")
            response = await self.call(
                database.list_db_homes,
                compartment_id,
                db_system_id=db_system_id,
                display_name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                limit=limit,
            )
        elif call.resource_type == "db-nodes":
            db_system_id = self.require(call.db_system_id, "Listing DB nodes requires dbSystemId")
            response = await self.call(
                database.list_db_nodes,
                compartment_id,
                db_system_id=db_system_id,
                lifecycle_state=call.lifecycle_state,
                limit=limit,
            )
        elif call.resource_type == "backups":
            response = await self.call(
                database.list_backups,
                compartment_id=compartment_id,
                limit=limit,
            )
        elif call.resource_type == "data-safe-targets":
            response = await self.call(
                self._client.data_safe.list_target_databases,
                compartment_id,
                display_name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                limit=limit,
            )
        elif call.resource_type == "analytics-instances":
            response = await self.call(
                self._client.analytics.list_analytics_instances,
                compartment_id,
                name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                limit=limit,
            )
        else:
            raise self.unsupported(call.resource_type)

        return list_envelope(
            response.data,
            LIST_LABELS[call.resource_type],
            next_page=response.next_page,
        )

    async def get_resource(self, call: DatabaseGetInput) -> Envelope:
        if call.resource_type not in GETTERS:
            raise self.unsupported(call.resource_type)

        client_name, method, label = GETTERS[call.resource_type]
        client = getattr(self._client, client_name)
        response = await self.call(getattr(client, method), call.resource_id)
        return detail_envelope(response.data, label, call.resource_id)

    async def create_resource(self, call: DatabaseCreateInput) -> Envelope:
        payload = call.data
        database = self._client.database

        if isinstance(payload, AutonomousDatabasePayload):
            display_name = payload.display_name or payload.db_name
            details = oci.database.models.CreateAutonomousDatabaseDetails(
                compartment_id=payload.compartment_id,
                db_name=payload.db_name,
                display_name=display_name,
                cpu_core_count=payload.cpu_core_count,
                data_storage_size_in_tbs=payload.data_storage_size_in_tbs,
                admin_password=payload.admin_password,
                db_version=payload.db_version,
                db_workload=payload.db_workload,
                is_auto_scaling_enabled=payload.is_auto_scaling_enabled,
                is_free_tier=payload.is_free_tier,
                license_model=payload.license_model,
                subnet_id=payload.subnet_id,
                nsg_ids=payload.nsg_ids,
            )
            response = await self.call(database.create_autonomous_database, details)
            return operation_envelope(
                f"Autonomous database creation initiated: {display_name}", response.data
            )

        if isinstance(payload, DatabasePayload):
            details = oci.database.models.CreateNewDatabaseDetails(
                db_home_id=payload.db_home_id,
                db_version=payload.db_version,
                database=oci.database.models.CreateDatabaseDetails(
                    db_name=payload.db_name,
                    admin_password=payload.admin_password,
                    character_set=payload.character_set,
                    ncharacter_set=payload.ncharacter_set,
                    pdb_name=payload.pdb_name,
                ),
            )
            response = await self.call(database.create_database, details)
            return operation_envelope(
                f"Database creation initiated: {payload.db_name}", response.data
            )

        if isinstance(payload, BackupPayload):
            details = oci.database.models.CreateBackupDetails(
                database_id=payload.database_id,
                display_name=payload.display_name,
            )
            response = await self.call(database.create_backup, details)
            return operation_envelope(
                f"Backup creation initiated: {payload.display_name}", response.data
            )

        raise self.unsupported(call.resource_type)

    async def manage_resource(self, call: DatabaseManageInput) -> Envelope:
        database = self._client.database
        resource_id = call.resource_id

        if call.action in NODE_ACTIONS:
            node_action, stem = NODE_ACTIONS[call.action]
            response = await self.call(database.db_node_action, resource_id, node_action)
            return operation_envelope(
                f"{stem} initiated: {resource_id}", response.data, fallback_id=resource_id
            )

        if call.action == "start-autonomous-db":
            response = await self.call(database.start_autonomous_database, resource_id)
            return operation_envelope(
                f"Autonomous database start initiated: {resource_id}",
                response.data,
                fallback_id=resource_id,
            )

        if call.action == "stop-autonomous-db":
            response = await self.call(database.stop_autonomous_database, resource_id)
            return operation_envelope(
                f"Autonomous database stop initiated: {resource_id}",
                response.data,
                fallback_id=resource_id,
            )

        if call.action == "scale-autonomous-db":
            if call.cpu_core_count is None and call.data_storage_size_in_tbs is None:
                raise PreconditionError(
                    "scale-autonomous-db requires cpuCoreCount or dataStorageSizeInTBs"
                )
            details = oci.database.models.UpdateAutonomousDatabaseDetails(
                cpu_core_count=call.cpu_core_count,
                data_storage_size_in_tbs=call.data_storage_size_in_tbs,
            )
            response = await self.call(database.update_autonomous_database, resource_id, details)
            return operation_envelope(
                f"Autonomous database scaling initiated: {resource_id}",
                response.data,
                fallback_id=resource_id,
            )

        if call.action == "restore-database":
            timestamp = self.require(call.timestamp, "restore-database requires timestamp")
            if call.resource_type == "autonomous-database":
                response = await self.call(
                    database.restore_autonomous_database,
                    resource_id,
                    oci.database.models.RestoreAutonomousDatabaseDetails(timestamp=timestamp),
                )
            else:
                response = await self.call(
                    database.restore_database,
                    resource_id,
                    oci.database.models.RestoreDatabaseDetails(timestamp=timestamp),
                )
            return operation_envelope(
                f"Database restore initiated: {resource_id}",
                response.data,
                fallback_id=resource_id,
            )

        if call.action == "clone-database":
            clone_name = call.clone_name or generated_name("clone")
            details = oci.database.models.CreateAutonomousDatabaseCloneDetails(
                source_id=resource_id,
                clone_type="FULL",
                display_name=clone_name,
                compartment_id=call.target_compartment_id or self.default_compartment_id,
            )
            response = await self.call(database.create_autonomous_database, details)
            return operation_envelope(
                f"Autonomous database clone initiated: {clone_name}",
                response.data,
                fallback_id=resource_id,
            )

        if call.action == "delete-backup":
            await self.call(database.delete_backup, resource_id)
            return operation_envelope(
                f"Backup deletion initiated: {resource_id}", fallback_id=resource_id
            )

        raise self.unsupported(call.resource_type)
