"""
Compute domain dispatcher: instances, images, shapes, block volumes and
volume attachments.
"""
from __future__ import annotations

import oci

from mcp_oci_resources.core.dispatcher import BaseDispatcher, generated_name
from mcp_oci_resources.core.formatters import (
    detail_envelope,
    list_envelope,
    operation_envelope,
)
from mcp_oci_resources.core.models import Envelope

from .models import (
    ComputeCreateInput,
    ComputeGetInput,
    ComputeListInput,
    ComputeManageInput,
    InstancePayload,
    VolumePayload,
)

LIST_LABELS = {
    "instances": "compute instances",
    "images": "compute images",
    "shapes": "compute shapes",
    "volumes": "block volumes",
    "volume-attachments": "volume attachments",
}

GET_LABELS = {
    "instance": "instance",
    "image": "image",
    "volume": "volume",
    "volume-attachment": "volume attachment",
}

# Verb -> (instance_action value, past-tense message stem)
INSTANCE_ACTIONS = {
    "start": ("START", "Instance start"),
    "stop": ("STOP", "Instance stop"),
    "reboot": ("RESET", "Instance reboot"),
}


class ComputeDispatcher(BaseDispatcher):
    """Routes oci-compute calls to the Compute and Block Storage clients."""

    domain = "compute"

    verb_targets = {
        "start": ("instance",),
        "stop": ("instance",),
        "reboot": ("instance",),
        "terminate": ("instance",),
        "attach-volume": ("instance", "volume"),
        "detach-volume": ("volume-attachment",),
    }

    async def list_resources(self, call: ComputeListInput) -> Envelope:
        compartment_id = self.compartment(call)
        compute = self._client.compute
        common = dict(compartment_id=compartment_id, limit=self.limit(call))

        if call.resource_type == "instances":
            response = await self.call(
                compute.list_instances,
                availability_domain=call.availability_domain,
                display_name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                **common
            )
        elif call.resource_type == "images":
            response = await self.call(
                compute.list_images,
                display_name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                **common
            )
        elif call.resource_type == "shapes":
            response = await self.call(
                compute.list_shapes,
                availability_domain=call.availability_domain,
                **common
            )
        elif call.resource_type == "volumes":
            response = await self.call(
                self._client.block_storage.list_volumes,
                availability_domain=call.availability_domain,
                display_name=call.display_name,
                lifecycle_state=call.lifecycle_state,
                **common
            )
        elif call.resource_type == "volume-attachments":
            response = await self.call(
                compute.list_volume_attachments,
                availability_domain=call.availability_domain,
                **common
            )
        else:
            raise self.unsupported(call.resource_type)

        return list_envelope(
            response.data,
            LIST_LABELS[call.resource_type],
            next_page=response.next_page,
        )

    async def get_resource(self, call: ComputeGetInput) -> Envelope:
        compute = self._client.compute

        if call.resource_type == "instance":
            response = await self.call(compute.get_instance, call.resource_id)
        elif call.resource_type == "image":
            response = await self.call(compute.get_image, call.resource_id)
        elif call.resource_type == "volume":
            response = await self.call(self._client.block_storage.get_volume, call.resource_id)
        elif call.resource_type == "volume-attachment":
            response = await self.call(compute.get_volume_attachment, call.resource_id)
        else:
            raise self.unsupported(call.resource_type)

        return detail_envelope(response.data, GET_LABELS[call.resource_type], call.resource_id)

    async def create_resource(self, call: ComputeCreateInput) -> Envelope:
        payload = call.data

        if isinstance(payload, InstancePayload):
            return await self._launch_instance(payload)
        if isinstance(payload, VolumePayload):
            return await self._create_volume(payload)
        raise self.unsupported(call.resource_type)

    async def _launch_instance(self, payload: InstancePayload) -> Envelope:
        display_name = payload.display_name or generated_name("instance")

        metadata = dict(payload.metadata or {})
        if payload.ssh_authorized_keys:
            metadata["ssh_authorized_keys"] = "\n".join(payload.ssh_authorized_keys)

        details = oci.core.models.LaunchInstanceDetails(
            availability_domain=payload.availability_domain,
            compartment_id=payload.compartment_id,
            shape=payload.shape,
            display_name=display_name,
            source_details=oci.core.models.InstanceSourceViaImageDetails(
                image_id=payload.image_id
            ),
            create_vnic_details=(
                oci.core.models.CreateVnicDetails(subnet_id=payload.subnet_id)
                if payload.subnet_id else None
            ),
            metadata=metadata or None,
        )
        response = await self.call(self._client.compute.launch_instance, details)
        return operation_envelope(f"Instance creation initiated: {display_name}", response.data)

    async def _create_volume(self, payload: VolumePayload) -> Envelope:
        display_name = payload.display_name or generated_name("volume")

        details = oci.core.models.CreateVolumeDetails(
            availability_domain=payload.availability_domain,
            compartment_id=payload.compartment_id,
            size_in_gbs=payload.size_in_gbs,
            display_name=display_name,
            vpus_per_gb=payload.vpus_per_gb,
        )
        response = await self.call(self._client.block_storage.create_volume, details)
        return operation_envelope(f"Volume creation initiated: {display_name}", response.data)

    async def manage_resource(self, call: ComputeManageInput) -> Envelope:
        compute = self._client.compute

        if call.action in INSTANCE_ACTIONS:
            oci_action, stem = INSTANCE_ACTIONS[call.action]
            response = await self.call(compute.instance_action, call.resource_id, oci_action)
            return operation_envelope(
                f"{stem} initiated: {call.resource_id}",
                response.data,
                fallback_id=call.resource_id,
            )

        if call.action == "terminate":
            await self.call(compute.terminate_instance, call.resource_id)
            return operation_envelope(
                f"Instance termination initiated: {call.resource_id}",
                fallback_id=call.resource_id,
            )

        if call.action == "attach-volume":
            return await self._attach_volume(call)

        if call.action == "detach-volume":
            await self.call(compute.detach_volume, call.resource_id)
            return operation_envelope(
                f"Volume detachment initiated: {call.resource_id}",
                fallback_id=call.resource_id,
            )

        raise self.unsupported(call.resource_type)

    async def _attach_volume(self, call: ComputeManageInput) -> Envelope:
        instance_id = self.require(
            call.instance_id,
            "attach-volume requires both instanceId and volumeId"
        )
        volume_id = self.require(
            call.volume_id,
            "attach-volume requires both instanceId and volumeId"
        )

        if call.attachment_type == "paravirtualized":
            details = oci.core.models.AttachParavirtualizedVolumeDetails(
                instance_id=instance_id,
                volume_id=volume_id,
            )
        else:
            details = oci.core.models.AttachIScsiVolumeDetails(
                instance_id=instance_id,
                volume_id=volume_id,
            )

        response = await self.call(self._client.compute.attach_volume, details)
        return operation_envelope(
            f"Volume attachment initiated: {volume_id} to {instance_id}",
            response.data,
            fallback_id=call.resource_id,
        )
