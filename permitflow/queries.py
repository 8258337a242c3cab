"""Read-only lookups over workflow instances."""

from __future__ import annotations

from .models import WorkflowInstance
from .persistence import InstanceRepository


class WorkflowQueries:
    """Lookups used by controllers. Never mutates state."""

    def __init__(self, instances: InstanceRepository) -> None:
        self._instances = instances

    async def get_instance(self, instance_id: str) -> WorkflowInstance | None:
        return await self._instances.get_instance(instance_id)

    async def get_instance_by_document_request(
        self, document_request_id: str
    ) -> WorkflowInstance | None:
        """Return the live instance for a request, else the most recent one."""
        matches = await self._instances.find_by_document_request(document_request_id)
        if not matches:
            return None
        live = [wf for wf in matches if wf.is_live]
        return live[-1] if live else matches[-1]

    async def get_active_instances(self) -> list[WorkflowInstance]:
        return await self._instances.list_instances(status="active")

    async def get_instances_by_assignee(self, actor_id: str) -> list[WorkflowInstance]:
        active = await self._instances.list_instances(status="active")
        return [wf for wf in active if wf.assigned_to == actor_id]
