"""In-memory implementation of the instance repository."""

from __future__ import annotations

from typing import Dict, Optional

from ..errors import DuplicateActiveInstance, InstanceNotFound, StaleInstanceError
from ..models import InstanceStatus, WorkflowInstance
from .repository import InstanceRepository


class InMemoryInstanceRepository(InstanceRepository):
    """Store workflow instances in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts. Methods never await, so each call is
    atomic with respect to other coroutines on the same event loop.
    """

    def __init__(self) -> None:
        self._instances: Dict[str, WorkflowInstance] = {}

    # ------------------------------------------------------------------
    async def add_instance(self, instance: WorkflowInstance) -> None:
        if instance.is_live and any(
            existing.document_request_id == instance.document_request_id
            and existing.is_live
            for existing in self._instances.values()
        ):
            raise DuplicateActiveInstance(instance.document_request_id)
        self._instances[instance.id] = instance.snapshot()

    async def save_instance(self, instance: WorkflowInstance) -> None:
        stored = self._instances.get(instance.id)
        if stored is None:
            raise InstanceNotFound(instance.id)
        if stored.version != instance.version:
            raise StaleInstanceError(instance.id, instance.version)
        instance.version += 1
        self._instances[instance.id] = instance.snapshot()

    async def get_instance(self, instance_id: str) -> WorkflowInstance | None:
        stored = self._instances.get(instance_id)
        return stored.snapshot() if stored else None

    async def find_by_document_request(
        self, document_request_id: str
    ) -> list[WorkflowInstance]:
        matches = [
            wf.snapshot()
            for wf in self._instances.values()
            if wf.document_request_id == document_request_id
        ]
        return sorted(matches, key=lambda wf: wf.started_at)

    async def list_instances(
        self, status: Optional[InstanceStatus] = None
    ) -> list[WorkflowInstance]:
        return [
            wf.snapshot()
            for wf in self._instances.values()
            if status is None or wf.status == status
        ]
