"""Repository abstraction for workflow instance persistence."""

from __future__ import annotations

from typing import Optional, Protocol

from ..models import InstanceStatus, WorkflowInstance


class InstanceRepository(Protocol):
    """Protocol for workflow instance persistence backends.

    Reads return detached copies; callers mutate a copy and hand it back to
    ``save_instance``, which only succeeds if nobody saved in between.
    """

    async def add_instance(self, instance: WorkflowInstance) -> None:
        """Persist a new instance.

        Raises:
            DuplicateActiveInstance: If the document request already has a
                live instance.
        """

    async def save_instance(self, instance: WorkflowInstance) -> None:
        """Persist changes to an existing instance and bump its version.

        Raises:
            StaleInstanceError: If the stored version differs from
                ``instance.version``.
            InstanceNotFound: If the instance was never added.
        """

    async def get_instance(self, instance_id: str) -> WorkflowInstance | None:
        """Retrieve the instance by id."""

    async def find_by_document_request(
        self, document_request_id: str
    ) -> list[WorkflowInstance]:
        """Return every instance for ``document_request_id``, oldest first."""

    async def list_instances(
        self, status: Optional[InstanceStatus] = None
    ) -> list[WorkflowInstance]:
        """Return all instances, optionally filtered by status."""
