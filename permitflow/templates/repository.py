"""Repository abstraction for workflow templates."""

from __future__ import annotations

from typing import Protocol

from ..models import WorkflowTemplate


class TemplateRepository(Protocol):
    """Protocol for template sources."""

    def get_active_template(self, document_type: str) -> WorkflowTemplate | None:
        """Return the active template for ``document_type``."""

    def get_template(self, template_id: str) -> WorkflowTemplate | None:
        """Return a template by id, whether or not it is still active."""

    def list_templates(self, active_only: bool = False) -> list[WorkflowTemplate]:
        """Return all known templates."""

    def publish(self, template: WorkflowTemplate) -> None:
        """Store ``template``, deactivating the prior active version of its type."""
