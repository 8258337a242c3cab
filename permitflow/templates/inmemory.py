"""In-memory implementation of the template repository."""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable

from ..errors import TemplateConflictError
from ..models import WorkflowTemplate
from ..utils.clock import utc_now
from .repository import TemplateRepository

logger = logging.getLogger(__name__)


class InMemoryTemplateRepository(TemplateRepository):
    """Keep published templates in local memory.

    Every version ever published stays resolvable by id so that instances
    created against a superseded version can still be advanced.
    """

    def __init__(self, templates: Iterable[WorkflowTemplate] = ()) -> None:
        self._templates: Dict[str, WorkflowTemplate] = {}
        self._active: Dict[str, str] = {}
        self._lock = threading.Lock()
        for template in templates:
            self.publish(template)

    # ------------------------------------------------------------------
    def publish(self, template: WorkflowTemplate) -> None:
        with self._lock:
            if template.id in self._templates:
                raise TemplateConflictError(template.id)

            if template.is_active:
                previous_id = self._active.get(template.document_type)
                if previous_id is not None:
                    previous = self._templates[previous_id]
                    self._templates[previous_id] = previous.model_copy(
                        update={"is_active": False, "updated_at": utc_now()}
                    )
                    logger.info(
                        f"Deactivated template {previous_id} superseded by {template.id} "
                        f"for document type {template.document_type}"
                    )
                self._active[template.document_type] = template.id

            self._templates[template.id] = template

    def get_active_template(self, document_type: str) -> WorkflowTemplate | None:
        template_id = self._active.get(document_type)
        return self._templates.get(template_id) if template_id else None

    def get_template(self, template_id: str) -> WorkflowTemplate | None:
        return self._templates.get(template_id)

    def list_templates(self, active_only: bool = False) -> list[WorkflowTemplate]:
        templates = list(self._templates.values())
        if active_only:
            templates = [t for t in templates if t.is_active]
        return templates
