"""Service facade exposing the workflow operations to a surrounding app."""

from __future__ import annotations

from typing import List, Optional

from .config import PermitflowConfig, load_config
from .engine import TransitionEngine, TransitionResult
from .models import (
    Priority,
    WorkflowInstance,
    WorkflowProgress,
    WorkflowStatistics,
    WorkflowTemplate,
)
from .persistence import InstanceRepository, get_repository
from .progress import ProgressCalculator
from .queries import WorkflowQueries
from .statistics import StatisticsAggregator
from .templates import TemplateRepository, get_template_repository
from .utils.clock import Clock, utc_now


class WorkflowService:
    """Single entry point for controllers, CLIs and background jobs.

    Transitions go through the :class:`TransitionEngine`; everything else is
    a read path.
    """

    def __init__(
        self,
        templates: TemplateRepository,
        instances: InstanceRepository,
        clock: Clock = utc_now,
        enforce_step_order: bool = False,
        max_save_attempts: Optional[int] = None,
        default_priority: Priority = "medium",
    ) -> None:
        self.templates = templates
        self.instances = instances
        self.default_priority = default_priority
        engine_kwargs = {}
        if max_save_attempts is not None:
            engine_kwargs["max_save_attempts"] = max_save_attempts
        self.engine = TransitionEngine(
            templates,
            instances,
            clock=clock,
            enforce_step_order=enforce_step_order,
            **engine_kwargs,
        )
        self.progress = ProgressCalculator(templates, instances, clock=clock)
        self.statistics = StatisticsAggregator(instances)
        self.queries = WorkflowQueries(instances)

    @classmethod
    def from_config(
        cls, config: Optional[PermitflowConfig] = None, clock: Clock = utc_now
    ) -> "WorkflowService":
        config = config or load_config()
        return cls(
            get_template_repository(config),
            get_repository(config=config),
            clock=clock,
            enforce_step_order=config.engine.enforce_step_order,
            max_save_attempts=config.engine.max_save_attempts,
            default_priority=config.default_priority,
        )

    # ------------------------------------------------------------------
    # Templates
    def get_template(self, document_type: str) -> WorkflowTemplate | None:
        return self.templates.get_active_template(document_type)

    def list_templates(self, active_only: bool = True) -> list[WorkflowTemplate]:
        return self.templates.list_templates(active_only=active_only)

    # ------------------------------------------------------------------
    # Transitions
    async def create_instance(
        self,
        document_request_id: str,
        document_type: str,
        priority: Optional[Priority] = None,
    ) -> WorkflowInstance:
        return await self.engine.create_instance(
            document_request_id, document_type, priority or self.default_priority
        )

    async def start_step(
        self, instance_id: str, step_id: str, assigned_to: str
    ) -> TransitionResult:
        return await self.engine.start_step(instance_id, step_id, assigned_to)

    async def complete_step(
        self,
        instance_id: str,
        step_id: str,
        notes: Optional[str] = None,
        attachments: Optional[List[str]] = None,
    ) -> TransitionResult:
        return await self.engine.complete_step(instance_id, step_id, notes, attachments)

    async def reject_step(
        self, instance_id: str, step_id: str, reason: str
    ) -> TransitionResult:
        return await self.engine.reject_step(instance_id, step_id, reason)

    async def pause_instance(
        self, instance_id: str, reason: Optional[str] = None
    ) -> TransitionResult:
        return await self.engine.pause_instance(instance_id, reason)

    async def resume_instance(self, instance_id: str) -> TransitionResult:
        return await self.engine.resume_instance(instance_id)

    # ------------------------------------------------------------------
    # Reads
    async def get_instance(self, instance_id: str) -> WorkflowInstance | None:
        return await self.queries.get_instance(instance_id)

    async def get_instance_by_document_request(
        self, document_request_id: str
    ) -> WorkflowInstance | None:
        return await self.queries.get_instance_by_document_request(document_request_id)

    async def get_progress(self, instance_id: str) -> WorkflowProgress | None:
        return await self.progress.get_progress(instance_id)

    async def get_active_instances(self) -> list[WorkflowInstance]:
        return await self.queries.get_active_instances()

    async def get_instances_by_assignee(self, actor_id: str) -> list[WorkflowInstance]:
        return await self.queries.get_instances_by_assignee(actor_id)

    async def get_statistics(self) -> WorkflowStatistics:
        return await self.statistics.get_statistics()


_service_instance: WorkflowService | None = None


def get_workflow_service(config: Optional[PermitflowConfig] = None) -> WorkflowService:
    """Return the process-wide service, building it from configuration once."""

    global _service_instance
    if _service_instance is not None and config is None:
        return _service_instance
    _service_instance = WorkflowService.from_config(config)
    return _service_instance
