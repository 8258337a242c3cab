"""Transition engine driving workflow instances through their steps."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .constants import DEFAULT_MAX_SAVE_ATTEMPTS
from .errors import (
    DuplicateActiveInstance,
    InstanceNotFound,
    InvalidInstanceState,
    InvalidStepState,
    StaleInstanceError,
    StepNotFound,
    TemplateEmpty,
    TemplateIntegrityError,
    TemplateNotFound,
    WorkflowValidationError,
)
from .models import (
    Priority,
    WorkflowInstance,
    WorkflowStepInstance,
    WorkflowTemplate,
)
from .persistence import InstanceRepository
from .templates import TemplateRepository
from .utils.clock import Clock, hours_between, utc_now
from .utils.locks import KeyedLock
from .utils.numbers import round_half_up
from .utils.retry import schedule_retry

logger = logging.getLogger(__name__)

Mutation = Callable[[WorkflowInstance, WorkflowTemplate], None]


@dataclass
class TransitionResult:
    """Outcome of a step transition.

    Truthy when the transition was applied. On failure ``error`` holds the
    typed reason and the stored instance is unchanged.
    """

    ok: bool
    instance: Optional[WorkflowInstance] = None
    error: Optional[Exception] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, instance: WorkflowInstance) -> "TransitionResult":
        return cls(ok=True, instance=instance)

    @classmethod
    def failure(cls, error: Exception) -> "TransitionResult":
        return cls(ok=False, error=error)


def resolve_template(
    templates: TemplateRepository, instance: WorkflowInstance
) -> WorkflowTemplate:
    """Return the template an existing instance was created from.

    Raises:
        TemplateIntegrityError: If the template is gone or the instance's
            steps no longer mirror it.
    """
    template = templates.get_template(instance.workflow_id)
    if template is None:
        logger.error(
            f"Template {instance.workflow_id} for workflow instance {instance.id} is missing"
        )
        raise TemplateIntegrityError(
            f"Template '{instance.workflow_id}' referenced by instance "
            f"'{instance.id}' cannot be resolved"
        )
    if [s.step_id for s in instance.steps] != [s.id for s in template.steps]:
        logger.error(
            f"Workflow instance {instance.id} steps do not match template {template.id}"
        )
        raise TemplateIntegrityError(
            f"Instance '{instance.id}' steps do not mirror template '{template.id}'"
        )
    return template


class TransitionEngine:
    """Validate and apply state transitions on workflow instances.

    Each operation on an instance runs under that instance's lock and saves
    with a version check, so racing callers see exactly one winner. Expected
    precondition failures come back as a failed ``TransitionResult``; only
    template integrity violations are raised.
    """

    def __init__(
        self,
        templates: TemplateRepository,
        instances: InstanceRepository,
        clock: Clock = utc_now,
        enforce_step_order: bool = False,
        max_save_attempts: int = DEFAULT_MAX_SAVE_ATTEMPTS,
    ) -> None:
        self._templates = templates
        self._instances = instances
        self._clock = clock
        self.enforce_step_order = enforce_step_order
        self.max_save_attempts = max_save_attempts
        self._instance_locks = KeyedLock()
        self._request_locks = KeyedLock()

    # ------------------------------------------------------------------
    # Creation
    async def create_instance(
        self,
        document_request_id: str,
        document_type: str,
        priority: Priority = "medium",
    ) -> WorkflowInstance:
        """Start a workflow for a document request.

        Raises:
            TemplateNotFound: No active template for ``document_type``.
            TemplateEmpty: The active template has no steps.
            DuplicateActiveInstance: The request already has a live instance.
        """
        template = self._templates.get_active_template(document_type)
        if template is None:
            raise TemplateNotFound(document_type)
        first = template.first_step()
        if first is None:
            raise TemplateEmpty(template.id)

        async with self._request_locks.hold(document_request_id):
            existing = await self._instances.find_by_document_request(
                document_request_id
            )
            if any(wf.is_live for wf in existing):
                raise DuplicateActiveInstance(document_request_id)

            instance = WorkflowInstance(
                workflow_id=template.id,
                document_request_id=document_request_id,
                current_step_id=first.id,
                status="active",
                started_at=self._clock(),
                priority=priority,
                steps=[WorkflowStepInstance(step_id=step.id) for step in template.steps],
            )
            await self._instances.add_instance(instance)

        logger.info(
            f"Created workflow instance {instance.id} from template {template.id} "
            f"for document request {document_request_id}"
        )
        return instance.snapshot()

    # ------------------------------------------------------------------
    # Step transitions
    async def start_step(
        self, instance_id: str, step_id: str, assigned_to: str
    ) -> TransitionResult:
        """Move a pending step to ``in_progress`` and assign it."""

        def mutate(instance: WorkflowInstance, template: WorkflowTemplate) -> None:
            self._require_status(instance, "active")
            step = self._step_instance(instance, template, step_id)
            if step.status != "pending":
                raise InvalidStepState(step_id, step.status, "pending")
            if self.enforce_step_order and step_id != instance.current_step_id:
                raise InvalidStepState(
                    step_id, step.status, f"current step {instance.current_step_id!r}"
                )

            step.status = "in_progress"
            step.assigned_to = assigned_to
            step.started_at = self._clock()
            instance.current_step_id = step_id
            instance.assigned_to = assigned_to

        return await self._transition("start_step", instance_id, step_id, mutate)

    async def complete_step(
        self,
        instance_id: str,
        step_id: str,
        notes: Optional[str] = None,
        attachments: Optional[List[str]] = None,
    ) -> TransitionResult:
        """Complete an in-progress step and advance the instance.

        The instance moves on to its first step that is not completed. Once
        every step is completed the whole instance is completed.
        """

        def mutate(instance: WorkflowInstance, template: WorkflowTemplate) -> None:
            self._require_status(instance, "active")
            step = self._step_instance(instance, template, step_id)
            if step.status != "in_progress":
                raise InvalidStepState(step_id, step.status, "in_progress")

            now = self._clock()
            step.status = "completed"
            step.completed_at = now
            step.notes = notes
            step.attachments = list(attachments or [])
            if step.started_at is not None:
                step.duration = round_half_up(hours_between(step.started_at, now), 2)

            # steps started out of order keep their state; the instance waits
            # on the lowest-order step that is not completed yet
            outstanding = next(
                (s for s in instance.steps if s.status != "completed"), None
            )
            instance.assigned_to = None
            if outstanding is not None:
                instance.current_step_id = outstanding.step_id
            else:
                instance.status = "completed"
                instance.completed_at = now
                instance.current_step_id = ""

        return await self._transition("complete_step", instance_id, step_id, mutate)

    async def reject_step(
        self, instance_id: str, step_id: str, reason: str
    ) -> TransitionResult:
        """Reject a step, which cancels the whole instance.

        Any step can be rejected regardless of its status. Rejection is
        terminal: the instance does not continue with the remaining steps.
        """

        def mutate(instance: WorkflowInstance, template: WorkflowTemplate) -> None:
            if not instance.is_live:
                raise InvalidInstanceState(instance.id, instance.status, "active or on_hold")
            step = self._step_instance(instance, template, step_id)

            now = self._clock()
            step.status = "rejected"
            step.completed_at = now
            step.notes = reason
            instance.status = "cancelled"
            instance.completed_at = now

        return await self._transition("reject_step", instance_id, step_id, mutate)

    # ------------------------------------------------------------------
    # Administrative pause
    async def pause_instance(
        self, instance_id: str, reason: Optional[str] = None
    ) -> TransitionResult:
        """Put an active instance on hold."""

        def mutate(instance: WorkflowInstance, template: WorkflowTemplate) -> None:
            self._require_status(instance, "active")
            instance.status = "on_hold"
            if reason:
                logger.info(f"Workflow instance {instance.id} on hold: {reason}")

        return await self._transition("pause_instance", instance_id, None, mutate)

    async def resume_instance(self, instance_id: str) -> TransitionResult:
        """Return an on-hold instance to ``active``."""

        def mutate(instance: WorkflowInstance, template: WorkflowTemplate) -> None:
            self._require_status(instance, "on_hold")
            instance.status = "active"

        return await self._transition("resume_instance", instance_id, None, mutate)

    # ------------------------------------------------------------------
    # Internals
    async def _transition(
        self,
        operation: str,
        instance_id: str,
        step_id: Optional[str],
        mutate: Mutation,
    ) -> TransitionResult:
        target = f"workflow instance {instance_id}" + (f" step {step_id}" if step_id else "")
        async with self._instance_locks.hold(instance_id):
            attempt = 0
            while True:
                try:
                    instance = await self._load_and_apply(instance_id, mutate)
                except WorkflowValidationError as exc:
                    logger.info(f"Refused {operation} on {target}: {exc}")
                    return TransitionResult.failure(exc)

                try:
                    await self._instances.save_instance(instance)
                except StaleInstanceError as exc:
                    attempt += 1
                    if attempt >= self.max_save_attempts:
                        logger.warning(
                            f"Giving up {operation} on workflow instance {instance_id} "
                            f"after {attempt} conflicting saves"
                        )
                        return TransitionResult.failure(exc)
                    logger.warning(
                        f"Version conflict on workflow instance {instance_id} during "
                        f"{operation}; retrying (attempt {attempt})"
                    )
                    await schedule_retry(attempt)
                    continue

                logger.info(f"Applied {operation} on {target}; status={instance.status}")
                return TransitionResult.success(instance.snapshot())

    async def _load_and_apply(
        self, instance_id: str, mutate: Mutation
    ) -> WorkflowInstance:
        instance = await self._instances.get_instance(instance_id)
        if instance is None:
            raise InstanceNotFound(instance_id)
        template = resolve_template(self._templates, instance)
        mutate(instance, template)
        return instance

    @staticmethod
    def _require_status(instance: WorkflowInstance, expected: str) -> None:
        if instance.status != expected:
            raise InvalidInstanceState(instance.id, instance.status, expected)

    @staticmethod
    def _step_instance(
        instance: WorkflowInstance, template: WorkflowTemplate, step_id: str
    ) -> WorkflowStepInstance:
        position = template.position(step_id)
        if position is None:
            raise StepNotFound(instance.id, step_id)
        return instance.steps[position]


__all__ = ["TransitionEngine", "TransitionResult", "resolve_template"]
