"""Data models for workflow templates, instances and derived metrics."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from .utils.clock import utc_now

StepStatus = Literal["pending", "in_progress", "completed", "skipped", "rejected"]
InstanceStatus = Literal["active", "completed", "cancelled", "on_hold"]
Priority = Literal["low", "medium", "high", "urgent"]

TERMINAL_STATUSES: frozenset[str] = frozenset({"completed", "cancelled"})
LIVE_STATUSES: frozenset[str] = frozenset({"active", "on_hold"})


def _new_id() -> str:
    return str(uuid.uuid4())


class WorkflowStepDefinition(BaseModel):
    """One stage of a workflow template."""

    id: str
    name: str
    description: str = ""
    order: int = Field(..., ge=1)
    required_role: str
    estimated_duration: float = Field(0.0, ge=0, description="Hours")
    is_required: bool = True
    conditions: Optional[dict[str, Any]] = None

    model_config = ConfigDict(frozen=True)


class WorkflowTemplate(BaseModel):
    """Immutable, versioned definition of the steps for one document type.

    Steps are kept sorted by ``order`` and must number ``1..n`` without gaps.
    A private ``step_id -> position`` index backs the lookup helpers, so the
    next step of position ``i`` is simply position ``i + 1``.
    """

    id: str
    name: str
    description: str = ""
    document_type: str
    version: str = "1.0"
    is_active: bool = True
    steps: list[WorkflowStepDefinition] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    model_config = ConfigDict(frozen=True)

    _positions: dict[str, int] = PrivateAttr(default_factory=dict)

    @field_validator("steps")
    @classmethod
    def _ensure_contiguous_order(
        cls, steps: list[WorkflowStepDefinition]
    ) -> list[WorkflowStepDefinition]:
        ordered = sorted(steps, key=lambda step: step.order)
        for expected, step in enumerate(ordered, start=1):
            if step.order != expected:
                raise ValueError(
                    f"step orders must be contiguous from 1; got {step.order} "
                    f"where {expected} was expected"
                )
        ids = [step.id for step in ordered]
        if len(set(ids)) != len(ids):
            raise ValueError("step ids must be unique within a template")
        return ordered

    def model_post_init(self, __context: Any) -> None:
        self._positions = {step.id: index for index, step in enumerate(self.steps)}

    def position(self, step_id: str) -> Optional[int]:
        """Zero-based position of ``step_id``, or ``None`` if unknown."""
        return self._positions.get(step_id)

    def step(self, step_id: str) -> Optional[WorkflowStepDefinition]:
        index = self._positions.get(step_id)
        return None if index is None else self.steps[index]

    def first_step(self) -> Optional[WorkflowStepDefinition]:
        return self.steps[0] if self.steps else None

    def next_step(self, step_id: str) -> Optional[WorkflowStepDefinition]:
        """Return the step with ``order + 1``, or ``None`` after the last step."""
        index = self._positions.get(step_id)
        if index is None or index + 1 >= len(self.steps):
            return None
        return self.steps[index + 1]

    def remaining_steps(self, step_id: str) -> list[WorkflowStepDefinition]:
        """Steps from ``step_id`` (inclusive) to the end of the template."""
        index = self._positions.get(step_id)
        if index is None:
            return []
        return self.steps[index:]


class WorkflowStepInstance(BaseModel):
    """Per-instance progress record for one step definition."""

    id: str = Field(default_factory=_new_id)
    step_id: str
    status: StepStatus = "pending"
    assigned_to: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    notes: Optional[str] = None
    attachments: list[str] = Field(default_factory=list)
    duration: Optional[float] = Field(default=None, description="Actual hours spent")


class WorkflowInstance(BaseModel):
    """One execution of a template for a document request."""

    id: str = Field(default_factory=_new_id)
    workflow_id: str
    document_request_id: str
    current_step_id: str = ""
    status: InstanceStatus = "active"
    started_at: datetime = Field(default_factory=utc_now)
    completed_at: Optional[datetime] = None
    assigned_to: Optional[str] = None
    priority: Priority = "medium"
    steps: list[WorkflowStepInstance] = Field(default_factory=list)
    version: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_live(self) -> bool:
        return self.status in LIVE_STATUSES

    def snapshot(self) -> WorkflowInstance:
        """Deep copy safe to hand to callers."""
        return self.model_copy(deep=True)


class WorkflowProgress(BaseModel):
    """Derived completion figures for a workflow instance."""

    total_steps: int
    completed_steps: int
    current_step: str
    progress_percentage: int
    estimated_completion: Optional[datetime] = None


class WorkflowStatistics(BaseModel):
    """Aggregate counts across all workflow instances."""

    total: int = 0
    active: int = 0
    completed: int = 0
    cancelled: int = 0
    on_hold: int = 0
    average_completion_time_hours: int = 0
    by_priority: dict[str, int] = Field(default_factory=dict)
