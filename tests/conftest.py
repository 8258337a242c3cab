"""Shared fixtures for permitflow tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from permitflow.models import WorkflowStepDefinition, WorkflowTemplate
from permitflow.persistence import InMemoryInstanceRepository
from permitflow.service import WorkflowService
from permitflow.templates import DEFAULT_TEMPLATES, InMemoryTemplateRepository


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 3, 3, 8, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def make_template(
    document_type: str,
    durations: list[float],
    template_id: str | None = None,
    version: str = "1.0",
) -> WorkflowTemplate:
    return WorkflowTemplate(
        id=template_id or f"workflow-{document_type}",
        name=f"{document_type} processing",
        document_type=document_type,
        version=version,
        steps=[
            WorkflowStepDefinition(
                id=f"s{order}",
                name=f"Step {order}",
                order=order,
                required_role="clerk",
                estimated_duration=hours,
            )
            for order, hours in enumerate(durations, start=1)
        ],
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def two_step_template() -> WorkflowTemplate:
    """Template T: A (clerk) then B (officer)."""
    return WorkflowTemplate(
        id="workflow-business-permit",
        name="Business Permit Processing",
        document_type="business-permit",
        steps=[
            WorkflowStepDefinition(
                id="A", name="Intake", order=1, required_role="clerk", estimated_duration=1
            ),
            WorkflowStepDefinition(
                id="B", name="Inspection", order=2, required_role="officer", estimated_duration=3
            ),
        ],
    )


@pytest.fixture
def templates(two_step_template) -> InMemoryTemplateRepository:
    return InMemoryTemplateRepository([*DEFAULT_TEMPLATES, two_step_template])


@pytest.fixture
def instances() -> InMemoryInstanceRepository:
    return InMemoryInstanceRepository()


@pytest.fixture
def service(templates, instances, clock) -> WorkflowService:
    return WorkflowService(templates, instances, clock=clock)


@pytest.fixture
def strict_service(templates, instances, clock) -> WorkflowService:
    return WorkflowService(templates, instances, clock=clock, enforce_step_order=True)


@pytest.fixture
def template_factory():
    return make_template
