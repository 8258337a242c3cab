"""Template and instance model tests."""

import pytest
from pydantic import ValidationError

from permitflow.models import WorkflowInstance, WorkflowStepDefinition, WorkflowTemplate
from permitflow.templates import BARANGAY_CLEARANCE, DEFAULT_TEMPLATES


def _step(step_id: str, order: int) -> WorkflowStepDefinition:
    return WorkflowStepDefinition(id=step_id, name=step_id, order=order, required_role="clerk")


def test_default_templates_have_contiguous_orders():
    for template in DEFAULT_TEMPLATES:
        assert [s.order for s in template.steps] == list(range(1, len(template.steps) + 1))
        assert template.first_step().order == 1


def test_steps_are_sorted_by_order():
    template = WorkflowTemplate(
        id="t", name="T", document_type="t", steps=[_step("b", 2), _step("a", 1)]
    )
    assert [s.id for s in template.steps] == ["a", "b"]
    assert template.position("b") == 1


def test_gap_in_orders_is_rejected():
    with pytest.raises(ValidationError):
        WorkflowTemplate(
            id="t", name="T", document_type="t", steps=[_step("a", 1), _step("c", 3)]
        )


def test_orders_must_start_at_one():
    with pytest.raises(ValidationError):
        WorkflowTemplate(id="t", name="T", document_type="t", steps=[_step("a", 2)])


def test_duplicate_step_ids_are_rejected():
    with pytest.raises(ValidationError):
        WorkflowTemplate(
            id="t", name="T", document_type="t", steps=[_step("a", 1), _step("a", 2)]
        )


def test_negative_duration_is_rejected():
    with pytest.raises(ValidationError):
        WorkflowStepDefinition(
            id="a", name="a", order=1, required_role="clerk", estimated_duration=-1
        )


def test_empty_template_is_representable():
    template = WorkflowTemplate(id="t", name="T", document_type="t")
    assert template.first_step() is None
    assert template.next_step("anything") is None


def test_step_navigation():
    template = BARANGAY_CLEARANCE
    assert template.step("step-3").name == "Background Check"
    assert template.next_step("step-3").id == "step-4"
    assert template.next_step("step-6") is None
    assert [s.id for s in template.remaining_steps("step-5")] == ["step-5", "step-6"]
    assert template.remaining_steps("missing") == []
    assert template.step("missing") is None


def test_template_is_frozen():
    with pytest.raises(ValidationError):
        BARANGAY_CLEARANCE.is_active = False


def test_instance_status_helpers():
    wf = WorkflowInstance(workflow_id="w", document_request_id="r")
    assert wf.is_live and not wf.is_terminal
    wf.status = "on_hold"
    assert wf.is_live and not wf.is_terminal
    wf.status = "cancelled"
    assert wf.is_terminal and not wf.is_live


def test_snapshot_is_detached():
    wf = WorkflowInstance(workflow_id="w", document_request_id="r")
    copy = wf.snapshot()
    copy.status = "completed"
    assert wf.status == "active"
