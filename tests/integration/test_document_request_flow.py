"""End-to-end document request processing through the service facade."""

from datetime import timedelta

import pytest

from permitflow.persistence import SQLiteInstanceRepository
from permitflow.service import WorkflowService

CLEARANCE_STEPS = [f"step-{i}" for i in range(1, 7)]


@pytest.mark.asyncio
@pytest.mark.parametrize("backend", ["inmemory", "sqlite"])
async def test_barangay_clearance_end_to_end(backend, tmp_path, templates, instances, clock):
    store = SQLiteInstanceRepository(tmp_path / "wf.db") if backend == "sqlite" else instances
    service = WorkflowService(templates, store, clock=clock)

    wf = await service.create_instance("REQ-2025-0001", "barangay-clearance", "high")
    progress = await service.get_progress(wf.id)
    assert progress.estimated_completion == clock.now + timedelta(hours=6.75)

    roles = {"step-3": "officer-ben", "step-4": "captain-cruz", "step-6": "secretary-dee"}
    for step_id in CLEARANCE_STEPS:
        actor = roles.get(step_id, "clerk-ana")
        assert await service.start_step(wf.id, step_id, actor)
        assert [w.id for w in await service.get_instances_by_assignee(actor)] == [wf.id]
        clock.advance(minutes=30)
        assert await service.complete_step(wf.id, step_id, notes=f"{step_id} ok")

    final = await service.get_instance_by_document_request("REQ-2025-0001")
    progress = await service.get_progress(wf.id)
    stats = await service.get_statistics()

    assert final.status == "completed"
    assert final.current_step_id == ""
    assert final.assigned_to is None
    assert all(s.status == "completed" and s.duration == 0.5 for s in final.steps)
    assert progress.progress_percentage == 100
    assert progress.current_step == "Completed"
    assert stats.completed == 1
    assert stats.average_completion_time_hours == 3
    assert stats.by_priority == {"high": 1}
    assert await service.get_active_instances() == []


@pytest.mark.asyncio
async def test_rejected_request_can_be_resubmitted(service, clock):
    wf = await service.create_instance("REQ-9", "certificate-residency")
    await service.start_step(wf.id, "step-1", "clerk-ana")
    await service.complete_step(wf.id, "step-1")
    await service.start_step(wf.id, "step-2", "officer-ben")
    assert await service.reject_step(wf.id, "step-2", "not a resident")

    clock.advance(days=2)
    retry = await service.create_instance("REQ-9", "certificate-residency")

    assert (await service.get_instance_by_document_request("REQ-9")).id == retry.id
    stats = await service.get_statistics()
    assert stats.total == 2
    assert stats.cancelled == 1
    assert stats.active == 1
    assert stats.total == stats.active + stats.completed + stats.cancelled + stats.on_hold
