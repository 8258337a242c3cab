import uuid

import pytest

from permitflow.errors import DuplicateActiveInstance, InstanceNotFound, StaleInstanceError
from permitflow.models import WorkflowInstance, WorkflowStepInstance
from permitflow.persistence import InMemoryInstanceRepository, SQLiteInstanceRepository
from permitflow.service import WorkflowService


def _instance(request_id: str | None = None, **kwargs) -> WorkflowInstance:
    return WorkflowInstance(
        workflow_id="workflow-business-permit",
        document_request_id=request_id or str(uuid.uuid4()),
        current_step_id="A",
        steps=[WorkflowStepInstance(step_id="A"), WorkflowStepInstance(step_id="B")],
        **kwargs,
    )


@pytest.fixture(params=["inmemory", "sqlite"])
def repo(request, tmp_path):
    if request.param == "sqlite":
        return SQLiteInstanceRepository(tmp_path / "wf.db")
    return InMemoryInstanceRepository()


@pytest.mark.asyncio
async def test_repository_crud(repo):
    wf = _instance(priority="high")
    await repo.add_instance(wf)

    stored = await repo.get_instance(wf.id)
    assert stored is not None
    assert stored.model_dump() == wf.model_dump()
    assert stored.version == 0

    stored.steps[0].status = "in_progress"
    stored.steps[0].assigned_to = "alice"
    stored.assigned_to = "alice"
    await repo.save_instance(stored)
    assert stored.version == 1

    reloaded = await repo.get_instance(wf.id)
    assert reloaded.version == 1
    assert reloaded.steps[0].status == "in_progress"
    assert reloaded.assigned_to == "alice"

    all_wfs = await repo.list_instances()
    assert [w.id for w in all_wfs] == [wf.id]
    assert await repo.get_instance("missing") is None


@pytest.mark.asyncio
async def test_repository_rejects_stale_save(repo):
    wf = _instance()
    await repo.add_instance(wf)
    first = await repo.get_instance(wf.id)
    second = await repo.get_instance(wf.id)

    first.status = "on_hold"
    await repo.save_instance(first)
    second.status = "cancelled"
    with pytest.raises(StaleInstanceError):
        await repo.save_instance(second)

    assert (await repo.get_instance(wf.id)).status == "on_hold"


@pytest.mark.asyncio
async def test_repository_save_unknown_instance(repo):
    with pytest.raises(InstanceNotFound):
        await repo.save_instance(_instance())


@pytest.mark.asyncio
async def test_repository_one_live_instance_per_request(repo):
    live = _instance("REQ-1")
    await repo.add_instance(live)
    with pytest.raises(DuplicateActiveInstance):
        await repo.add_instance(_instance("REQ-1"))

    stored = await repo.get_instance(live.id)
    stored.status = "cancelled"
    await repo.save_instance(stored)
    await repo.add_instance(_instance("REQ-1"))

    matches = await repo.find_by_document_request("REQ-1")
    assert len(matches) == 2
    assert matches[0].id == live.id


@pytest.mark.asyncio
async def test_repository_status_filter(repo):
    active = _instance()
    done = _instance(status="completed")
    await repo.add_instance(active)
    await repo.add_instance(done)

    assert [w.id for w in await repo.list_instances(status="active")] == [active.id]
    assert [w.id for w in await repo.list_instances(status="completed")] == [done.id]
    assert await repo.list_instances(status="on_hold") == []


@pytest.mark.asyncio
async def test_sqlite_state_survives_reopen(tmp_path, templates, clock):
    db_path = tmp_path / "wf.db"
    service = WorkflowService(templates, SQLiteInstanceRepository(db_path), clock=clock)
    wf = await service.create_instance("REQ-1", "certificate-residency", "urgent")
    assert await service.start_step(wf.id, "step-1", "alice")
    clock.advance(minutes=15)
    assert await service.complete_step(wf.id, "step-1", notes="ok", attachments=["a.pdf"])

    reopened = WorkflowService(templates, SQLiteInstanceRepository(db_path), clock=clock)
    stored = await reopened.get_instance_by_document_request("REQ-1")
    progress = await reopened.get_progress(wf.id)

    assert stored.id == wf.id
    assert stored.version == 2
    assert stored.current_step_id == "step-2"
    assert stored.steps[0].duration == 0.25
    assert stored.steps[0].attachments == ["a.pdf"]
    assert stored.started_at == wf.started_at
    assert progress.progress_percentage == 25
