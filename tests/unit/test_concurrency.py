"""Racing transitions on the same instance."""

import asyncio

import pytest

from permitflow.engine import TransitionEngine
from permitflow.errors import DuplicateActiveInstance, InvalidStepState
from permitflow.persistence import InMemoryInstanceRepository, SQLiteInstanceRepository
from permitflow.service import WorkflowService


class YieldingRepository(InMemoryInstanceRepository):
    """Yields to the event loop after every read so callers interleave."""

    async def get_instance(self, instance_id):
        instance = await super().get_instance(instance_id)
        await asyncio.sleep(0)
        return instance

    async def find_by_document_request(self, document_request_id):
        matches = await super().find_by_document_request(document_request_id)
        await asyncio.sleep(0)
        return matches


@pytest.mark.asyncio
async def test_concurrent_complete_has_one_winner(templates, clock):
    service = WorkflowService(templates, YieldingRepository(), clock=clock)
    wf = await service.create_instance("REQ-1", "barangay-clearance")
    await service.start_step(wf.id, "step-1", "alice")

    results = await asyncio.gather(
        service.complete_step(wf.id, "step-1", notes="first"),
        service.complete_step(wf.id, "step-1", notes="second"),
    )

    assert sorted(bool(r) for r in results) == [False, True]
    loser = next(r for r in results if not r)
    assert isinstance(loser.error, InvalidStepState)
    stored = await service.get_instance(wf.id)
    assert stored.current_step_id == "step-2"
    assert stored.version == 2


@pytest.mark.asyncio
async def test_concurrent_create_stores_one_instance(templates, clock):
    service = WorkflowService(templates, YieldingRepository(), clock=clock)

    results = await asyncio.gather(
        service.create_instance("REQ-1", "barangay-clearance"),
        service.create_instance("REQ-1", "barangay-clearance"),
        return_exceptions=True,
    )

    errors = [r for r in results if isinstance(r, Exception)]
    assert len(errors) == 1
    assert isinstance(errors[0], DuplicateActiveInstance)
    assert len(await service.instances.find_by_document_request("REQ-1")) == 1


@pytest.mark.asyncio
async def test_separate_engines_sharing_a_store(templates, clock):
    """Two engines (as in two worker processes) only share the version check."""
    repo = YieldingRepository()
    first = TransitionEngine(templates, repo, clock=clock)
    second = TransitionEngine(templates, repo, clock=clock)
    wf = await first.create_instance("REQ-1", "barangay-clearance")

    results = await asyncio.gather(
        first.start_step(wf.id, "step-1", "alice"),
        second.start_step(wf.id, "step-1", "bob"),
    )

    assert sorted(bool(r) for r in results) == [False, True]
    stored = await repo.get_instance(wf.id)
    winner = next(r for r in results if r)
    assert stored.steps[0].assigned_to == winner.instance.steps[0].assigned_to
    assert stored.version == 1


@pytest.mark.asyncio
async def test_separate_engines_sharing_sqlite(tmp_path, templates, clock):
    db_path = tmp_path / "wf.db"
    first = TransitionEngine(templates, SQLiteInstanceRepository(db_path), clock=clock)
    second = TransitionEngine(templates, SQLiteInstanceRepository(db_path), clock=clock)
    wf = await first.create_instance("REQ-1", "certificate-residency")
    assert await first.start_step(wf.id, "step-1", "alice")

    results = await asyncio.gather(
        first.complete_step(wf.id, "step-1"),
        second.complete_step(wf.id, "step-1"),
    )

    assert sorted(bool(r) for r in results) == [False, True]
