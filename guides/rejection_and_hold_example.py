"""Show refused transitions, administrative holds and rejection."""

import asyncio

from permitflow import WorkflowService
from permitflow.persistence import InMemoryInstanceRepository
from permitflow.templates import DEFAULT_TEMPLATES, InMemoryTemplateRepository


async def main():
    service = WorkflowService(
        InMemoryTemplateRepository(DEFAULT_TEMPLATES), InMemoryInstanceRepository()
    )
    instance = await service.create_instance("REQ-2025-0042", "certificate-residency")

    # Completing a step that was never started is refused
    result = await service.complete_step(instance.id, "step-1")
    print(f"❌ Refused: {result.error}")

    await service.pause_instance(instance.id, reason="awaiting proof of address")
    result = await service.start_step(instance.id, "step-1", "clerk-ana")
    print(f"⏸️  While on hold: {result.error}")

    await service.resume_instance(instance.id)
    await service.start_step(instance.id, "step-1", "clerk-ana")
    await service.complete_step(instance.id, "step-1")
    await service.reject_step(instance.id, "step-2", "applicant not found at address")

    stats = await service.get_statistics()
    print(f"📊 total={stats.total} cancelled={stats.cancelled} active={stats.active}")


if __name__ == "__main__":
    asyncio.run(main())
