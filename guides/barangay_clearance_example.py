"""Walk a barangay clearance request through every processing step."""

import asyncio

from permitflow import WorkflowService
from permitflow.persistence import InMemoryInstanceRepository
from permitflow.templates import DEFAULT_TEMPLATES, InMemoryTemplateRepository


async def main():
    """Process one clearance request from intake to release."""
    service = WorkflowService(
        InMemoryTemplateRepository(DEFAULT_TEMPLATES), InMemoryInstanceRepository()
    )

    instance = await service.create_instance("REQ-2025-0001", "barangay-clearance", "high")
    print(f"✅ Created workflow instance {instance.id}")

    template = service.get_template("barangay-clearance")
    for step in template.steps:
        await service.start_step(instance.id, step.id, f"{step.required_role}-on-duty")
        result = await service.complete_step(instance.id, step.id, notes=f"{step.name} done")
        progress = await service.get_progress(instance.id)
        print(
            f"📋 {step.name}: {progress.progress_percentage}% "
            f"(current: {progress.current_step})"
        )

    print(f"🏁 Final status: {result.instance.status}")


if __name__ == "__main__":
    asyncio.run(main())
