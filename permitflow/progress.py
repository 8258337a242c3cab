"""Progress calculation for workflow instances."""

from __future__ import annotations

from datetime import timedelta

from .constants import COMPLETED_STEP_LABEL
from .engine import resolve_template
from .models import WorkflowProgress
from .persistence import InstanceRepository
from .templates import TemplateRepository
from .utils.clock import Clock, utc_now
from .utils.numbers import round_half_up


class ProgressCalculator:
    """Derive completion percentage and time estimates for an instance."""

    def __init__(
        self,
        templates: TemplateRepository,
        instances: InstanceRepository,
        clock: Clock = utc_now,
    ) -> None:
        self._templates = templates
        self._instances = instances
        self._clock = clock

    async def get_progress(self, instance_id: str) -> WorkflowProgress | None:
        """Return progress for ``instance_id`` or ``None`` if it does not exist.

        The estimate adds the estimated durations of the current and all
        later steps to the current time, and is only given for active
        instances.

        Raises:
            TemplateIntegrityError: If the instance's template cannot be resolved.
        """
        instance = await self._instances.get_instance(instance_id)
        if instance is None:
            return None
        template = resolve_template(self._templates, instance)

        total_steps = len(template.steps)
        completed_steps = sum(1 for s in instance.steps if s.status == "completed")
        percentage = int(round_half_up(completed_steps / total_steps * 100))

        current = template.step(instance.current_step_id)
        estimated_completion = None
        if instance.status == "active" and current is not None:
            remaining_hours = sum(
                s.estimated_duration for s in template.remaining_steps(current.id)
            )
            estimated_completion = self._clock() + timedelta(hours=remaining_hours)

        return WorkflowProgress(
            total_steps=total_steps,
            completed_steps=completed_steps,
            current_step=current.name if current else COMPLETED_STEP_LABEL,
            progress_percentage=percentage,
            estimated_completion=estimated_completion,
        )
