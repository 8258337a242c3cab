"""Aggregate statistics over all workflow instances."""

from __future__ import annotations

from collections import Counter

from .models import WorkflowStatistics
from .persistence import InstanceRepository
from .utils.clock import hours_between
from .utils.numbers import round_half_up


class StatisticsAggregator:
    """Count instances by status and priority and average completion time."""

    def __init__(self, instances: InstanceRepository) -> None:
        self._instances = instances

    async def get_statistics(self) -> WorkflowStatistics:
        instances = await self._instances.list_instances()
        by_status = Counter(wf.status for wf in instances)

        durations = [
            hours_between(wf.started_at, wf.completed_at)
            for wf in instances
            if wf.status == "completed" and wf.completed_at is not None
        ]
        average = (
            int(round_half_up(sum(durations) / len(durations))) if durations else 0
        )

        return WorkflowStatistics(
            total=len(instances),
            active=by_status["active"],
            completed=by_status["completed"],
            cancelled=by_status["cancelled"],
            on_hold=by_status["on_hold"],
            average_completion_time_hours=average,
            by_priority=dict(Counter(wf.priority for wf in instances)),
        )
