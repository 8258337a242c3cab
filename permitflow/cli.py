"""Command line interface for operating permitflow workflows."""

from __future__ import annotations

import asyncio
import logging
from typing import List, NoReturn, Optional

import typer

from permitflow import load_config
from permitflow.engine import TransitionResult
from permitflow.errors import WorkflowValidationError
from permitflow.service import get_workflow_service

app = typer.Typer(help="CLI for permitflow document workflows")

# Command groups
template_app = typer.Typer(help="Commands for inspecting workflow templates")
instance_app = typer.Typer(help="Commands for managing workflow instances")

app.add_typer(template_app, name="template")
app.add_typer(instance_app, name="instance")


@app.callback()
def main() -> None:
    """permitflow CLI entry point."""
    config = load_config()
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _report(result: TransitionResult, message: str) -> None:
    if not result:
        _fail(f"Transition refused: {result.error}")
    typer.echo(message)


@template_app.command("list")
def template_list(
    all_versions: bool = typer.Option(
        False, "--all", help="Include superseded and inactive templates"
    ),
) -> None:
    """List workflow templates by document type."""
    service = get_workflow_service()
    templates = service.list_templates(active_only=not all_versions)
    if not templates:
        typer.echo("No templates found")
        return
    for template in templates:
        state = "active" if template.is_active else "inactive"
        typer.echo(
            f"{template.document_type}\t{template.id}\tv{template.version}\t"
            f"{len(template.steps)} steps\t{state}"
        )


@template_app.command("show")
def template_show(document_type: str) -> None:
    """
    Show the active template for a document type with its ordered steps.

    Example:
        permitflow template show barangay-clearance
        # Output: Barangay Clearance Processing (workflow-barangay-clearance v1.0)
        #           1. step-1 Initial Review [clerk, 0.5h]
    """
    service = get_workflow_service()
    template = service.get_template(document_type)
    if template is None:
        _fail(f"No active template for document type '{document_type}'")
    typer.echo(f"{template.name} ({template.id} v{template.version})")
    for step in template.steps:
        typer.echo(
            f"  {step.order}. {step.id} {step.name} "
            f"[{step.required_role}, {step.estimated_duration:g}h]"
        )


@instance_app.command("create")
def instance_create(
    document_request_id: str,
    document_type: str,
    priority: Optional[str] = typer.Option(
        None, help="low, medium, high or urgent (default from config)"
    ),
) -> None:
    """Create a workflow instance for a document request."""
    service = get_workflow_service()
    if priority is not None and priority not in ("low", "medium", "high", "urgent"):
        _fail(f"Invalid priority '{priority}'")
    try:
        instance = asyncio.run(
            service.create_instance(document_request_id, document_type, priority)
        )
    except WorkflowValidationError as exc:
        _fail(str(exc))
    typer.echo(f"Created workflow instance {instance.id}")
    typer.echo(f"Current step: {instance.current_step_id}")


@instance_app.command("start")
def instance_start(
    instance_id: str,
    step_id: str,
    assignee: str = typer.Option("system", help="Actor taking the step"),
) -> None:
    """Start a pending step."""
    service = get_workflow_service()
    result = asyncio.run(service.start_step(instance_id, step_id, assignee))
    _report(result, f"Step {step_id} started by {assignee}")


@instance_app.command("complete")
def instance_complete(
    instance_id: str,
    step_id: str,
    notes: Optional[str] = typer.Option(None, help="Notes to record on the step"),
    attachment: Optional[List[str]] = typer.Option(
        None, "--attachment", help="Attachment reference (repeatable)"
    ),
) -> None:
    """Complete an in-progress step and advance the workflow."""
    service = get_workflow_service()
    result = asyncio.run(
        service.complete_step(instance_id, step_id, notes, attachment or None)
    )
    _report(result, f"Step {step_id} completed")
    if result.instance is not None and result.instance.status == "completed":
        typer.echo("Workflow completed")


@instance_app.command("reject")
def instance_reject(
    instance_id: str,
    step_id: str,
    reason: str = typer.Option(..., help="Why the request is rejected"),
) -> None:
    """Reject a step. This cancels the whole workflow instance."""
    service = get_workflow_service()
    result = asyncio.run(service.reject_step(instance_id, step_id, reason))
    _report(result, f"Step {step_id} rejected; workflow cancelled")


@instance_app.command("pause")
def instance_pause(
    instance_id: str,
    reason: Optional[str] = typer.Option(None, help="Why the workflow is paused"),
) -> None:
    """Put an active workflow instance on hold."""
    service = get_workflow_service()
    result = asyncio.run(service.pause_instance(instance_id, reason))
    _report(result, f"Workflow instance {instance_id} on hold")


@instance_app.command("resume")
def instance_resume(instance_id: str) -> None:
    """Resume an on-hold workflow instance."""
    service = get_workflow_service()
    result = asyncio.run(service.resume_instance(instance_id))
    _report(result, f"Workflow instance {instance_id} resumed")


@instance_app.command("list")
def instance_list(
    assignee: Optional[str] = typer.Option(
        None, help="Only active instances assigned to this actor"
    ),
) -> None:
    """
    List active workflow instances.

    Returns:
        Tab-separated instance id, document request id, status, priority and
        assignee, or "No workflow instances found"
    """
    service = get_workflow_service()
    if assignee:
        instances = asyncio.run(service.get_instances_by_assignee(assignee))
    else:
        instances = asyncio.run(service.get_active_instances())
    if not instances:
        typer.echo("No workflow instances found")
        return
    for wf in instances:
        typer.echo(
            f"{wf.id}\t{wf.document_request_id}\t{wf.status}\t{wf.priority}\t"
            f"{wf.assigned_to or '-'}"
        )


@instance_app.command("show")
def instance_show(
    instance_id: str,
    by_request: bool = typer.Option(
        False, "--by-request", help="Treat the argument as a document request id"
    ),
) -> None:
    """Show a workflow instance and the state of each step."""
    service = get_workflow_service()
    if by_request:
        wf = asyncio.run(service.get_instance_by_document_request(instance_id))
    else:
        wf = asyncio.run(service.get_instance(instance_id))
    if wf is None:
        _fail("Workflow instance not found")
    typer.echo(f"Workflow instance {wf.id}: {wf.status}")
    typer.echo(f"Document request: {wf.document_request_id}")
    typer.echo(f"Template: {wf.workflow_id}  Priority: {wf.priority}")
    for step in wf.steps:
        marker = "*" if step.step_id == wf.current_step_id else "-"
        line = f"{marker} {step.step_id}: {step.status}"
        if step.assigned_to:
            line += f" ({step.assigned_to})"
        if step.duration is not None:
            line += f" {step.duration:g}h"
        typer.echo(line)


@instance_app.command("progress")
def instance_progress(instance_id: str) -> None:
    """Show completion progress and the estimated completion time."""
    service = get_workflow_service()
    progress = asyncio.run(service.get_progress(instance_id))
    if progress is None:
        _fail("Workflow instance not found")
    typer.echo(
        f"{progress.completed_steps}/{progress.total_steps} steps "
        f"({progress.progress_percentage}%)"
    )
    typer.echo(f"Current step: {progress.current_step}")
    if progress.estimated_completion is not None:
        typer.echo(f"Estimated completion: {progress.estimated_completion.isoformat()}")


@app.command("stats")
def stats() -> None:
    """Show workflow counts by status and priority."""
    service = get_workflow_service()
    statistics = asyncio.run(service.get_statistics())
    typer.echo(f"Total: {statistics.total}")
    typer.echo(f"Active: {statistics.active}")
    typer.echo(f"Completed: {statistics.completed}")
    typer.echo(f"Cancelled: {statistics.cancelled}")
    typer.echo(f"On hold: {statistics.on_hold}")
    typer.echo(
        f"Average completion time: {statistics.average_completion_time_hours}h"
    )
    for priority, count in sorted(statistics.by_priority.items()):
        typer.echo(f"  {priority}: {count}")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
