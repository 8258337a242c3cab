"""Exception taxonomy for workflow operations."""

from __future__ import annotations


class PermitflowError(Exception):
    """Base class for all permitflow errors."""


class WorkflowValidationError(PermitflowError):
    """A requested operation failed an expected precondition.

    These are reported back to the caller (usually as a failed
    ``TransitionResult``) and map to 4xx-style responses in a service layer.
    """


class TemplateNotFound(WorkflowValidationError):
    def __init__(self, document_type: str):
        super().__init__(f"No active workflow template for document type '{document_type}'")
        self.document_type = document_type


class TemplateEmpty(WorkflowValidationError):
    def __init__(self, template_id: str):
        super().__init__(f"Workflow template '{template_id}' has no steps")
        self.template_id = template_id


class TemplateConflictError(WorkflowValidationError):
    def __init__(self, template_id: str):
        super().__init__(f"Workflow template '{template_id}' is already published")
        self.template_id = template_id


class InstanceNotFound(WorkflowValidationError):
    def __init__(self, instance_id: str):
        super().__init__(f"Workflow instance '{instance_id}' not found")
        self.instance_id = instance_id


class StepNotFound(WorkflowValidationError):
    def __init__(self, instance_id: str, step_id: str):
        super().__init__(f"Step '{step_id}' not found in workflow instance '{instance_id}'")
        self.instance_id = instance_id
        self.step_id = step_id


class InvalidStepState(WorkflowValidationError):
    def __init__(self, step_id: str, status: str, expected: str):
        super().__init__(f"Step '{step_id}' is {status}, expected {expected}")
        self.step_id = step_id
        self.status = status
        self.expected = expected


class InvalidInstanceState(WorkflowValidationError):
    def __init__(self, instance_id: str, status: str, expected: str):
        super().__init__(
            f"Workflow instance '{instance_id}' is {status}, expected {expected}"
        )
        self.instance_id = instance_id
        self.status = status
        self.expected = expected


class DuplicateActiveInstance(WorkflowValidationError):
    def __init__(self, document_request_id: str):
        super().__init__(
            f"Document request '{document_request_id}' already has a live workflow instance"
        )
        self.document_request_id = document_request_id


class StaleInstanceError(PermitflowError):
    """The stored instance changed since it was loaded."""

    def __init__(self, instance_id: str, expected_version: int):
        super().__init__(
            f"Workflow instance '{instance_id}' was modified concurrently "
            f"(expected version {expected_version})"
        )
        self.instance_id = instance_id
        self.expected_version = expected_version


class TemplateIntegrityError(PermitflowError):
    """A live instance no longer matches a resolvable template.

    Templates referenced by instances must stay resolvable, so this is an
    internal error rather than a validation failure.
    """


__all__ = [
    "PermitflowError",
    "WorkflowValidationError",
    "TemplateNotFound",
    "TemplateEmpty",
    "TemplateConflictError",
    "InstanceNotFound",
    "StepNotFound",
    "InvalidStepState",
    "InvalidInstanceState",
    "DuplicateActiveInstance",
    "StaleInstanceError",
    "TemplateIntegrityError",
]
