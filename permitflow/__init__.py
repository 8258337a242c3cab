"""permitflow: step-by-step processing workflows for document requests."""

from .config import PermitflowConfig, load_config
from .engine import TransitionEngine, TransitionResult
from .errors import (
    DuplicateActiveInstance,
    InstanceNotFound,
    InvalidInstanceState,
    InvalidStepState,
    PermitflowError,
    StaleInstanceError,
    StepNotFound,
    TemplateEmpty,
    TemplateIntegrityError,
    TemplateNotFound,
    WorkflowValidationError,
)
from .models import (
    WorkflowInstance,
    WorkflowProgress,
    WorkflowStatistics,
    WorkflowStepDefinition,
    WorkflowStepInstance,
    WorkflowTemplate,
)
from .persistence import get_repository
from .service import WorkflowService, get_workflow_service
from .templates import get_template_repository

__version__ = "0.1.0"
__all__ = [
    "DuplicateActiveInstance",
    "InstanceNotFound",
    "InvalidInstanceState",
    "InvalidStepState",
    "PermitflowConfig",
    "PermitflowError",
    "StaleInstanceError",
    "StepNotFound",
    "TemplateEmpty",
    "TemplateIntegrityError",
    "TemplateNotFound",
    "TransitionEngine",
    "TransitionResult",
    "WorkflowInstance",
    "WorkflowProgress",
    "WorkflowService",
    "WorkflowStatistics",
    "WorkflowStepDefinition",
    "WorkflowStepInstance",
    "WorkflowTemplate",
    "WorkflowValidationError",
    "get_repository",
    "get_template_repository",
    "get_workflow_service",
    "load_config",
]
