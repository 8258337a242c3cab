"""Load workflow templates from YAML files."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from ..models import WorkflowTemplate

logger = logging.getLogger(__name__)


def load_templates(path: str | Path) -> list[WorkflowTemplate]:
    """Parse the ``templates`` list of a YAML file into templates.

    Example file::

        templates:
          - id: workflow-business-permit
            name: Business Permit Processing
            document_type: business-permit
            version: "2.0"
            steps:
              - {id: review, name: Review, order: 1, required_role: clerk, estimated_duration: 1}

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the file is not a mapping with a ``templates`` list.
        pydantic.ValidationError: If a template fails validation.
    """

    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Template file {path} must contain a mapping")

    entries = data.get("templates") or []
    if not isinstance(entries, list):
        raise ValueError(f"'templates' in {path} must be a list")

    templates = [WorkflowTemplate.model_validate(entry) for entry in entries]
    logger.info(f"Loaded {len(templates)} workflow template(s) from {path}")
    return templates
