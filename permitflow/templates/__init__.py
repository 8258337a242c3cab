"""Template store for permitflow workflows."""

from __future__ import annotations

from typing import Optional

from ..config import PermitflowConfig, load_config
from .defaults import BARANGAY_CLEARANCE, CERTIFICATE_OF_RESIDENCY, DEFAULT_TEMPLATES
from .inmemory import InMemoryTemplateRepository
from .loader import load_templates
from .repository import TemplateRepository


def get_template_repository(
    config: Optional[PermitflowConfig] = None,
) -> TemplateRepository:
    """Build the template store from configuration.

    Built-in templates are published first (unless
    ``seed_default_templates`` is off), followed by any templates found in
    ``templates_path``. A file template that is active for a built-in
    document type supersedes the built-in one.
    """

    config = config or load_config()
    repository = InMemoryTemplateRepository(
        DEFAULT_TEMPLATES if config.seed_default_templates else ()
    )
    if config.templates_path:
        for template in load_templates(config.templates_path):
            repository.publish(template)
    return repository


__all__ = [
    "BARANGAY_CLEARANCE",
    "CERTIFICATE_OF_RESIDENCY",
    "DEFAULT_TEMPLATES",
    "InMemoryTemplateRepository",
    "TemplateRepository",
    "get_template_repository",
    "load_templates",
]
