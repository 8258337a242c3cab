"""Shared constants for permitflow."""

COMPLETED_STEP_LABEL = "Completed"
DEFAULT_MAX_SAVE_ATTEMPTS = 3
SECONDS_PER_HOUR = 3600
