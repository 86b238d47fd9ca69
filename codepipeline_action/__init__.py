"""Run a Python function as an AWS CodePipeline custom action on Lambda."""

from .action import create_action
from .config import ActionConfig
from .errors import (
    ActionConfigError,
    ActionError,
    ArityError,
    ArtifactFormatError,
    MalformedJobError,
    UnsupportedLocationError,
)
from .input_adapter import default_input_adapter
from .logging_helper import ActionLogger
from .output_adapter import default_output_adapter
from .reporters import default_on_job_completion, default_on_job_failure
from .schemas import Artifact, Job, ValidatedJob
from .validator import create_job_validator

__all__ = [
    "ActionConfig",
    "ActionConfigError",
    "ActionError",
    "ActionLogger",
    "ArityError",
    "Artifact",
    "ArtifactFormatError",
    "Job",
    "MalformedJobError",
    "UnsupportedLocationError",
    "ValidatedJob",
    "create_action",
    "create_job_validator",
    "default_input_adapter",
    "default_on_job_completion",
    "default_on_job_failure",
    "default_output_adapter",
]
