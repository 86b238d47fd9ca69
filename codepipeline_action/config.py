"""Action configuration and resolution of default pipeline stages."""

from __future__ import annotations

from functools import partial
from typing import Any, Callable, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ActionConfigError
from .input_adapter import default_input_adapter
from .logging_helper import ActionLogger
from .output_adapter import default_output_adapter
from .reporters import default_on_job_completion, default_on_job_failure
from .validator import create_job_validator

Stage = Callable[..., Any]


class ActionConfig(BaseModel):
    """
    Every replaceable stage of an action, plus artifact counts and logging.

    Unset stages are filled in by resolve_config() with the built-in
    implementations. Field names may also be given in the camelCase form
    used by CodePipeline (inputHandler, numInputArtifacts, ...).
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    input_handler: Optional[Stage] = Field(default=None, alias="inputHandler")
    job_validator: Optional[Stage] = Field(default=None, alias="jobValidator")
    input_adapter: Optional[Stage] = Field(default=None, alias="inputAdapter")
    output_adapter: Optional[Stage] = Field(default=None, alias="outputAdapter")
    on_job_completion: Optional[Stage] = Field(default=None, alias="onJobCompletion")
    on_job_failure: Optional[Stage] = Field(default=None, alias="onJobFailure")
    num_input_artifacts: int = Field(default=1, ge=0, alias="numInputArtifacts")
    num_output_artifacts: int = Field(default=1, ge=0, alias="numOutputArtifacts")
    logger: Optional[ActionLogger] = None
    verbose: Optional[bool] = None


HandlerOrConfig = Union[Stage, ActionConfig, Dict[str, Any]]


def _build(values: Dict[str, Any]) -> ActionConfig:
    try:
        return ActionConfig.model_validate(values)
    except ValidationError as exc:
        raise ActionConfigError(f"Invalid action configuration: {exc}") from exc


def resolve_config(handler_or_config: HandlerOrConfig, **overrides: Any) -> ActionConfig:
    """Return a configuration with every stage set, raising ActionConfigError if unusable."""
    if isinstance(handler_or_config, ActionConfig):
        values = {name: getattr(handler_or_config, name) for name in ActionConfig.model_fields}
    elif isinstance(handler_or_config, dict):
        values = dict(handler_or_config)
    elif callable(handler_or_config):
        values = {"input_handler": handler_or_config}
    else:
        raise ActionConfigError(
            f"Expected a handler function or an action configuration, got {type(handler_or_config).__name__}"
        )
    values.update(overrides)
    config = _build(values)

    if config.input_handler is None:
        raise ActionConfigError("No input handler specified when creating action")

    logger = config.logger or ActionLogger(verbose=config.verbose)
    defaults = {
        "logger": logger,
        "job_validator": config.job_validator
        or create_job_validator(config.num_input_artifacts, config.num_output_artifacts, logger=logger),
        "input_adapter": config.input_adapter or partial(default_input_adapter, logger=logger),
        "output_adapter": config.output_adapter or partial(default_output_adapter, logger=logger),
        "on_job_completion": config.on_job_completion or partial(default_on_job_completion, logger=logger),
        "on_job_failure": config.on_job_failure or partial(default_on_job_failure, logger=logger),
    }
    return config.model_copy(update=defaults)
