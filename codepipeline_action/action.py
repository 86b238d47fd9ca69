"""
Build a Lambda entry point that runs one CodePipeline custom-action job.

The pipeline for every invocation is:

    validator -> input adapter -> input handler -> output adapter -> completion

Any exception along the way is reported once through the failure reporter
and then re-raised so Lambda also records the invocation as failed.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .config import ActionConfig, HandlerOrConfig, resolve_config
from .errors import ArityError, MalformedJobError
from .metrics_helper import stage_timer
from .reporters import job_id_of
from .schemas import ValidatedJob

STAGE_NAME = "action"
JOB_EVENT_KEY = "CodePipeline.job"

LambdaHandler = Callable[[Mapping[str, Any], Any], Any]


def extract_job(event: Mapping[str, Any]) -> Dict[str, Any]:
    """Return the job description carried by a CodePipeline invocation event."""
    job = event.get(JOB_EVENT_KEY) if isinstance(event, Mapping) else None
    if job is None:
        raise MalformedJobError(f"Event did not contain {JOB_EVENT_KEY}")
    return job


def unpack_handler_result(result: Any) -> Tuple[ValidatedJob, List[Any]]:
    """Split an input handler's (job, outputs) return value."""
    if isinstance(result, (tuple, list)) and len(result) == 2 and isinstance(result[1], (tuple, list)):
        return result[0], list(result[1])
    raise ArityError("Input handler expected to return (job, outputs) with outputs as a list")


def run_job(config: ActionConfig, job: Dict[str, Any]) -> Any:
    """Run every stage for one job; failures are reported, then re-raised."""
    logger = config.logger
    try:
        validated = config.job_validator(job)
        validated, inputs = config.input_adapter(validated)
        validated, outputs = unpack_handler_result(config.input_handler(validated, inputs))
        validated, _ = config.output_adapter(validated, outputs)
        return config.on_job_completion(validated)
    except Exception as exc:
        logger.exception(STAGE_NAME, job_id_of(job), exc)
        try:
            config.on_job_failure(job, exc)
        except Exception as report_exc:  # pylint: disable=broad-except
            logger.error(
                STAGE_NAME,
                "failure_report_failed",
                job_id=job_id_of(job),
                error_type=type(report_exc).__name__,
                error=str(report_exc),
            )
        raise


def create_action(handler_or_config: HandlerOrConfig, **overrides: Any) -> LambdaHandler:
    """
    Return a Lambda handler running the given input handler as a custom action.

    `handler_or_config` is either the input handler itself or an
    ActionConfig (or dict of its fields). Keyword overrides are merged into
    the configuration. The input handler is called as
    ``input_handler(job, inputs)`` and must return ``(job, outputs)``.
    """
    config = resolve_config(handler_or_config, **overrides)
    logger = config.logger

    def handler(event: Mapping[str, Any], context: Optional[Any] = None) -> Any:
        request_id = getattr(context, "aws_request_id", None)
        try:
            job = extract_job(event)
        except MalformedJobError as exc:
            logger.exception(STAGE_NAME, None, exc, request_id=request_id)
            raise

        job_id = job_id_of(job)
        logger.event(STAGE_NAME, "start", job_id=job_id, request_id=request_id)
        status = "failed"
        with stage_timer() as elapsed:
            try:
                result = run_job(config, job)
                status = "completed"
                return result
            finally:
                logger.event(STAGE_NAME, status, job_id=job_id, request_id=request_id, duration_ms=elapsed())

    return handler
