"""Job validation: shape and artifact-count checks plus the scoped S3 client."""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Union

from pydantic import ValidationError

from .errors import MalformedJobError
from .logging_helper import ActionLogger
from .schemas import ArtifactCredentials, Job, ValidatedJob
from .storage_helper import s3_client_for

STAGE_NAME = "validator"
CREDENTIALS_KEY = "artifactCredentials"

JobValidator = Callable[[Union[Job, Dict[str, Any]]], ValidatedJob]


def describe_validation_error(exc: ValidationError) -> str:
    """Summarize a pydantic error by field location only, never by input value."""
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors(include_url=False, include_input=False)
    )


def parse_job(raw: Union[Job, Mapping[str, Any]]) -> Job:
    """Coerce a raw job description into a Job model."""
    if isinstance(raw, Job):
        return raw
    try:
        return Job.model_validate(raw)
    except ValidationError as exc:
        raise MalformedJobError(
            f"CodePipeline job description is malformed: {describe_validation_error(exc)}"
        ) from None


def redacted(description: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy of a job description without its artifact credentials."""
    summary = dict(description)
    data = summary.get("data")
    if isinstance(data, Mapping):
        summary["data"] = {key: value for key, value in data.items() if key != CREDENTIALS_KEY}
    return summary


def check_shape(description: Mapping[str, Any], num_input_artifacts: int, num_output_artifacts: int) -> None:
    """Run the ordered section and artifact-count checks on a raw job description."""
    data = description.get("data")
    if data is None:
        raise MalformedJobError("CodePipeline job contained no data")
    if not isinstance(data, Mapping):
        raise MalformedJobError("CodePipeline job data is not an object")

    input_artifacts = data.get("inputArtifacts")
    if input_artifacts is None:
        raise MalformedJobError("CodePipeline job data contained no inputArtifacts")

    output_artifacts = data.get("outputArtifacts")
    if output_artifacts is None:
        raise MalformedJobError("CodePipeline job data contained no outputArtifacts")

    if not isinstance(input_artifacts, list) or not isinstance(output_artifacts, list):
        raise MalformedJobError("CodePipeline job data artifacts are not lists")

    if len(input_artifacts) != num_input_artifacts:
        raise MalformedJobError(
            f"CodePipeline job data contained {len(input_artifacts)} input artifact(s), "
            f"but action was expecting {num_input_artifacts}"
        )

    if len(output_artifacts) != num_output_artifacts:
        raise MalformedJobError(
            f"CodePipeline job data contained {len(output_artifacts)} output artifact(s), "
            f"but action was expecting {num_output_artifacts}"
        )

    if data.get(CREDENTIALS_KEY) is None:
        raise MalformedJobError("CodePipeline job data contained no artifactCredentials")


def create_job_validator(
    num_input_artifacts: int,
    num_output_artifacts: int,
    logger: Optional[ActionLogger] = None,
    s3_client_factory: Callable[[ArtifactCredentials], Any] = s3_client_for,
) -> JobValidator:
    """Return a validator expecting exactly the given artifact counts."""
    log = logger or ActionLogger()

    def validate(raw: Union[Job, Dict[str, Any]]) -> ValidatedJob:
        if isinstance(raw, Job):
            description = raw.model_dump(by_alias=True, exclude_none=True)
        elif isinstance(raw, Mapping):
            description = raw
        else:
            raise MalformedJobError("CodePipeline job description is not an object")

        log.event(STAGE_NAME, "validate", job_id=description.get("id"), job=redacted(description))
        check_shape(description, num_input_artifacts, num_output_artifacts)

        job = parse_job(raw)
        log.event(STAGE_NAME, "create_s3_client", job_id=job.id)
        return ValidatedJob(job=job, s3=s3_client_factory(job.data.artifact_credentials))

    return validate
