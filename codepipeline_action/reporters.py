"""Report the terminal status of a job back to CodePipeline."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict, Optional, Union

import boto3

from .logging_helper import ActionLogger
from .schemas import Job, ValidatedJob

STAGE_NAME = "reporter"
FAILURE_TYPE = "JobFailed"

AnyJob = Union[ValidatedJob, Job, Dict[str, Any]]


@lru_cache(maxsize=1)
def codepipeline_client():
    """Lazily instantiate the process-wide CodePipeline client."""
    session = boto3.session.Session()
    return session.client("codepipeline", region_name=os.getenv("AWS_REGION"))


def job_id_of(job: Optional[AnyJob]) -> Optional[str]:
    """Return the job id of a validated, parsed, or raw job description."""
    if job is None:
        return None
    if isinstance(job, (ValidatedJob, Job)):
        return job.id
    if isinstance(job, dict):
        return job.get("id")
    return None


def failure_message(error: BaseException) -> str:
    return str(error) or repr(error)


def default_on_job_completion(
    job: AnyJob,
    logger: Optional[ActionLogger] = None,
    client: Any = None,
) -> Dict[str, Any]:
    """Mark the job as succeeded."""
    log = logger or ActionLogger()
    job_id = job_id_of(job)
    log.event(STAGE_NAME, "success", job_id=job_id)
    return (client or codepipeline_client()).put_job_success_result(jobId=job_id)


def default_on_job_failure(
    job: AnyJob,
    error: BaseException,
    logger: Optional[ActionLogger] = None,
    client: Any = None,
) -> Dict[str, Any]:
    """Mark the job as failed with the error's message."""
    log = logger or ActionLogger()
    job_id = job_id_of(job)
    log.error(STAGE_NAME, "failure", job_id=job_id, error=failure_message(error))
    return (client or codepipeline_client()).put_job_failure_result(
        jobId=job_id,
        failureDetails={
            "message": failure_message(error),
            "type": FAILURE_TYPE,
        },
    )
