"""Encode handler outputs as single-entry zips and store them as output artifacts."""

from __future__ import annotations

import json
from functools import partial
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .archive_helper import OUTPUT_ENTRY_NAME, build_single_entry
from .errors import ArityError, ArtifactFormatError
from .fanout import run_all
from .logging_helper import ActionLogger
from .schemas import Artifact, ValidatedJob
from .storage_helper import check_location, put_object_bytes, s3_uri

STAGE_NAME = "output"


def zip_artifact(label: str, output: Any, logger: ActionLogger, job_id: Optional[str] = None) -> bytes:
    """Serialize one output value as JSON inside a fresh zip archive."""
    logger.event(STAGE_NAME, "zip", job_id=job_id, artifact=label, entry=OUTPUT_ENTRY_NAME)
    try:
        text = json.dumps(output, allow_nan=False)
    except (TypeError, ValueError) as exc:
        logger.error(STAGE_NAME, "serialize_error", job_id=job_id, artifact=label, error=str(exc))
        raise ArtifactFormatError(f"Failed to serialize output artifact {label} as JSON") from None
    return build_single_entry(text)


def _store(validated: ValidatedJob, number: int, artifact: Artifact, output: Any, logger: ActionLogger) -> Dict[str, Any]:
    label = artifact.label(number)
    location = artifact.location.s3_location
    body = zip_artifact(label, output, logger, validated.id)

    logger.event(STAGE_NAME, "put", job_id=validated.id, artifact=label, uri=s3_uri(location))
    try:
        ack = put_object_bytes(validated.s3, location, body)
    except Exception as exc:
        logger.error(STAGE_NAME, "put_failed", job_id=validated.id, artifact=label, error_type=type(exc).__name__, error=str(exc))
        raise
    logger.event(STAGE_NAME, "put_ok", job_id=validated.id, artifact=label)
    return ack


def default_output_adapter(
    validated: Optional[ValidatedJob] = None,
    outputs: Optional[Sequence[Any]] = None,
    logger: Optional[ActionLogger] = None,
) -> Tuple[ValidatedJob, List[Dict[str, Any]]]:
    """Store one output artifact per value; values align with the job's outputArtifacts."""
    log = logger or ActionLogger()

    if validated is None:
        raise ArityError(
            "Output adapter expected to receive job followed by output(s) but instead received no arguments"
        )

    values = list(outputs or [])
    artifacts = validated.output_artifacts
    if len(values) != len(artifacts):
        raise ArityError(
            f"Output adapter expected to receive job followed by {len(artifacts)} output(s) "
            f"but instead received {len(values)} output(s)"
        )

    log.event(STAGE_NAME, "deliver", job_id=validated.id, count=len(artifacts))

    for number, artifact in enumerate(artifacts, start=1):
        check_location(artifact, number, "output")

    tasks = [
        partial(_store, validated, number, artifact, value, log)
        for number, (artifact, value) in enumerate(zip(artifacts, values), start=1)
    ]
    return validated, run_all(tasks)
