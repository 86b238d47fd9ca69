"""Fetch input artifacts from S3 and decode the JSON document inside each zip."""

from __future__ import annotations

import json
import zipfile
from functools import partial
from typing import Any, List, Optional, Tuple

from .archive_helper import SingleEntryError, read_single_entry
from .errors import ArtifactFormatError
from .fanout import run_all
from .logging_helper import ActionLogger
from .schemas import Artifact, ValidatedJob
from .storage_helper import check_location, get_object_bytes, s3_uri

STAGE_NAME = "input"


def unzip_artifact(label: str, data: bytes, logger: ActionLogger, job_id: Optional[str] = None) -> bytes:
    """Return the contents of the single file inside an input artifact zip."""
    logger.event(STAGE_NAME, "unzip", job_id=job_id, artifact=label)
    try:
        return read_single_entry(data)
    except SingleEntryError as exc:
        raise ArtifactFormatError(
            f"Expected input artifact {label} zip to contain exactly 1 JSON file, "
            f"but it contains {exc.entry_count} entries"
        ) from None
    except zipfile.BadZipFile:
        raise ArtifactFormatError(f"Input artifact {label} is not a valid zip archive") from None


def parse_input_json(label: str, raw: bytes, logger: ActionLogger, job_id: Optional[str] = None) -> Any:
    """Parse the artifact contents; parser details are only written to the log."""
    logger.event(STAGE_NAME, "parse", job_id=job_id, artifact=label)
    try:
        return json.loads(raw.decode("utf-8"))
    except ValueError as exc:
        logger.error(STAGE_NAME, "parse_error", job_id=job_id, artifact=label, error=str(exc))
        logger.event(STAGE_NAME, "bad_json", job_id=job_id, artifact=label, text=raw.decode("utf-8", errors="replace"))
        raise ArtifactFormatError(f"Failed to parse JSON from input artifact {label}") from None


def decode_artifact(label: str, data: bytes, logger: ActionLogger, job_id: Optional[str] = None) -> Any:
    """Unzip and parse one input artifact body."""
    return parse_input_json(label, unzip_artifact(label, data, logger, job_id), logger, job_id)


def _fetch(validated: ValidatedJob, number: int, artifact: Artifact, logger: ActionLogger) -> Any:
    label = artifact.label(number)
    location = artifact.location.s3_location
    logger.event(STAGE_NAME, "get", job_id=validated.id, artifact=label, uri=s3_uri(location))
    body = get_object_bytes(validated.s3, location)
    return decode_artifact(label, body, logger, validated.id)


def default_input_adapter(
    validated: ValidatedJob,
    logger: Optional[ActionLogger] = None,
) -> Tuple[ValidatedJob, List[Any]]:
    """Return the job and one decoded JSON value per input artifact, in artifact order."""
    log = logger or ActionLogger()
    artifacts = validated.input_artifacts
    log.event(STAGE_NAME, "receive", job_id=validated.id, count=len(artifacts))

    for number, artifact in enumerate(artifacts, start=1):
        check_location(artifact, number, "input")

    tasks = [
        partial(_fetch, validated, number, artifact, log)
        for number, artifact in enumerate(artifacts, start=1)
    ]
    return validated, run_all(tasks)
