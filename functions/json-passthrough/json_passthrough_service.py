from __future__ import annotations

import os
from typing import Any, Dict, List, Tuple

from codepipeline_action import ValidatedJob


class JsonPassthroughService:
    """Copies the input JSON document to the output artifact, stamped with the job id."""

    def __init__(self) -> None:
        self.stamp_key = os.getenv("PASSTHROUGH_STAMP_KEY", "codepipelineJobId")

    def transform(self, job: ValidatedJob, inputs: List[Any]) -> Tuple[ValidatedJob, List[Any]]:
        document = inputs[0]
        if isinstance(document, dict):
            output: Dict[str, Any] = dict(document)
            output[self.stamp_key] = job.id
        else:
            output = {"value": document, self.stamp_key: job.id}
        return job, [output]
