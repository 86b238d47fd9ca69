"""
Structured logging utilities for CodePipeline actions.

All logs are emitted as JSON lines so CloudWatch Logs Insights can query them.
Informational lines go to stdout, error lines to stderr. Nothing is written
unless the logger is verbose.
"""

from __future__ import annotations

import json
import os
import socket
import sys
import time
from typing import Any, Dict, Optional, TextIO

HOSTNAME = socket.gethostname()
SERVICE_NAME = os.getenv("AWS_LAMBDA_FUNCTION_NAME") or os.getenv("FUNCTION_NAME", "unknown-function")

_TRUTHY = {"1", "true", "yes"}


def verbose_from_env(default: bool = False) -> bool:
    """Return the verbosity selected by the VERBOSE environment variable."""
    raw = os.getenv("VERBOSE")
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


class ActionLogger:
    """
    Emit structured log lines for one configured action.

    Example:
        logger = ActionLogger(verbose=True)
        logger.event("input", "get", job_id="abc", uri="s3://...")
    """

    def __init__(
        self,
        verbose: Optional[bool] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ) -> None:
        self.verbose = verbose_from_env() if verbose is None else verbose
        self._stdout = stdout
        self._stderr = stderr

    def event(self, stage: str, event: str, job_id: Optional[str] = None, **fields: Any) -> None:
        self._emit(self._stdout or sys.stdout, stage, event, job_id, fields)

    def error(self, stage: str, event: str, job_id: Optional[str] = None, **fields: Any) -> None:
        self._emit(self._stderr or sys.stderr, stage, event, job_id, fields)

    def exception(self, stage: str, job_id: Optional[str], exc: BaseException, **fields: Any) -> None:
        """Convenience helper to log an exception's type and message."""
        self.error(stage, "error", job_id=job_id, error_type=type(exc).__name__, error=str(exc), **fields)

    def _emit(
        self,
        stream: TextIO,
        stage: str,
        event: str,
        job_id: Optional[str],
        fields: Dict[str, Any],
    ) -> None:
        if not self.verbose:
            return
        record: Dict[str, Any] = {
            "timestamp": time.time(),
            "stage": stage,
            "event": event,
            "job_id": job_id,
            "service": SERVICE_NAME,
            "host": HOSTNAME,
        }
        record.update(fields)
        stream.write(json.dumps(record, default=str) + "\n")
        stream.flush()
