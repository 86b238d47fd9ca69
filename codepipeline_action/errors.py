"""Exceptions raised by the action pipeline stages."""

from __future__ import annotations


class ActionError(Exception):
    """Base class for every error raised by this package."""


class ActionConfigError(ActionError):
    """The action was built with an unusable configuration."""


class MalformedJobError(ActionError):
    """The event or job description is missing sections or has wrong artifact counts."""


class UnsupportedLocationError(ActionError):
    """An artifact is stored somewhere other than S3."""


class ArtifactFormatError(ActionError):
    """An input artifact is not a single-entry zip holding valid JSON."""


class ArityError(ActionError):
    """A stage received a different number of values than artifacts configured."""
