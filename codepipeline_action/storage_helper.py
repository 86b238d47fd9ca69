"""
Utilities for reading and writing CodePipeline artifacts in S3.

Every stage should use these helpers instead of rolling bespoke boto3 code
so client configuration and call parameters stay consistent.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

import boto3
from botocore.client import Config

from .errors import UnsupportedLocationError
from .schemas import S3_LOCATION_TYPE, Artifact, ArtifactCredentials, S3Location

SERVER_SIDE_ENCRYPTION = "aws:kms"


def s3_uri(location: S3Location) -> str:
    """Return the s3:// URI of an artifact location."""
    return f"s3://{location.bucket_name}/{location.object_key}"


def check_location(artifact: Artifact, number: int, direction: str) -> None:
    """Raise when an artifact is not stored in S3."""
    location = artifact.location
    if location.type != S3_LOCATION_TYPE or location.s3_location is None:
        raise UnsupportedLocationError(
            f"Unrecognized location type for {direction} artifact {artifact.label(number)}: '{location.type}'"
        )


def s3_client_for(credentials: ArtifactCredentials, region: Optional[str] = None):
    """
    Create an S3 client scoped to the job's temporary artifact credentials.

    A fresh client is built for every job; it is never cached because the
    credentials expire with the job.
    """
    session = boto3.session.Session()
    return session.client(
        "s3",
        region_name=region or os.getenv("AWS_REGION"),
        aws_access_key_id=credentials.access_key_id,
        aws_secret_access_key=credentials.secret_access_key,
        aws_session_token=credentials.session_token,
        config=Config(signature_version="s3v4"),
    )


def get_object_bytes(client: Any, location: S3Location) -> bytes:
    """Download an object and return its body."""
    obj = client.get_object(Bucket=location.bucket_name, Key=location.object_key)
    return obj["Body"].read()


def put_object_bytes(client: Any, location: S3Location, body: bytes) -> Dict[str, Any]:
    """Upload bytes with KMS server-side encryption and return the S3 response."""
    return client.put_object(
        Bucket=location.bucket_name,
        Key=location.object_key,
        Body=body,
        ServerSideEncryption=SERVER_SIDE_ENCRYPTION,
    )
