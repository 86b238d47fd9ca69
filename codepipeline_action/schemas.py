"""Pydantic models for the CodePipeline job description."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

S3_LOCATION_TYPE = "S3"


class _WireModel(BaseModel):
    # CodePipeline sends camelCase keys and may add fields over time.
    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)


class S3Location(_WireModel):
    bucket_name: str = Field(alias="bucketName")
    object_key: str = Field(alias="objectKey")


class ArtifactLocation(_WireModel):
    type: str
    s3_location: Optional[S3Location] = Field(default=None, alias="s3Location")


class Artifact(_WireModel):
    name: str
    location: ArtifactLocation

    def label(self, number: int) -> str:
        """Human-readable reference used in log lines and error messages."""
        return f"#{number} ({self.name})"


class ArtifactCredentials(_WireModel):
    access_key_id: str = Field(alias="accessKeyId")
    secret_access_key: str = Field(alias="secretAccessKey")
    session_token: Optional[str] = Field(default=None, alias="sessionToken")


class JobData(_WireModel):
    input_artifacts: Optional[List[Artifact]] = Field(default=None, alias="inputArtifacts")
    output_artifacts: Optional[List[Artifact]] = Field(default=None, alias="outputArtifacts")
    artifact_credentials: Optional[ArtifactCredentials] = Field(default=None, alias="artifactCredentials")


class Job(_WireModel):
    id: str
    data: Optional[JobData] = None


class ValidatedJob(BaseModel):
    """A job that passed validation, paired with an S3 client scoped to its credentials."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    job: Job
    s3: Any

    @property
    def id(self) -> str:
        return self.job.id

    @property
    def input_artifacts(self) -> List[Artifact]:
        return list(self.job.data.input_artifacts)

    @property
    def output_artifacts(self) -> List[Artifact]:
        return list(self.job.data.output_artifacts)
