from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from pdfpress.models.job import JobStatus
from pdfpress.services.webhook import isoformat


class SubmitResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    job_id: UUID = Field(alias="jobId")
    status: JobStatus


class JobView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: UUID = Field(alias="jobId")
    status: JobStatus
    original_filename: str = Field(alias="originalFilename")
    compressed_filename: str | None = Field(default=None, alias="compressedFilename")
    original_size: int = Field(alias="originalSize")
    compressed_size: int | None = Field(default=None, alias="compressedSize")
    compression_ratio: float | None = Field(default=None, alias="compressionRatio")
    error_message: str | None = Field(default=None, alias="errorMessage")
    created_at: datetime = Field(alias="createdAt")
    completed_at: datetime | None = Field(default=None, alias="completedAt")

    @field_serializer("created_at", "completed_at")
    def _serialize_timestamp(self, value: datetime | None) -> str | None:
        return isoformat(value)

    @classmethod
    def from_job(cls, job) -> "JobView":
        return cls(
            job_id=job.id,
            status=job.status,
            original_filename=job.original_filename,
            compressed_filename=job.compressed_filename,
            original_size=job.original_size,
            compressed_size=job.compressed_size,
            compression_ratio=job.compression_ratio,
            error_message=job.error_message,
            created_at=job.created_at,
            completed_at=job.completed_at,
        )


class JobStatusResponse(BaseModel):
    success: bool = True
    job: JobView


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
