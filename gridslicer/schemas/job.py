from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class JobStatus(str, Enum):
    """Status of an analysis job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class AnalysisParameters(BaseModel):
    """Per-job tuning values. None falls back to the configured defaults."""

    tolerance: int | None = Field(default=None, description="Divider uniformity tolerance")
    min_gap_x: int | None = Field(default=None, description="Minimum distance between vertical slices")
    min_gap_y: int | None = Field(default=None, description="Minimum distance between horizontal slices")
    aggressiveness: int | None = Field(default=None, description="Background removal aggressiveness")


class JobResult(BaseModel):
    """Result of an analysis job."""

    rows: int
    columns: int
    components: int = 0
    line_components: int = 0
    total_shapes: int = 0
    archive_path: str | None = None
    document: dict = Field(default_factory=dict)
    metadata: dict = Field(default_factory=dict)


class Job(BaseModel):
    """Analysis job with status and result."""

    id: str
    status: JobStatus
    created_at: datetime
    updated_at: datetime
    filename: str | None = None
    webhook_url: str | None = None
    parameters: AnalysisParameters = Field(default_factory=AnalysisParameters)
    result: JobResult | None = None
    error: str | None = None


class JobStatusResponse(BaseModel):
    """Response for job status endpoint."""

    id: str
    status: JobStatus
    created_at: datetime
    updated_at: datetime
    filename: str | None = None
    result: JobResult | None = None
    error: str | None = None
