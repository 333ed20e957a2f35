from pydantic import BaseModel, Field


class AnalysisSubmitResponse(BaseModel):
    """Response after submitting an image for analysis."""

    job_id: str = Field(description="Unique identifier for the job")
    message: str = Field(default="Image submitted for analysis")


class GridSummary(BaseModel):
    """Grid section of the export document."""

    rows: int
    columns: int
    horizontalSlices: list[int]
    verticalSlices: list[int]


class AnalysisDocument(BaseModel):
    """Export document returned by the synchronous endpoint."""

    version: str
    generated: str
    grid: GridSummary
    components: list[dict]
