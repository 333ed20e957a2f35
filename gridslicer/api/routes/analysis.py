from pathlib import Path

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from fastapi.responses import FileResponse
from PIL import Image
from rq import Queue
import redis

from gridslicer.analysis import create_analyzer
from gridslicer.config import settings
from gridslicer.export import build_document
from gridslicer.schemas.analysis import AnalysisDocument, AnalysisSubmitResponse
from gridslicer.schemas.job import AnalysisParameters, JobStatus, JobStatusResponse
from gridslicer.services.job_service import get_job_service
from gridslicer.services.storage_service import get_storage_service
from gridslicer.utils.file_validation import (
    FORMAT_SUFFIXES,
    ValidationError,
    validate_filename,
    validate_image,
)
from gridslicer.worker.tasks import process_analysis_job

router = APIRouter(prefix="/analysis", tags=["Analysis"])


def get_queue() -> Queue:
    """Get RQ queue for job submission."""
    redis_client = redis.Redis.from_url(settings.redis_url)
    return Queue(connection=redis_client)


def _validate_upload(file: UploadFile) -> tuple[str, str]:
    """Validate an uploaded image, returning (safe filename, format)."""
    try:
        safe_filename = validate_filename(file.filename or "sheet.png")
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid filename: {e}",
        )

    try:
        image_format = validate_image(file.file, max_size_mb=settings.max_upload_mb)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid image file: {e}",
        )

    return safe_filename, image_format


@router.post(
    "",
    response_model=AnalysisSubmitResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def submit_analysis(
    file: UploadFile = File(..., description="Sprite sheet image to analyze"),
    tolerance: int | None = Form(default=None, description="Divider uniformity tolerance"),
    min_gap_x: int | None = Form(default=None, description="Minimum distance between vertical slices"),
    min_gap_y: int | None = Form(default=None, description="Minimum distance between horizontal slices"),
    aggressiveness: int | None = Form(default=None, description="Background removal aggressiveness"),
    webhook_url: str | None = Form(default=None, description="Webhook URL for completion notification"),
):
    """
    Submit a sprite sheet for analysis.

    The image will be analyzed asynchronously. Use the returned job_id
    to poll for results or provide a webhook_url for notification.
    """
    safe_filename, image_format = _validate_upload(file)

    job_service = get_job_service()
    job = job_service.create_job(
        filename=safe_filename,
        webhook_url=webhook_url,
        parameters=AnalysisParameters(
            tolerance=tolerance,
            min_gap_x=min_gap_x,
            min_gap_y=min_gap_y,
            aggressiveness=aggressiveness,
        ),
    )

    file.file.seek(0)  # Reset after validation
    image_path = get_storage_service().save_upload(job.id, file.file, FORMAT_SUFFIXES[image_format])

    queue = get_queue()
    queue.enqueue(
        process_analysis_job,
        job.id,
        str(image_path),
        job_timeout=settings.job_timeout,
    )

    return AnalysisSubmitResponse(job_id=job.id)


@router.post(
    "/sync",
    response_model=AnalysisDocument,
)
def analyze_sync(
    file: UploadFile = File(..., description="Sprite sheet image to analyze"),
    tolerance: int | None = Form(default=None, description="Divider uniformity tolerance"),
    min_gap_x: int | None = Form(default=None, description="Minimum distance between vertical slices"),
    min_gap_y: int | None = Form(default=None, description="Minimum distance between horizontal slices"),
    aggressiveness: int | None = Form(default=None, description="Background removal aggressiveness"),
):
    """
    Analyze a sprite sheet in the request and return the export document.

    Intended for small images; large sheets should use the job endpoint.
    """
    _validate_upload(file)

    file.file.seek(0)
    with Image.open(file.file) as image:
        image.load()
        analyzer = create_analyzer(
            tolerance=tolerance,
            min_gap_x=min_gap_x,
            min_gap_y=min_gap_y,
            aggressiveness=aggressiveness,
        )
        result = analyzer.analyze(image)

    return build_document(result.grid, result.all_components)


@router.get(
    "/{job_id}",
    response_model=JobStatusResponse,
)
async def get_job_status(job_id: str):
    """
    Get the status and result of an analysis job.

    Poll this endpoint to check if the analysis is complete
    and retrieve the component document.
    """
    job_service = get_job_service()
    job = job_service.get_job(job_id)

    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job not found",
        )

    return JobStatusResponse(
        id=job.id,
        status=job.status,
        created_at=job.created_at,
        updated_at=job.updated_at,
        filename=job.filename,
        result=job.result,
        error=job.error,
    )


@router.get("/{job_id}/archive")
async def download_archive(job_id: str):
    """Download the export bundle (PNG images, JSON and CSS) as a tar archive."""
    job_service = get_job_service()
    job = job_service.get_job(job_id)

    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job not found",
        )

    if job.status != JobStatus.COMPLETED or job.result is None or not job.result.archive_path:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Job is {job.status.value}, archive not available",
        )

    archive_path = Path(job.result.archive_path)
    if not archive_path.exists():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Archive has expired",
        )

    download_name = f"{Path(job.filename or job.id).stem}-components.tar"
    return FileResponse(archive_path, media_type="application/x-tar", filename=download_name)
