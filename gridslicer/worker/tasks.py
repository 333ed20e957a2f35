import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path

from gridslicer.analysis import AnalysisResult, create_analyzer
from gridslicer.export import build_document, write_bundle
from gridslicer.schemas.job import Job, JobResult, JobStatus
from gridslicer.services.job_service import get_job_service
from gridslicer.services.storage_service import ARCHIVE_NAME, get_storage_service
from gridslicer.services.webhook_service import get_webhook_service

logger = logging.getLogger(__name__)


def _notify(job: Job | None) -> None:
    """Deliver the job's webhook from the synchronous worker."""
    if job is None or not job.webhook_url:
        return
    asyncio.run(get_webhook_service().deliver(job))


def _build_result(result: AnalysisResult, archive_path: Path, generated: datetime) -> JobResult:
    """Summary stored on the job record."""
    return JobResult(
        rows=result.grid.rows,
        columns=result.grid.columns,
        components=len(result.components),
        line_components=len(result.line_components),
        total_shapes=result.total_shapes,
        archive_path=str(archive_path),
        document=build_document(result.grid, result.all_components, generated),
        metadata={
            "image_size": list(result.grid.image_size),
            "timings": {stage: round(seconds, 4) for stage, seconds in result.timings.items()},
            "empty_cells": [c.id for c in result.components if c.is_empty],
        },
    )


def process_analysis_job(job_id: str, image_path: str) -> dict:
    """
    Analyze an uploaded sprite sheet and write its export bundle.

    Runs in the RQ worker. The upload is deleted whatever the outcome; the
    bundle stays under outputs_dir/{job_id} for the archive endpoint.

    Args:
        job_id: Analysis job ID.
        image_path: Stored upload.

    Returns:
        Short outcome summary (RQ keeps it as the job return value).
    """
    job_service = get_job_service()
    storage = get_storage_service()

    job = job_service.update_status(job_id, JobStatus.PROCESSING)
    if job is None:
        logger.error(f"Job {job_id} expired before analysis started")
        storage.remove_upload(image_path)
        return {"error": "Job not found"}

    try:
        analyzer = create_analyzer(**job.parameters.model_dump())
        result = analyzer.analyze(Path(image_path))
        generated = datetime.now(timezone.utc)
        written = write_bundle(
            result, storage.output_dir(job_id), archive_name=ARCHIVE_NAME, generated=generated
        )
    except (OSError, ValueError) as e:
        # Unreadable sheet or unwritable output directory
        error = str(e)
        logger.error(f"Analysis failed for job {job_id}: {error}")
    except Exception as e:
        error = f"Unexpected error: {e}"
        logger.exception(f"Analysis crashed for job {job_id}")
    else:
        job = job_service.set_result(job_id, _build_result(result, written[ARCHIVE_NAME], generated))
        logger.info(
            f"Job {job_id}: {result.grid.rows}x{result.grid.columns} grid, "
            f"{len(result.components)} cells, {result.total_shapes} shapes"
        )
        _notify(job)
        return {"job_id": job_id, "status": "completed", "components": len(result.all_components)}
    finally:
        storage.remove_upload(image_path)

    _notify(job_service.update_status(job_id, JobStatus.FAILED, error=error))
    return {"error": error}
