"""
RQ exception handler for analysis jobs.

process_analysis_job records its own failures. This handler covers what it
cannot: job timeouts, a killed work horse, and errors raised before the
task body runs.
"""
import logging

from redis import RedisError
from rq.job import Job as RQJob

from gridslicer.schemas.job import JobStatus
from gridslicer.services.job_service import get_job_service

logger = logging.getLogger(__name__)

ANALYSIS_TASK = "gridslicer.worker.tasks.process_analysis_job"


def _describe_failure(args: tuple) -> str:
    """
    Turn the positional arguments RQ passes to a handler into a message.

    RQ passes (exc_type, exc_value, traceback); some failure paths only
    hand over an exception instance.
    """
    if len(args) >= 3 and isinstance(args[1], type) and issubclass(args[1], BaseException):
        return f"{args[1].__name__}: {args[2]}"

    for arg in args:
        if isinstance(arg, BaseException):
            return f"{type(arg).__name__}: {arg}"

    return "Job failed unexpectedly"


def _analysis_job_id(job: RQJob) -> str | None:
    if job.func_name == ANALYSIS_TASK and job.args:
        return job.args[0]
    return None


def handle_job_failure(job: RQJob, *args, **kwargs) -> bool:
    """
    Mark the analysis job behind a failed RQ job as failed.

    Returns:
        False, so RQ stops calling further handlers.
    """
    message = _describe_failure(args)
    logger.error(f"RQ job {job.id} failed: {message}")

    job_id = _analysis_job_id(job)
    if job_id is None:
        return False

    try:
        get_job_service().update_status(job_id, JobStatus.FAILED, error=message)
    except RedisError as e:
        logger.error(f"Could not record failure of analysis job {job_id}: {e}")

    return False
