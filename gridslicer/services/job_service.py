import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Callable

import redis

from gridslicer.config import settings
from gridslicer.schemas.job import AnalysisParameters, Job, JobResult, JobStatus

logger = logging.getLogger(__name__)

# A worker that has not touched a processing job for this long is presumed dead
STALE_AFTER_SECONDS = 300


class JobService:
    """
    Analysis job records kept in Redis.

    Every record is one JSON document under gridslicer:job:{id} and expires
    job_result_ttl seconds after its last write.
    """

    JOB_PREFIX = "gridslicer:job:"

    def __init__(self, redis_client: redis.Redis | None = None):
        self.redis = redis_client or redis.Redis.from_url(settings.redis_url)

    def _key(self, job_id: str) -> str:
        return f"{self.JOB_PREFIX}{job_id}"

    def _save(self, job: Job) -> None:
        self.redis.setex(self._key(job.id), settings.job_result_ttl, job.model_dump_json())

    def _update(self, job_id: str, change: Callable[[Job], None]) -> Job | None:
        """Load a job, apply `change`, stamp it and write it back."""
        job = self.get_job(job_id)
        if job is None:
            return None

        change(job)
        job.updated_at = datetime.now(timezone.utc)
        self._save(job)
        return job

    def create_job(
        self,
        filename: str | None = None,
        webhook_url: str | None = None,
        parameters: AnalysisParameters | None = None,
    ) -> Job:
        """
        Register a sprite sheet waiting for analysis.

        Args:
            filename: Sanitized name of the uploaded sheet.
            webhook_url: Optional URL notified when the job finishes.
            parameters: Per-job detection and cleanup overrides.

        Returns:
            The pending job.
        """
        created = datetime.now(timezone.utc)
        job = Job(
            id=str(uuid.uuid4()),
            status=JobStatus.PENDING,
            created_at=created,
            updated_at=created,
            filename=filename,
            webhook_url=webhook_url,
            parameters=parameters or AnalysisParameters(),
        )
        self._save(job)
        logger.debug(f"Created job {job.id} for {filename}")
        return job

    def get_job(self, job_id: str) -> Job | None:
        data = self.redis.get(self._key(job_id))
        if data is None:
            return None
        return Job.model_validate_json(data)

    def update_status(
        self,
        job_id: str,
        status: JobStatus,
        error: str | None = None,
    ) -> Job | None:
        """
        Move a job to a new status.

        Returns:
            The updated job, or None if it expired or never existed.
        """
        def change(job: Job) -> None:
            job.status = status
            if error:
                job.error = error

        return self._update(job_id, change)

    def set_result(self, job_id: str, result: JobResult) -> Job | None:
        """Attach the analysis summary and mark the job completed."""
        def change(job: Job) -> None:
            job.status = JobStatus.COMPLETED
            job.result = result

        return self._update(job_id, change)

    def delete_job(self, job_id: str) -> bool:
        return self.redis.delete(self._key(job_id)) > 0

    def cleanup_stale_processing_jobs(self) -> list[str]:
        """
        Fail jobs left in processing by a worker that died mid-analysis.

        Returns:
            IDs of the jobs marked failed.
        """
        cutoff = time.time() - STALE_AFTER_SECONDS
        failed = []

        for key in self.redis.scan_iter(f"{self.JOB_PREFIX}*"):
            try:
                data = self.redis.get(key)
                if data is None:
                    continue
                job = Job.model_validate_json(data)
            except (redis.RedisError, ValueError) as e:
                logger.error(f"Skipping unreadable job record {key}: {e}")
                continue

            if job.status != JobStatus.PROCESSING or job.updated_at.timestamp() > cutoff:
                continue

            logger.warning(f"Job {job.id} stuck in processing since {job.updated_at.isoformat()}")
            self.update_status(job.id, JobStatus.FAILED, error="Analysis interrupted: worker stopped responding")
            failed.append(job.id)

        return failed


_job_service: JobService | None = None


def get_job_service() -> JobService:
    """Shared JobService bound to the configured Redis."""
    global _job_service
    if _job_service is None:
        _job_service = JobService()
    return _job_service
