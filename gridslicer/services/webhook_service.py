import logging

import httpx

from gridslicer.config import settings
from gridslicer.schemas.job import Job, JobStatus

logger = logging.getLogger(__name__)


class WebhookService:
    """
    Notifies clients when an analysis job finishes.

    The body carries the job status and grid summary. The full component
    document stays on the job record (GET /analysis/{job_id}).
    """

    def __init__(
        self,
        timeout: int | None = None,
        max_retries: int | None = None,
    ):
        self.timeout = timeout or settings.webhook_timeout
        self.max_retries = max_retries or settings.webhook_max_retries

    def build_payload(self, job: Job) -> dict:
        event = "analysis.completed" if job.status == JobStatus.COMPLETED else "analysis.failed"
        return {
            "event": event,
            "job_id": job.id,
            "status": job.status.value,
            "filename": job.filename,
            "result": job.result.model_dump(exclude={"document"}) if job.result else None,
            "error": job.error,
        }

    async def deliver(self, job: Job) -> bool:
        """
        POST the payload to the job's webhook, retrying failed attempts.

        Returns:
            True when delivered or when the job has no webhook.
        """
        if not job.webhook_url:
            return True

        payload = self.build_payload(job)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for attempt in range(1, self.max_retries + 1):
                try:
                    response = await client.post(job.webhook_url, json=payload)
                    response.raise_for_status()
                except httpx.HTTPStatusError as e:
                    reason = f"HTTP {e.response.status_code}"
                except httpx.RequestError as e:
                    reason = str(e) or type(e).__name__
                else:
                    logger.info(f"Webhook {payload['event']} delivered for job {job.id}")
                    return True

                logger.warning(f"Webhook attempt {attempt}/{self.max_retries} for job {job.id} failed: {reason}")

        logger.error(f"Giving up on webhook for job {job.id}")
        return False


_webhook_service: WebhookService | None = None


def get_webhook_service() -> WebhookService:
    global _webhook_service
    if _webhook_service is None:
        _webhook_service = WebhookService()
    return _webhook_service
