"""
Analysis worker entry point (gridslicer-worker).

Fails jobs a previous worker left in processing, then consumes the
default queue.
"""
import logging

from redis import Redis
from rq import Queue, Worker

from gridslicer.config import settings
from gridslicer.services.job_service import get_job_service
from gridslicer.worker.handlers import handle_job_failure

logger = logging.getLogger(__name__)


def recover_interrupted_jobs() -> list[str]:
    """Mark analyses orphaned by a crashed worker as failed."""
    failed = get_job_service().cleanup_stale_processing_jobs()
    if failed:
        logger.warning(f"Marked {len(failed)} interrupted analyses as failed: {', '.join(failed)}")
    return failed


def main():
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    recover_interrupted_jobs()
    settings.outputs_dir.mkdir(parents=True, exist_ok=True)

    connection = Redis.from_url(settings.redis_url)
    queue = Queue(connection=connection)
    logger.info(f"Worker listening on '{queue.name}' ({len(queue)} queued), bundles in {settings.outputs_dir}")

    Worker([queue], connection=connection, exception_handlers=[handle_job_failure]).work()


if __name__ == "__main__":
    main()
