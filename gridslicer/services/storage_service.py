import logging
import shutil
from pathlib import Path
from typing import BinaryIO

from gridslicer.config import settings

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "components.tar"


class StorageService:
    """
    Service for the upload and output directories.

    Uploads are stored as {job_id}{suffix}; each job's export bundle goes
    into its own directory under the outputs root.
    """

    def __init__(self, uploads_dir: Path | None = None, outputs_dir: Path | None = None):
        """
        Initialize the storage service.

        Args:
            uploads_dir: Directory for uploaded images.
            outputs_dir: Root directory for export bundles.
        """
        self.uploads_dir = Path(uploads_dir or settings.uploads_dir)
        self.outputs_dir = Path(outputs_dir or settings.outputs_dir)

    def upload_path(self, job_id: str, suffix: str = ".png") -> Path:
        return self.uploads_dir / f"{job_id}{suffix}"

    def output_dir(self, job_id: str) -> Path:
        return self.outputs_dir / job_id

    def archive_path(self, job_id: str) -> Path:
        return self.output_dir(job_id) / ARCHIVE_NAME

    def save_upload(self, job_id: str, source: BinaryIO, suffix: str = ".png") -> Path:
        """
        Copy an uploaded file to the uploads directory.

        Args:
            job_id: The job identifier.
            source: File object positioned at the start of the data.
            suffix: File extension to keep.

        Returns:
            Path of the stored file.
        """
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        path = self.upload_path(job_id, suffix)
        with open(path, "wb") as buffer:
            shutil.copyfileobj(source, buffer)
        return path

    def remove_upload(self, path: str | Path) -> None:
        """Delete an uploaded file, logging failures."""
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to delete upload {path}: {e}")


# Singleton instance
_storage_service: StorageService | None = None


def get_storage_service() -> StorageService:
    """Get or create the storage service singleton."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
