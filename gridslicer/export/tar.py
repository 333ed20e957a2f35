"""
TAR bundle export.
"""

import io
import logging
import tarfile
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..analysis import AnalysisResult
from .css import export_to_css
from .json_export import export_to_json
from .png import export_to_png


logger = logging.getLogger(__name__)

JSON_NAME = "components.json"
CSS_NAME = "components.css"
IMAGES_DIR = "images"


def _add_file(archive: tarfile.TarFile, name: str, data: bytes, mtime: float) -> None:
    info = tarfile.TarInfo(name=name)
    info.size = len(data)
    info.mtime = int(mtime)
    info.mode = 0o644
    archive.addfile(info, io.BytesIO(data))


def _pack(files: dict[str, bytes], mtime: float) -> bytes:
    output = io.BytesIO()
    with tarfile.open(fileobj=output, mode="w", format=tarfile.USTAR_FORMAT) as archive:
        for name, data in files.items():
            _add_file(archive, name, data, mtime)
    return output.getvalue()


def build_bundle_files(result: AnalysisResult, generated: Optional[datetime] = None) -> dict[str, bytes]:
    """
    Render every file of the export bundle.

    Args:
        result: Analysis to export.
        generated: Timestamp recorded in components.json (defaults to now, UTC).

    Returns:
        Mapping of archive path to file contents.
    """
    components = result.all_components
    files = {
        f"{IMAGES_DIR}/{name}": data
        for name, data in export_to_png(components).items()
    }
    files[JSON_NAME] = export_to_json(result.grid, components, generated).encode("utf-8")
    files[CSS_NAME] = export_to_css(result.components).encode("utf-8")
    return files


def export_to_tar(
    result: AnalysisResult,
    mtime: Optional[float] = None,
    generated: Optional[datetime] = None,
) -> bytes:
    """
    Build an uncompressed tar archive of the export bundle.

    Layout: images/{name}.png, components.json, components.css.

    Args:
        result: Analysis to export.
        mtime: Modification time stamped on entries (defaults to now).
        generated: Timestamp recorded in components.json.

    Returns:
        Archive bytes.
    """
    mtime = time.time() if mtime is None else mtime
    return _pack(build_bundle_files(result, generated), mtime)


def write_bundle(
    result: AnalysisResult,
    output_dir: Union[Path, str],
    archive_name: Optional[str] = "components.tar",
    generated: Optional[datetime] = None,
) -> dict[str, Path]:
    """
    Write the export bundle to a directory.

    The files are rendered once; the archive packs the same bytes that are
    written loose.

    Args:
        result: Analysis to export.
        output_dir: Target directory (created if missing).
        archive_name: Also write the tar archive under this name (None to skip).
        generated: Timestamp recorded in components.json.

    Returns:
        Mapping of bundle path to written file.
    """
    output_dir = Path(output_dir)
    files = build_bundle_files(result, generated)
    written = {}

    for name, data in files.items():
        path = output_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        written[name] = path

    if archive_name:
        archive_path = output_dir / archive_name
        archive_path.write_bytes(_pack(files, time.time()))
        written[archive_name] = archive_path

    logger.info(f"Wrote export bundle ({len(written)} files) to {output_dir}")
    return written
