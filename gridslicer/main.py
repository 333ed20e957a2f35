import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from gridslicer.api.routes import analysis, health
from gridslicer.config import settings

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the data directories and log the analysis defaults."""
    for directory in (settings.uploads_dir, settings.outputs_dir):
        directory.mkdir(parents=True, exist_ok=True)

    detection = settings.detection
    logger.info(
        f"Grid Slicer API {API_VERSION} starting: uploads in {settings.uploads_dir}, "
        f"bundles in {settings.outputs_dir}"
    )
    logger.info(
        f"Defaults: tolerance={detection.tolerance}, min_gap={detection.min_gap_x}x{detection.min_gap_y}, "
        f"aggressiveness={settings.cleanup.aggressiveness}, max_upload={settings.max_upload_mb}MB"
    )

    yield

    logger.info("Grid Slicer API stopped")


app = FastAPI(
    title="Grid Slicer API",
    description="Sprite sheet analysis into reusable nine-slice UI components",
    version=API_VERSION,
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(analysis.router)


@app.get("/")
async def root():
    return {
        "name": app.title,
        "version": API_VERSION,
        "docs": app.docs_url,
        "endpoints": ["/analysis", "/analysis/sync", "/analysis/{job_id}", "/analysis/{job_id}/archive", "/health"],
    }
