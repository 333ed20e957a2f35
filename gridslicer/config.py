from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class DetectionSettings(BaseModel):
    """Configuration for grid divider detection."""

    tolerance: int = Field(default=5, description="Per-channel difference allowed inside a divider row/column (0-255)")
    min_gap_x: int = Field(default=50, description="Minimum distance between vertical slices in pixels")
    min_gap_y: int = Field(default=50, description="Minimum distance between horizontal slices in pixels")


class CleanupSettings(BaseModel):
    """
    Configuration for background and shadow removal.

    Values are used as given. An aggressiveness above 100 keeps lowering the
    shadow thresholds (the saturation threshold goes negative past 150, which
    disables the gradient test for opaque pixels).
    """

    tolerance: int = Field(default=10, description="Minimum RGB distance for background matching")
    aggressiveness: int = Field(default=30, description="How readily ambiguous pixels are erased (0-100)")
    shadow_width: int = Field(default=3, description="Half-height of the band cleaned around cell edges")


class ShapeSettings(BaseModel):
    """Configuration for shape decomposition."""

    fill_ratio: float = Field(default=0.95, description="Filled fraction of the bounds required for a rectangle")
    fill_alpha: int = Field(default=200, description="Alpha above which a pixel counts as filled")
    line_ratio: float = Field(default=0.8, description="Fraction of the bounds a run must exceed to be a line")
    corner_alpha: int = Field(default=128, description="Alpha above which a corner walk stops")
    max_corner_sample: int = Field(default=20, description="Maximum diagonal steps walked per corner")
    min_line_aspect: float = Field(default=2.0, description="Minimum length/thickness ratio of a line")


class NineSliceSettings(BaseModel):
    """Configuration for nine-slice border inference."""

    max_border: int = Field(default=16, description="Upper bound for the default border width")
    padding: int = Field(default=2, description="Pixels added to a corner radius")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False

    # Redis Settings
    redis_host: str = "redis"
    redis_port: int = 6379
    redis_db: int = 0

    # Paths (mounted volumes)
    uploads_dir: Path = Path("/app/data/uploads")
    outputs_dir: Path = Path("/app/data/outputs")

    # Job Settings
    job_timeout: int = 600
    job_result_ttl: int = 3600  # 1 hour
    max_upload_mb: int = 50

    # Webhook Settings
    webhook_timeout: int = 30
    webhook_max_retries: int = 3

    # Cell workers (None = CPU count)
    max_workers: Optional[int] = None

    # Analysis settings
    detection: DetectionSettings = DetectionSettings()
    cleanup: CleanupSettings = CleanupSettings()
    shapes: ShapeSettings = ShapeSettings()
    nine_slice: NineSliceSettings = NineSliceSettings()

    @property
    def redis_url(self) -> str:
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_nested_delimiter = "__"


settings = Settings()
