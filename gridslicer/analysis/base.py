"""
Core types shared by every analysis stage.
"""

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union
import numpy as np
from PIL import Image


Observer = Callable[[str, dict], None]
"""Optional hook receiving (event, payload) from the analysis stages."""


def js_round(value: float) -> int:
    """Round halves up, so even-width dividers center on their later pixel."""
    return int(math.floor(value + 0.5))


def notify(observer: Optional[Observer], event: str, payload: dict) -> None:
    """Send an event to the observer if one is attached."""
    if observer is not None:
        observer(event, payload)


@dataclass(frozen=True)
class Color:
    """RGBA color with 8-bit channels."""

    r: int
    g: int
    b: int
    a: int = 255

    @classmethod
    def from_pixel(cls, pixel) -> "Color":
        """Build a color from a 4-element RGBA pixel."""
        return cls(int(pixel[0]), int(pixel[1]), int(pixel[2]), int(pixel[3]))

    def distance(self, other: "Color") -> float:
        """Euclidean distance in RGB space (alpha ignored)."""
        dr = self.r - other.r
        dg = self.g - other.g
        db = self.b - other.b
        return math.sqrt(dr * dr + dg * dg + db * db)

    def to_css(self) -> str:
        """Format as a CSS rgba() value."""
        return f"rgba({self.r}, {self.g}, {self.b}, {self.a / 255:g})"

    def to_dict(self) -> dict:
        return {"r": self.r, "g": self.g, "b": self.b, "a": self.a}


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in pixel coordinates."""

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        """Exclusive right edge."""
        return self.x + self.width

    @property
    def bottom(self) -> int:
        """Exclusive bottom edge."""
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


class PixelBuffer:
    """
    Owned RGBA pixel buffer.

    Wraps a (height, width, 4) uint8 array. Stages that modify pixels work on
    their own copy, so a buffer handed to a stage is never changed behind the
    caller's back.
    """

    CHANNELS = 4

    def __init__(self, pixels: np.ndarray):
        """
        Initialize from an RGBA array.

        Args:
            pixels: Array of shape (height, width, 4) and dtype uint8.

        Raises:
            ValueError: If the array is not an RGBA image.
        """
        if pixels.ndim != 3 or pixels.shape[2] != self.CHANNELS:
            raise ValueError(f"Expected (height, width, 4) array, got shape {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixels, got {pixels.dtype}")
        self.pixels = pixels

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview], width: int, height: int) -> "PixelBuffer":
        """
        Build a buffer from interleaved row-major RGBA bytes.

        Raises:
            ValueError: If the byte length is not width * height * 4.
        """
        expected = width * height * cls.CHANNELS
        if len(data) != expected:
            raise ValueError(
                f"Buffer length {len(data)} does not match {width}x{height} RGBA ({expected} bytes)"
            )
        array = np.frombuffer(bytes(data), dtype=np.uint8).reshape((height, width, cls.CHANNELS))
        return cls(array.copy())

    @classmethod
    def from_image(cls, image: Union[Image.Image, Path, str]) -> "PixelBuffer":
        """Decode a Pillow image (or image path) into an RGBA buffer."""
        if isinstance(image, (str, Path)):
            with Image.open(image) as opened:
                return cls(np.array(opened.convert("RGBA")))
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(np.array(image))

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelBuffer":
        """Fully transparent buffer."""
        return cls(np.zeros((height, width, cls.CHANNELS), dtype=np.uint8))

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def alpha(self) -> np.ndarray:
        """View of the alpha channel."""
        return self.pixels[:, :, 3]

    @property
    def rgb(self) -> np.ndarray:
        """View of the color channels."""
        return self.pixels[:, :, :3]

    def pixel(self, x: int, y: int) -> Color:
        return Color.from_pixel(self.pixels[y, x])

    def crop(self, rect: Rect) -> "PixelBuffer":
        """Copy a region into a new buffer. The region is clipped to the image."""
        x0 = max(rect.x, 0)
        y0 = max(rect.y, 0)
        x1 = min(rect.right, self.width)
        y1 = min(rect.bottom, self.height)
        if x1 <= x0 or y1 <= y0:
            return PixelBuffer.blank(0, 0)
        return PixelBuffer(self.pixels[y0:y1, x0:x1].copy())

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.pixels.copy())

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()

    def to_image(self) -> Image.Image:
        """Convert to a Pillow RGBA image."""
        return Image.fromarray(self.pixels)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return np.array_equal(self.pixels, other.pixels)

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"
