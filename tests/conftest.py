"""
Shared fixtures: synthetic sprite sheets built with numpy.
"""

import io

import fakeredis
import numpy as np
import pytest

from gridslicer.analysis import PixelBuffer
from gridslicer.services.job_service import JobService
from gridslicer.services.storage_service import StorageService


BLACK = (0, 0, 0, 255)
GRAY = (200, 200, 200, 255)
RED = (255, 0, 0, 255)
MAGENTA = (255, 0, 255, 255)


def solid(width, height, color=(255, 255, 255, 255)):
    """Buffer filled with one color."""
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[:, :] = color
    return PixelBuffer(pixels)


def gradient_sheet(width, height, xs=(), ys=(), thickness=1):
    """
    Sheet whose background varies along both axes, with black dividers.

    No background row or column is uniform, so only the dividers are
    detected.
    """
    yy, xx = np.mgrid[0:height, 0:width]
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[:, :, 0] = (xx * 7 + yy * 3) % 200 + 20
    pixels[:, :, 1] = 100
    pixels[:, :, 2] = 150
    pixels[:, :, 3] = 255
    for x in xs:
        pixels[:, x:x + thickness] = BLACK
    for y in ys:
        pixels[y:y + thickness, :] = BLACK
    return PixelBuffer(pixels)


def rounded_square(size=64, radius=8, color=MAGENTA):
    """Opaque square with circular corners on a transparent background."""
    yy, xx = np.mgrid[0:size, 0:size] + 0.5
    cx = np.clip(xx, radius, size - radius)
    cy = np.clip(yy, radius, size - radius)
    inside = (xx - cx) ** 2 + (yy - cy) ** 2 <= radius ** 2
    pixels = np.zeros((size, size, 4), dtype=np.uint8)
    pixels[inside] = color
    return PixelBuffer(pixels)


def widget_sheet(cells=3, pitch=70, widget=40, inset=15):
    """
    Sheet of gray cells separated by 1px black dividers, each cell holding
    an opaque red square.
    """
    size = cells * pitch + 1
    pixels = np.zeros((size, size, 4), dtype=np.uint8)
    pixels[:, :] = GRAY
    for row in range(cells):
        for col in range(cells):
            x = col * pitch + inset
            y = row * pitch + inset
            pixels[y:y + widget, x:x + widget] = RED
    for i in range(cells + 1):
        pixels[:, i * pitch] = BLACK
        pixels[i * pitch, :] = BLACK
    return PixelBuffer(pixels)


def png_bytes(buffer):
    output = io.BytesIO()
    buffer.to_image().save(output, format="PNG")
    return output.getvalue()


@pytest.fixture
def sheet():
    return widget_sheet()


@pytest.fixture
def sheet_png(sheet):
    return png_bytes(sheet)


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis()


@pytest.fixture
def job_service(redis_client):
    return JobService(redis_client)


@pytest.fixture
def storage_service(tmp_path):
    return StorageService(uploads_dir=tmp_path / "uploads", outputs_dir=tmp_path / "outputs")
