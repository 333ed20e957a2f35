"""
Background color estimation and border-connected masking.
"""

import numpy as np
import cv2

from ..base import Color, PixelBuffer, js_round


DEFAULT_BACKGROUND = Color(255, 255, 255, 255)

# 4-connected neighbor offsets (dx, dy)
NEIGHBORS_4 = ((-1, 0), (1, 0), (0, -1), (0, 1))


def sample_background_points(buffer: PixelBuffer) -> list[Color]:
    """
    Sample colors where background is most likely.

    Takes the four corner pixels plus, when the image is large enough, four
    points inset from the corners so an antialiased widget edge touching a
    corner does not decide the background alone.

    Args:
        buffer: Region to sample.

    Returns:
        Up to eight sampled colors.
    """
    width, height = buffer.width, buffer.height
    if width == 0 or height == 0:
        return []

    points = [
        (0, 0),
        (width - 1, 0),
        (0, height - 1),
        (width - 1, height - 1),
    ]

    inset = min(3, min(width, height) // 4)
    if width > inset * 2 and height > inset * 2:
        points.extend([
            (inset, inset),
            (width - 1 - inset, inset),
            (inset, height - 1 - inset),
            (width - 1 - inset, height - 1 - inset),
        ])

    return [buffer.pixel(x, y) for x, y in points]


def find_most_common_color(colors: list[Color], tolerance: float = 20.0) -> Color:
    """
    Cluster colors and average the largest cluster.

    Each color joins the first cluster whose seed (first member) lies within
    `tolerance` RGB distance, otherwise it starts a new cluster.

    Args:
        colors: Sampled colors.
        tolerance: Cluster radius in RGB distance.

    Returns:
        Channel-wise average of the largest cluster (opaque white if empty).
    """
    if not colors:
        return DEFAULT_BACKGROUND

    clusters: list[list[Color]] = []
    for color in colors:
        for cluster in clusters:
            if color.distance(cluster[0]) <= tolerance:
                cluster.append(color)
                break
        else:
            clusters.append([color])

    largest = clusters[0]
    for cluster in clusters:
        if len(cluster) > len(largest):
            largest = cluster

    count = len(largest)
    return Color(
        r=js_round(sum(c.r for c in largest) / count),
        g=js_round(sum(c.g for c in largest) / count),
        b=js_round(sum(c.b for c in largest) / count),
        a=js_round(sum(c.a for c in largest) / count),
    )


def color_distance_map(buffer: PixelBuffer, color: Color) -> np.ndarray:
    """Euclidean RGB distance of every pixel to a color."""
    rgb = buffer.rgb.astype(np.float32)
    target = np.array([color.r, color.g, color.b], dtype=np.float32)
    return np.sqrt(np.sum((rgb - target) ** 2, axis=2))


def flood_fill_from_edges(candidates: np.ndarray) -> np.ndarray:
    """
    Keep only candidate pixels connected to the image border.

    Labels 4-connected components of the candidate mask and keeps every
    component that touches an edge. Same result as a breadth-first fill
    seeded from all border candidates, without recursion or a Python queue.

    Args:
        candidates: Boolean mask of background-colored pixels.

    Returns:
        Boolean mask of border-connected background.
    """
    if candidates.size == 0:
        return candidates.copy()

    _, labels = cv2.connectedComponents(candidates.astype(np.uint8), connectivity=4)

    border_labels = np.unique(np.concatenate([
        labels[0, :],
        labels[-1, :],
        labels[:, 0],
        labels[:, -1],
    ]))
    # Label 0 is the non-candidate area
    border_labels = border_labels[border_labels != 0]

    return np.isin(labels, border_labels) & candidates


def create_background_mask(buffer: PixelBuffer, background: Color, tolerance: float) -> np.ndarray:
    """
    Build the mask of removable background.

    Args:
        buffer: Region being cleaned.
        background: Estimated background color.
        tolerance: Maximum RGB distance to the background color.

    Returns:
        Boolean mask, True where the pixel is border-connected background.
    """
    candidates = color_distance_map(buffer, background) <= tolerance
    return flood_fill_from_edges(candidates)


def saturation_brightness(buffer: PixelBuffer) -> tuple[np.ndarray, np.ndarray]:
    """
    Per-pixel HSV-style saturation and mean-channel brightness.

    Returns:
        (saturation in 0..1, brightness in 0..255) arrays.
    """
    rgb = buffer.rgb.astype(np.float32)
    high = rgb.max(axis=2)
    low = rgb.min(axis=2)
    saturation = np.where(high == 0, 0.0, (high - low) / np.maximum(high, 1.0))
    brightness = rgb.sum(axis=2) / 3
    return saturation, brightness


def is_shadow_pixel(alpha: np.ndarray, x: int, y: int) -> bool:
    """
    Check whether a pixel looks like an isolated shadow fringe.

    A pixel qualifies when at least two of its 4-connected neighbors are
    fully transparent and its own alpha is below 128.

    Args:
        alpha: Live alpha channel.
        x: Column.
        y: Row.
    """
    if alpha[y, x] >= 128:
        return False

    height, width = alpha.shape
    transparent = 0
    for dx, dy in NEIGHBORS_4:
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and 0 <= ny < height and alpha[ny, nx] == 0:
            transparent += 1

    return transparent >= 2


def clear_shadow_pixels(alpha: np.ndarray, candidates: np.ndarray) -> int:
    """
    Erase isolated shadow fringes among candidate pixels.

    Candidates are visited in row-major order against the live alpha
    channel, so an erased pixel counts as transparent for the ones after it.

    Args:
        alpha: Alpha channel, modified in place.
        candidates: Boolean mask of pixels to test.

    Returns:
        Number of pixels erased.
    """
    removed = 0
    ys, xs = np.nonzero(candidates)
    for y, x in zip(ys.tolist(), xs.tolist()):
        if is_shadow_pixel(alpha, x, y):
            alpha[y, x] = 0
            removed += 1
    return removed
