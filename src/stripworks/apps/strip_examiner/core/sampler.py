"""Robust colour sampling of a rectangular region.

Pixels that are nearly black (shadow) or nearly white (glare/specular
highlight) say little about the dye colour, so they are dropped by HSV
value before the representative colour is taken. The representative colour
is the median of each channel taken independently; it is *not* a vector
median, so the result need not be a colour that occurs in the region.
"""

from __future__ import annotations

import logging
from typing import Protocol, Tuple

import cv2
import numpy as np

from .errors import InvalidRegionError
from .models import RGB, Region, Sample

logger = logging.getLogger(__name__)

DEFAULT_SHADOW_THRESHOLD = 0.05
DEFAULT_GLARE_THRESHOLD = 0.95


class PixelBuffer(Protocol):
    """Read-only access to decoded image pixels."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def read_region(self, region: Region) -> np.ndarray:
        """Return the region's pixels as an ``(h, w, 4)`` uint8 RGBA array."""
        ...


class ArrayPixelBuffer:
    """Pixel buffer backed by an in-memory ``(H, W, 3|4)`` uint8 array."""

    def __init__(self, pixels: np.ndarray) -> None:
        arr = np.array(pixels)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise ValueError(f"Expected an (H, W, 3|4) array, got shape {arr.shape}")
        if arr.dtype != np.uint8:
            arr = np.clip(arr, 0, 255).astype(np.uint8)
        if arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=2)
        self._pixels = arr
        self._pixels.setflags(write=False)

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    def read_region(self, region: Region) -> np.ndarray:
        if not region.fits(self.width, self.height):
            raise InvalidRegionError(
                f"Region {region.to_json()} exceeds image bounds "
                f"{self.width}x{self.height}"
            )
        return self._pixels[
            region.y : region.y + region.h, region.x : region.x + region.w
        ].copy()


def _value_and_saturation(rgb: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """HSV value and saturation in [0, 1] for an ``(N, 3)`` uint8 array."""

    scaled = (rgb.astype(np.float32) / 255.0).reshape(-1, 1, 3)
    # Float input keeps OpenCV's S and V unquantised in [0, 1]
    hsv = cv2.cvtColor(scaled, cv2.COLOR_RGB2HSV).reshape(-1, 3)
    return hsv[:, 2], hsv[:, 1]


def _channel_medians(pixels: np.ndarray) -> np.ndarray:
    """Upper median of each channel, sorted independently."""

    ordered = np.sort(pixels, axis=0)
    return ordered[len(ordered) // 2].astype(np.float64)


def sample_region(
    buffer: PixelBuffer,
    region: Region,
    *,
    shadow_threshold: float = DEFAULT_SHADOW_THRESHOLD,
    glare_threshold: float = DEFAULT_GLARE_THRESHOLD,
) -> Sample:
    """Reduce *region* of *buffer* to a representative :class:`Sample`.

    A pixel is retained when ``shadow_threshold < v < glare_threshold``.
    With nothing retained the sample is zero-valued and flagged degenerate.
    """

    if not region.fits(buffer.width, buffer.height):
        raise InvalidRegionError(
            f"Region {region.to_json()} exceeds image bounds "
            f"{buffer.width}x{buffer.height}"
        )

    rgb = buffer.read_region(region)[..., :3].reshape(-1, 3)
    value, saturation = _value_and_saturation(rgb)
    keep = (value > shadow_threshold) & (value < glare_threshold)
    retained = rgb[keep]

    if retained.size == 0:
        logger.warning(
            "All %d pixels in region %s were rejected as shadow or glare",
            len(rgb),
            region.to_json(),
        )
        return Sample(RGB(0.0, 0.0, 0.0), 0.0, pixel_count=len(rgb), retained_count=0)

    r, g, b = _channel_medians(retained)
    return Sample(
        rgb=RGB(float(r), float(g), float(b)),
        saturation=float(np.mean(saturation[keep], dtype=np.float64)),
        pixel_count=len(rgb),
        retained_count=len(retained),
    )
