"""Loading images and region selections from disk."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Mapping, Optional

import numpy as np
from PIL import Image, ImageOps

from .errors import InvalidRegionError
from .models import Region, RegionRole
from .sampler import ArrayPixelBuffer


def load_pixel_buffer(path: Path) -> ArrayPixelBuffer:
    """Decode *path* to an 8-bit RGBA buffer at full resolution.

    EXIF orientation is applied so region coordinates match what a viewer
    shows. No resizing: regions are in source-image pixels.
    """

    with Image.open(path) as im:
        im = ImageOps.exif_transpose(im)
        rgba = im.convert("RGBA")
        pixels = np.asarray(rgba, dtype=np.uint8)
    return ArrayPixelBuffer(pixels)


def load_regions_file(path: Path) -> Dict[RegionRole, Region]:
    """Read a JSON mapping of role to ``[x, y, w, h]`` or ``{x, y, w, h}``.

    Roles are case-insensitive. Unknown roles raise
    :class:`InvalidRegionError`; absent roles are simply left out.
    """

    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidRegionError(f"Regions file {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidRegionError(f"Regions file {path} must contain a JSON object")

    regions: Dict[RegionRole, Region] = {}
    for key, value in data.items():
        if value is None:
            continue
        regions[RegionRole.parse(key)] = Region.from_value(value)
    return regions


def merge_regions(
    base: Mapping[RegionRole, Region],
    overrides: Mapping[RegionRole, Optional[str]],
) -> Dict[RegionRole, Region]:
    """Overlay ``"x,y,w,h"`` strings from the command line onto *base*."""

    merged = dict(base)
    for role, text in overrides.items():
        if text:
            merged[role] = Region.parse(text)
    return merged
