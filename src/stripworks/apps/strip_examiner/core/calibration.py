"""Diagonal white balance from an in-frame control patch."""

from __future__ import annotations

import logging

from .models import CalibrationFactors, Sample

logger = logging.getLogger(__name__)

DEFAULT_TARGET_WHITE = 240.0
# Control channels below this are treated as this value.
CHANNEL_FLOOR = 1.0


def derive_calibration(
    control: Sample, *, target: float = DEFAULT_TARGET_WHITE
) -> CalibrationFactors:
    """Per-channel gains that map the control patch onto ``target`` grey.

    ``scale = target / max(channel, 1)``. Channels that hit the floor are
    recorded so callers can tell "dark control" apart from a real gain.
    """

    floored = []
    scales = []
    for name, value in zip("rgb", control.rgb.as_tuple()):
        if value < CHANNEL_FLOOR:
            floored.append(name)
        scales.append(target / max(value, CHANNEL_FLOOR))

    if floored:
        logger.warning(
            "Control patch channel(s) %s below %.0f; gains are unreliable",
            ",".join(floored),
            CHANNEL_FLOOR,
        )

    return CalibrationFactors(
        scale_r=scales[0],
        scale_g=scales[1],
        scale_b=scales[2],
        target=target,
        floored_channels=tuple(floored),
    )
