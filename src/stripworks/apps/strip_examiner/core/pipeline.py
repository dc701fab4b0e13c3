"""Pure measurement pipeline: sample, calibrate, convert, compare."""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

from .calibration import derive_calibration
from .comparator import compare, to_lab
from .errors import MissingRegionError
from .models import (
    AnalysisOutcome,
    AnalysisParameters,
    Region,
    RegionRole,
    RegionValue,
)
from .sampler import PixelBuffer, sample_region

logger = logging.getLogger(__name__)

MEASURED_ROLES = (RegionRole.A, RegionRole.B, RegionRole.TEST)


def require_regions(
    regions: Mapping[object, Optional[RegionValue]],
) -> Dict[RegionRole, Region]:
    """Normalise *regions* and reject it unless every role is defined."""

    resolved: Dict[RegionRole, Region] = {}
    for key, value in regions.items():
        if value is None:
            continue
        resolved[RegionRole.parse(key)] = Region.from_value(value)

    missing = [role.value for role in RegionRole if role not in resolved]
    if missing:
        raise MissingRegionError(missing)
    return resolved


def analyze(
    buffer: PixelBuffer,
    regions: Mapping[object, Optional[RegionValue]],
    parameters: Optional[AnalysisParameters] = None,
) -> AnalysisOutcome:
    """Run one full analysis over an immutable pixel snapshot.

    Deterministic for identical inputs; nothing is cached between calls.
    """

    params = parameters or AnalysisParameters()
    resolved = require_regions(regions)

    samples = {
        role: sample_region(
            buffer,
            resolved[role],
            shadow_threshold=params.shadow_threshold,
            glare_threshold=params.glare_threshold,
        )
        for role in RegionRole
    }

    control = samples[RegionRole.CONTROL]
    calibration = derive_calibration(control, target=params.target_white)
    corrected = {role: calibration.apply(samples[role].rgb) for role in MEASURED_ROLES}
    lab = {role: to_lab(corrected[role]) for role in MEASURED_ROLES}

    result = compare(
        lab[RegionRole.TEST],
        lab[RegionRole.A],
        lab[RegionRole.B],
        control_saturation=control.saturation,
    )

    logger.info(
        "strip_analysis_complete",
        extra={
            "event_type": "strip_analysis_complete",
            "winner": result.winner.value,
            "pct_a": round(result.pct_a, 3),
            "pct_b": round(result.pct_b, 3),
            "delta_e_a": round(result.delta_e_a, 3),
            "delta_e_b": round(result.delta_e_b, 3),
        },
    )

    return AnalysisOutcome(
        samples=samples,
        calibration=calibration,
        corrected=corrected,
        lab=lab,
        result=result,
        parameters=params,
    )
