"""Perceptual-distance classification of a TEST colour against A and B."""

from __future__ import annotations

import logging

from stripworks.libs.vision import delta_e_cie76, srgb_to_lab

from .models import LAB, RGB, ComparisonResult, Reference

logger = logging.getLogger(__name__)


def to_lab(rgb: RGB) -> LAB:
    """Convert a corrected sRGB colour to CIE L*a*b*."""

    lightness, a, b = srgb_to_lab(rgb.as_tuple())
    return LAB(float(lightness), float(a), float(b))


def delta_e(x: LAB, y: LAB) -> float:
    """CIE76 ΔE between two Lab triples."""

    return float(delta_e_cie76(x.as_tuple(), y.as_tuple()))


def compare(
    test: LAB, ref_a: LAB, ref_b: LAB, *, control_saturation: float = 0.0
) -> ComparisonResult:
    """Classify *test* as the nearer of *ref_a* and *ref_b*.

    The nearer reference receives the larger share:
    ``pct_a = dB / (dA + dB) * 100`` and ``pct_b = dA / (dA + dB) * 100``.
    Ties go to B. When both distances are zero there is no evidence either
    way and the split is 50/50.
    """

    d_a = delta_e(test, ref_a)
    d_b = delta_e(test, ref_b)
    total = d_a + d_b

    if total > 0.0:
        pct_a = d_b / total * 100.0
        pct_b = d_a / total * 100.0
    else:
        logger.warning("TEST is indistinguishable from both references")
        pct_a = pct_b = 50.0

    winner = Reference.A if d_a < d_b else Reference.B
    return ComparisonResult(
        winner=winner,
        pct_a=pct_a,
        pct_b=pct_b,
        delta_e_a=d_a,
        delta_e_b=d_b,
        control_saturation=control_saturation,
    )
