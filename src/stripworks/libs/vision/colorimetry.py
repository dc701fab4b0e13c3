"""sRGB to CIE L*a*b* conversion and CIE76 colour difference.

Constants follow the standard sRGB definition (IEC 61966-2-1) with a D65,
2° observer white point. Values are kept exactly as published so results
are reproducible across implementations:

- sRGB decoding: linear segment below 0.04045, power 2.4 above it.
- Linear RGB → XYZ via the sRGB primaries matrix (scaled to Y=100).
- XYZ → L*a*b* with the CIE 1976 piecewise cube root (ε=0.008856, κ'=7.787).

All helpers accept arrays shaped ``(..., 3)`` so a single triple and a full
image share the same code path.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

ArrayLike = Union[Sequence[float], np.ndarray]

SRGB_GAMMA_THRESHOLD = 0.04045
SRGB_GAMMA_EXPONENT = 2.4
SRGB_LINEAR_DIVISOR = 12.92

SRGB_TO_XYZ = np.array(
    [
        [0.4124, 0.3576, 0.1805],
        [0.2126, 0.7152, 0.0722],
        [0.0193, 0.1192, 0.9505],
    ],
    dtype=np.float64,
)

D65_WHITE = np.array([95.047, 100.0, 108.883], dtype=np.float64)

CIE_EPSILON = 0.008856
CIE_SLOPE = 7.787
CIE_OFFSET = 16.0 / 116.0


def _as_triples(values: ArrayLike) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64)
    if arr.shape[-1:] != (3,):
        raise ValueError(f"Expected trailing dimension of 3, got shape {arr.shape}")
    return arr


def srgb_to_linear(rgb: ArrayLike) -> np.ndarray:
    """Decode 8-bit sRGB values in [0, 255] to linear light in [0, 1]."""

    normalised = _as_triples(rgb) / 255.0
    return np.where(
        normalised > SRGB_GAMMA_THRESHOLD,
        ((normalised + 0.055) / 1.055) ** SRGB_GAMMA_EXPONENT,
        normalised / SRGB_LINEAR_DIVISOR,
    )


def srgb_to_xyz(rgb: ArrayLike) -> np.ndarray:
    """Convert sRGB in [0, 255] to CIE XYZ scaled so that white has Y=100."""

    linear = srgb_to_linear(rgb) * 100.0
    return linear @ SRGB_TO_XYZ.T


def _lab_f(t: np.ndarray) -> np.ndarray:
    return np.where(t > CIE_EPSILON, np.cbrt(t), CIE_SLOPE * t + CIE_OFFSET)


def xyz_to_lab(xyz: ArrayLike) -> np.ndarray:
    """Convert XYZ (D65, Y=100 scale) to CIE L*a*b*."""

    f = _lab_f(_as_triples(xyz) / D65_WHITE)
    fx, fy, fz = f[..., 0], f[..., 1], f[..., 2]
    lightness = 116.0 * fy - 16.0
    a = 500.0 * (fx - fy)
    b = 200.0 * (fy - fz)
    return np.stack([lightness, a, b], axis=-1)


def srgb_to_lab(rgb: ArrayLike) -> np.ndarray:
    """Convert sRGB values in [0, 255] straight to CIE L*a*b*."""

    return xyz_to_lab(srgb_to_xyz(rgb))


def delta_e_cie76(lab1: ArrayLike, lab2: ArrayLike) -> np.ndarray:
    """Plain Euclidean distance in L*a*b* (CIE 1976 ΔE*ab)."""

    diff = _as_triples(lab1) - _as_triples(lab2)
    return np.sqrt(np.sum(diff * diff, axis=-1))
