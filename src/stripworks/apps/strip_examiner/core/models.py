"""Data models for test strip colour comparison."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import InvalidRegionError


class RegionRole(str, Enum):
    """Fixed roles a selected region can play in an analysis."""

    A = "A"
    B = "B"
    TEST = "TEST"
    CONTROL = "CONTROL"

    @classmethod
    def parse(cls, value: Union[str, "RegionRole"]) -> "RegionRole":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as exc:
            raise InvalidRegionError(f"Unknown region role: {value!r}") from exc


class Reference(str, Enum):
    """Reference colours a TEST sample can be classified as."""

    A = "A"
    B = "B"


@dataclass(frozen=True)
class RGB:
    """Channel values in [0, 255], kept as floats during computation."""

    r: float
    g: float
    b: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.r, self.g, self.b)

    def to_json(self) -> Dict[str, float]:
        return {"r": float(self.r), "g": float(self.g), "b": float(self.b)}


@dataclass(frozen=True)
class LAB:
    """CIE L*a*b* triple (L in [0, 100])."""

    l: float  # noqa: E741
    a: float
    b: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.l, self.a, self.b)

    def to_json(self) -> Dict[str, float]:
        return {"l": float(self.l), "a": float(self.a), "b": float(self.b)}


RegionValue = Union["Region", str, Sequence[Any], Mapping[str, Any]]


@dataclass(frozen=True)
class Region:
    """Rectangle in source-image pixel coordinates."""

    x: int
    y: int
    w: int
    h: int

    def __post_init__(self) -> None:
        if self.w <= 0 or self.h <= 0:
            raise InvalidRegionError(
                f"Region size must be positive, got {self.w}x{self.h}"
            )
        if self.x < 0 or self.y < 0:
            raise InvalidRegionError(
                f"Region origin must be non-negative, got ({self.x}, {self.y})"
            )

    @classmethod
    def parse(cls, text: str) -> "Region":
        """Parse ``"x,y,w,h"``."""

        parts = [part.strip() for part in str(text).split(",")]
        if len(parts) != 4:
            raise InvalidRegionError(f"Expected 'x,y,w,h', got {text!r}")
        try:
            x, y, w, h = (int(float(part)) for part in parts)
        except (ValueError, OverflowError) as exc:
            raise InvalidRegionError(f"Non-numeric region value in {text!r}") from exc
        return cls(x, y, w, h)

    @classmethod
    def from_value(cls, value: RegionValue) -> "Region":
        """Build a region from a string, 4-sequence or ``{x, y, w, h}`` mapping."""

        if isinstance(value, Region):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, Mapping):
            try:
                return cls(
                    int(value["x"]), int(value["y"]), int(value["w"]), int(value["h"])
                )
            except (KeyError, TypeError, ValueError, OverflowError) as exc:
                raise InvalidRegionError(f"Invalid region mapping: {value!r}") from exc
        if isinstance(value, Sequence) and len(value) == 4:
            try:
                return cls(*(int(item) for item in value))
            except (TypeError, ValueError, OverflowError) as exc:
                raise InvalidRegionError(f"Invalid region values: {value!r}") from exc
        raise InvalidRegionError(f"Unsupported region specification: {value!r}")

    def fits(self, width: int, height: int) -> bool:
        return self.x + self.w <= width and self.y + self.h <= height

    def to_json(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}


@dataclass(frozen=True)
class Sample:
    """Robust representative colour of a region.

    ``rgb`` is the per-channel median of retained pixels and ``saturation``
    their mean HSV saturation. When every pixel was rejected the sample is
    zero-valued and ``is_degenerate`` is set.
    """

    rgb: RGB
    saturation: float
    pixel_count: int = 0
    retained_count: int = 0

    @property
    def is_degenerate(self) -> bool:
        return self.retained_count == 0

    @property
    def retained_fraction(self) -> float:
        return self.retained_count / self.pixel_count if self.pixel_count else 0.0

    def to_json(self) -> Dict[str, Any]:
        return {
            "rgb": self.rgb.to_json(),
            "saturation": float(self.saturation),
            "pixel_count": self.pixel_count,
            "retained_count": self.retained_count,
            "degenerate": self.is_degenerate,
        }


@dataclass(frozen=True)
class CalibrationFactors:
    """Per-channel white-balance gains derived from the control sample."""

    scale_r: float
    scale_g: float
    scale_b: float
    target: float = 240.0
    floored_channels: Tuple[str, ...] = ()

    def apply(self, rgb: RGB) -> RGB:
        """Scale *rgb* channel-wise, clamping at 255."""

        return RGB(
            min(255.0, rgb.r * self.scale_r),
            min(255.0, rgb.g * self.scale_g),
            min(255.0, rgb.b * self.scale_b),
        )

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.scale_r, self.scale_g, self.scale_b)

    def to_json(self) -> Dict[str, Any]:
        return {
            "scale_r": float(self.scale_r),
            "scale_g": float(self.scale_g),
            "scale_b": float(self.scale_b),
            "target": float(self.target),
            "floored_channels": list(self.floored_channels),
        }


@dataclass(frozen=True)
class ComparisonResult:
    """Winner and complementary confidence percentages for one analysis."""

    winner: Reference
    pct_a: float
    pct_b: float
    delta_e_a: float
    delta_e_b: float
    control_saturation: float

    @property
    def is_tie(self) -> bool:
        return self.delta_e_a == self.delta_e_b

    @property
    def winner_pct(self) -> float:
        return self.pct_a if self.winner is Reference.A else self.pct_b

    def control_tinted(self, threshold: float) -> bool:
        """True when the control patch is too saturated to be trusted as white."""

        return self.control_saturation > threshold

    def to_json(self) -> Dict[str, Any]:
        return {
            "winner": self.winner.value,
            "pct_a": float(self.pct_a),
            "pct_b": float(self.pct_b),
            "delta_e_a": float(self.delta_e_a),
            "delta_e_b": float(self.delta_e_b),
            "control_saturation": float(self.control_saturation),
            "tie": self.is_tie,
        }


@dataclass(frozen=True)
class AnalysisParameters:
    """Tunable constants of the measurement pipeline."""

    shadow_threshold: float = 0.05
    glare_threshold: float = 0.95
    target_white: float = 240.0
    saturation_warning: float = 0.15

    def to_json(self) -> Dict[str, float]:
        return {
            "shadow_threshold": self.shadow_threshold,
            "glare_threshold": self.glare_threshold,
            "target_white": self.target_white,
            "saturation_warning": self.saturation_warning,
        }


@dataclass(frozen=True)
class AnalysisOutcome:
    """Every intermediate value produced by one pipeline run."""

    samples: Dict[RegionRole, Sample]
    calibration: CalibrationFactors
    corrected: Dict[RegionRole, RGB]
    lab: Dict[RegionRole, LAB]
    result: ComparisonResult
    parameters: AnalysisParameters = field(default_factory=AnalysisParameters)

    def degenerate_roles(self) -> List[RegionRole]:
        return [role for role, sample in self.samples.items() if sample.is_degenerate]

    def to_json(self) -> Dict[str, Any]:
        return {
            "samples": {
                role.value: sample.to_json() for role, sample in self.samples.items()
            },
            "calibration": self.calibration.to_json(),
            "corrected": {
                role.value: rgb.to_json() for role, rgb in self.corrected.items()
            },
            "lab": {role.value: lab.to_json() for role, lab in self.lab.items()},
            "result": self.result.to_json(),
            "parameters": self.parameters.to_json(),
        }


@dataclass(frozen=True)
class AnalysisSummary:
    """Numeric digest handed to the narrative collaborator."""

    scale_r: float
    scale_g: float
    scale_b: float
    control_saturation: float
    lab_a: LAB
    lab_b: LAB
    lab_test: LAB
    delta_e_a: float
    delta_e_b: float
    winner: Reference
    winner_pct: float

    @classmethod
    def from_outcome(cls, outcome: AnalysisOutcome) -> "AnalysisSummary":
        result = outcome.result
        return cls(
            scale_r=outcome.calibration.scale_r,
            scale_g=outcome.calibration.scale_g,
            scale_b=outcome.calibration.scale_b,
            control_saturation=result.control_saturation,
            lab_a=outcome.lab[RegionRole.A],
            lab_b=outcome.lab[RegionRole.B],
            lab_test=outcome.lab[RegionRole.TEST],
            delta_e_a=result.delta_e_a,
            delta_e_b=result.delta_e_b,
            winner=result.winner,
            winner_pct=result.winner_pct,
        )

    def prompt_context(self) -> Dict[str, Any]:
        """Values exposed to prompt templates."""

        return {
            "scale_r": self.scale_r,
            "scale_g": self.scale_g,
            "scale_b": self.scale_b,
            "control_saturation_pct": self.control_saturation * 100.0,
            "lab_a": self.lab_a,
            "lab_b": self.lab_b,
            "lab_test": self.lab_test,
            "delta_e_a": self.delta_e_a,
            "delta_e_b": self.delta_e_b,
            "winner": self.winner.value,
            "winner_pct": self.winner_pct,
        }

    def to_json(self) -> Dict[str, Any]:
        return {
            "scale": [float(self.scale_r), float(self.scale_g), float(self.scale_b)],
            "control_saturation": float(self.control_saturation),
            "lab_a": self.lab_a.to_json(),
            "lab_b": self.lab_b.to_json(),
            "lab_test": self.lab_test.to_json(),
            "delta_e_a": float(self.delta_e_a),
            "delta_e_b": float(self.delta_e_b),
            "winner": self.winner.value,
            "winner_pct": float(self.winner_pct),
        }


@dataclass
class AnalysisReport:
    """Numeric outcome plus narrative, as delivered to outer surfaces."""

    outcome: AnalysisOutcome
    summary: AnalysisSummary
    narrative: Optional[str] = None
    narrative_error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    source: Optional[Path] = None

    @property
    def result(self) -> ComparisonResult:
        return self.outcome.result

    def to_json(self) -> Dict[str, Any]:
        return {
            "source": str(self.source) if self.source else None,
            "result": self.result.to_json(),
            "summary": self.summary.to_json(),
            "analysis": self.outcome.to_json(),
            "narrative": self.narrative,
            "narrative_error": self.narrative_error,
            "warnings": list(self.warnings),
        }
