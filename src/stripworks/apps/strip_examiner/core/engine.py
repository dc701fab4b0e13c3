"""Orchestrates measurement, warnings and narrative for one analysis."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Mapping, Optional

from .config import ExaminerConfig
from .errors import NarrativeError
from .image_source import load_pixel_buffer
from .models import (
    AnalysisOutcome,
    AnalysisReport,
    AnalysisSummary,
    RegionValue,
)
from .narrative import NarrativeGenerator, create_narrative_generator
from .pipeline import analyze, require_regions
from .sampler import PixelBuffer

logger = logging.getLogger(__name__)


def collect_warnings(outcome: AnalysisOutcome) -> List[str]:
    """Human-readable quality warnings for an outcome."""

    warnings: List[str] = []
    for role in outcome.degenerate_roles():
        warnings.append(
            f"{role.value} region has no usable pixels (all shadow or glare); "
            "its colour was taken as black"
        )
    if outcome.calibration.floored_channels:
        warnings.append(
            "Control patch is too dark in channel(s) "
            f"{', '.join(outcome.calibration.floored_channels).upper()}; "
            "white balance is unreliable"
        )
    threshold = outcome.parameters.saturation_warning
    if outcome.result.control_tinted(threshold):
        warnings.append(
            f"Control patch saturation {outcome.result.control_saturation:.1%} "
            f"exceeds {threshold:.0%}; ambient light may be tinted"
        )
    if outcome.result.is_tie:
        warnings.append("TEST is equidistant from A and B; the result is inconclusive")
    return warnings


class StripExaminer:
    """Run the measurement pipeline and attach a narrative report."""

    def __init__(
        self,
        config: ExaminerConfig,
        *,
        narrator: Optional[NarrativeGenerator] = None,
    ) -> None:
        self.config = config
        self._narrator = narrator

    def _get_narrator(self) -> NarrativeGenerator:
        if self._narrator is None:
            self._narrator = create_narrative_generator(self.config)
        return self._narrator

    def examine(
        self,
        buffer: PixelBuffer,
        regions: Mapping[object, Optional[RegionValue]],
        *,
        source: Optional[Path] = None,
    ) -> AnalysisReport:
        """Analyse *buffer* and return a complete report.

        All numeric work finishes before the narrative backend is contacted;
        a narrative failure only swaps in the fallback text.
        """

        outcome = analyze(buffer, regions, self.config.analysis_parameters())
        summary = AnalysisSummary.from_outcome(outcome)
        report = AnalysisReport(
            outcome=outcome,
            summary=summary,
            warnings=collect_warnings(outcome),
            source=source,
        )
        for warning in report.warnings:
            logger.warning("%s", warning)

        if self.config.generate_narrative:
            try:
                report.narrative = self._get_narrator().generate(summary)
            except NarrativeError as exc:
                logger.error("Narrative generation failed: %s", exc)
                report.narrative_error = str(exc)
                report.narrative = self.config.fallback_narrative

        return report

    def examine_file(
        self, image_path: Path, regions: Mapping[object, Optional[RegionValue]]
    ) -> AnalysisReport:
        # Reject incomplete selections before paying for the decode
        resolved = require_regions(regions)
        buffer = load_pixel_buffer(image_path)
        return self.examine(buffer, resolved, source=image_path)

    def close(self) -> None:
        if self._narrator is not None:
            self._narrator.close()


__all__ = ["StripExaminer", "collect_warnings"]
