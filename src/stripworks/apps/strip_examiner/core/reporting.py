"""Report generation for the strip examiner."""

from __future__ import annotations

import json
from pathlib import Path

from .models import AnalysisReport, RegionRole


def format_text_summary(report: AnalysisReport) -> str:
    """Plain-text digest suitable for pasting into a lab notebook."""

    result = report.result
    lines = [
        "Color Examiner AI Results:",
        f"Winner: {result.winner.value}",
        f"Likelihood A: {result.pct_a:.1f}%",
        f"Likelihood B: {result.pct_b:.1f}%",
        "",
        "Technical Report:",
        report.narrative or "(narrative disabled)",
    ]
    return "\n".join(lines)


def write_json(report: AnalysisReport, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(report.to_json(), ensure_ascii=False, indent=2), encoding="utf-8"
    )


def write_markdown(report: AnalysisReport, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    outcome = report.outcome
    result = report.result

    title = report.source.name if report.source else "in-memory image"
    lines = [f"# Strip Examiner Report: {title}", ""]
    lines.append(f"- Winner: **{result.winner.value}**")
    lines.append(f"- Likelihood A: {result.pct_a:.1f}% (ΔE {result.delta_e_a:.2f})")
    lines.append(f"- Likelihood B: {result.pct_b:.1f}% (ΔE {result.delta_e_b:.2f})")
    lines.append(f"- Control saturation: {result.control_saturation:.1%}")
    scales = outcome.calibration
    lines.append(
        f"- White balance: R×{scales.scale_r:.2f}, G×{scales.scale_g:.2f}, "
        f"B×{scales.scale_b:.2f} (target {scales.target:.0f})"
    )
    lines.append("")

    lines.extend(
        [
            "| Region | Median RGB | Saturation | Retained | Corrected RGB | Lab |",
            "| --- | --- | --- | --- | --- | --- |",
        ]
    )
    for role in RegionRole:
        sample = outcome.samples[role]
        rgb = "({:.0f}, {:.0f}, {:.0f})".format(*sample.rgb.as_tuple())
        corrected = outcome.corrected.get(role)
        corrected_text = (
            "({:.1f}, {:.1f}, {:.1f})".format(*corrected.as_tuple())
            if corrected
            else "—"
        )
        lab = outcome.lab.get(role)
        lab_text = "({:.1f}, {:.1f}, {:.1f})".format(*lab.as_tuple()) if lab else "—"
        lines.append(
            f"| {role.value} | {rgb} | {sample.saturation:.3f} | "
            f"{sample.retained_count}/{sample.pixel_count} "
            f"({sample.retained_fraction:.0%}) | {corrected_text} | {lab_text} |"
        )
    lines.append("")

    if report.warnings:
        lines.append("## Warnings")
        lines.append("")
        for warning in report.warnings:
            lines.append(f"- {warning}")
        lines.append("")

    lines.append("## Technical Report")
    lines.append("")
    lines.append(report.narrative or "(narrative disabled)")
    if report.narrative_error:
        lines.append("")
        lines.append(f"_Narrative backend error: {report.narrative_error}_")
    lines.append("")

    path.write_text("\n".join(lines), encoding="utf-8")
