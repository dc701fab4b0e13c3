"""Command line interface for the strip examiner."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

import typer
from rich.console import Console
from rich.table import Table

from stripworks.logging_utils import configure_logging

from ..core.config import load_config
from ..core.engine import StripExaminer
from ..core.errors import MissingRegionError, StripExaminerError
from ..core.image_source import load_regions_file, merge_regions
from ..core.models import AnalysisReport, Region, RegionRole
from ..core.prompts import list_prompt_profiles
from ..core.reporting import format_text_summary, write_json, write_markdown

LOG_PATH = configure_logging("strip_examiner")
logger = logging.getLogger(__name__)
logger.info("Strip examiner logging initialised → %s", LOG_PATH)

app = typer.Typer(help="Classify a test strip colour against two references.")
console = Console()


@app.command()
def analyze(
    image: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Photograph of the test strip."
    ),
    regions_file: Optional[Path] = typer.Option(
        None,
        "--regions",
        "-r",
        exists=True,
        dir_okay=False,
        help="JSON file mapping A/B/TEST/CONTROL to [x, y, w, h].",
    ),
    region_a: Optional[str] = typer.Option(None, "--region-a", help="Reference A as x,y,w,h."),
    region_b: Optional[str] = typer.Option(None, "--region-b", help="Reference B as x,y,w,h."),
    region_test: Optional[str] = typer.Option(None, "--region-test", help="Unknown TEST sample as x,y,w,h."),
    region_control: Optional[str] = typer.Option(
        None, "--region-control", help="White CONTROL patch as x,y,w,h."
    ),
    shadow_threshold: Optional[float] = typer.Option(
        None, "--shadow-threshold", help="Reject pixels with HSV value at or below this."
    ),
    glare_threshold: Optional[float] = typer.Option(
        None, "--glare-threshold", help="Reject pixels with HSV value at or above this."
    ),
    target_white: Optional[float] = typer.Option(
        None, "--target-white", help="Brightness (0-255) the control patch is mapped to."
    ),
    saturation_warning: Optional[float] = typer.Option(
        None, "--saturation-warning", help="Warn when control saturation exceeds this."
    ),
    narrative: Optional[bool] = typer.Option(
        None, "--narrative/--no-narrative", help="Request a narrative report from the backend."
    ),
    backend: Optional[str] = typer.Option(
        None, "--backend", help="Narrative backend (vllm, lmdeploy, ollama, openai)."
    ),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="OpenAI-compatible base URL."),
    model: Optional[str] = typer.Option(None, "--model", help="Model identifier for narratives."),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="API key for the backend."),
    timeout: Optional[int] = typer.Option(None, "--timeout", help="Request timeout (seconds)."),
    prompt_profile: Optional[str] = typer.Option(
        None, "--prompt-profile", help="Prompt profile name or id (see `prompts`)."
    ),
    output_json: Optional[Path] = typer.Option(None, "--output-json", help="Machine-readable JSON output path."),
    summary_path: Optional[Path] = typer.Option(None, "--summary", help="Markdown report path."),
    json_output: bool = typer.Option(False, "--json", help="Print the report as JSON."),
    text_output: bool = typer.Option(
        False, "--text", help="Print the plain-text results summary only."
    ),
    summary_text: Optional[Path] = typer.Option(
        None, "--summary-text", help="Also write the plain-text results summary here."
    ),
) -> None:
    """Analyse IMAGE and report which reference the TEST colour matches."""

    overrides: Dict[str, object] = {
        "shadow_threshold": shadow_threshold,
        "glare_threshold": glare_threshold,
        "target_white": target_white,
        "saturation_warning": saturation_warning,
        "generate_narrative": narrative,
        "backend": backend,
        "base_url": base_url,
        "model": model,
        "api_key": api_key,
        "timeout": timeout,
        "prompt_profile": prompt_profile,
        "output_json": output_json,
        "summary_path": summary_path,
    }
    try:
        config = load_config(**{k: v for k, v in overrides.items() if v is not None})
    except ValueError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    logger.info(
        "strip_examiner_config",
        extra={
            "event_type": "config",
            "image": str(image),
            "shadow_threshold": config.shadow_threshold,
            "glare_threshold": config.glare_threshold,
            "target_white": config.target_white,
            "generate_narrative": config.generate_narrative,
            "backend": config.backend,
        },
    )

    examiner = StripExaminer(config)
    try:
        base_regions: Dict[RegionRole, Region] = (
            load_regions_file(regions_file) if regions_file else {}
        )
        regions = merge_regions(
            base_regions,
            {
                RegionRole.A: region_a,
                RegionRole.B: region_b,
                RegionRole.TEST: region_test,
                RegionRole.CONTROL: region_control,
            },
        )
        report = examiner.examine_file(image, regions)
    except MissingRegionError as exc:
        typer.echo(f"Missing regions: {', '.join(exc.missing)}", err=True)
        raise typer.Exit(code=2) from exc
    except StripExaminerError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    except OSError as exc:
        typer.echo(f"Could not read image {image}: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    finally:
        examiner.close()

    write_json(report, config.output_json)
    write_markdown(report, config.summary_path)
    text_summary = format_text_summary(report)
    if summary_text:
        summary_text.parent.mkdir(parents=True, exist_ok=True)
        summary_text.write_text(text_summary + "\n", encoding="utf-8")

    if json_output:
        console.print_json(data=report.to_json())
    elif text_output:
        typer.echo(text_summary)
    else:
        _print_report(report)
        typer.echo(
            f"\nDetailed JSON → {config.output_json}\nMarkdown report → {config.summary_path}"
        )


@app.command()
def prompts() -> None:
    """List the available narrative prompt profiles."""

    table = Table(title="Prompt Profiles", show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Name", no_wrap=True)
    table.add_column("Description")
    for profile in list_prompt_profiles():
        table.add_row(str(profile.id), profile.name, profile.description)
    console.print(table)


def _print_report(report: AnalysisReport) -> None:
    result = report.result
    table = Table(title="Spectral Results", show_header=True, header_style="bold")
    table.add_column("Reference")
    table.add_column("Likelihood", justify="right")
    table.add_column("ΔE", justify="right")
    table.add_row("A", f"{result.pct_a:.1f}%", f"{result.delta_e_a:.2f}")
    table.add_row("B", f"{result.pct_b:.1f}%", f"{result.delta_e_b:.2f}")
    console.print(table)
    console.print(f"Winner: [bold]{result.winner.value}[/bold]")

    for warning in report.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")

    if report.narrative:
        console.print("\nTechnical Report:")
        console.print(report.narrative, markup=False)


if __name__ == "__main__":  # pragma: no cover
    app()
