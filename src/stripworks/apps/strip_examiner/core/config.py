"""Configuration helpers for the strip examiner module."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import tomllib

from stripworks.libs.vlm import VLMBackend

from .models import AnalysisParameters
from .prompts import FALLBACK_NARRATIVE, PROMPT_LIBRARY, get_prompt_profile


_CONFIG_ENV_PREFIX = "STRIPWORKS_STRIP_EXAMINER__"


def _find_pyproject(start: Optional[Path] = None) -> Optional[Path]:
    """Locate the closest ``pyproject.toml`` relative to *start*."""

    current = (start or Path.cwd()).resolve()
    for candidate in [current, *current.parents]:
        pyproject = candidate / "pyproject.toml"
        if pyproject.exists():
            return pyproject
    return None


def _coerce_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return default


def _coerce_int(value: object, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _coerce_float(value: object, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _coerce_str(value: object, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _as_path(value: object) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, Path):
        return value
    if isinstance(value, str) and value.strip():
        return Path(value).expanduser()
    return None


@dataclass(frozen=True)
class ExaminerSettings:
    """Default configuration values sourced from project metadata."""

    default_shadow_threshold: float = 0.05
    default_glare_threshold: float = 0.95
    default_target_white: float = 240.0
    default_saturation_warning: float = 0.15
    default_generate_narrative: bool = True
    default_backend: str = VLMBackend.VLLM.value
    default_base_url: str = "http://localhost:8000/v1"
    default_model: str = "Qwen2.5-7B-Instruct"
    default_api_key: str = "EMPTY"
    default_timeout: int = 120
    default_prompt_profile: str = "technical_audit"
    default_fallback_narrative: str = FALLBACK_NARRATIVE
    default_output_json: Path = Path("outputs/results/strip_examiner.json")
    default_summary_path: Path = Path("outputs/summaries/strip_examiner.md")


@dataclass(frozen=True)
class ExaminerConfig:
    """Fully resolved runtime configuration for one examiner invocation."""

    shadow_threshold: float
    glare_threshold: float
    target_white: float
    saturation_warning: float
    generate_narrative: bool
    backend: str
    base_url: str
    model: str
    api_key: str
    timeout: int
    prompt_profile: str
    fallback_narrative: str
    output_json: Path
    summary_path: Path

    def analysis_parameters(self) -> AnalysisParameters:
        return AnalysisParameters(
            shadow_threshold=self.shadow_threshold,
            glare_threshold=self.glare_threshold,
            target_white=self.target_white,
            saturation_warning=self.saturation_warning,
        )


def _load_pyproject_settings(start: Optional[Path]) -> Dict[str, object]:
    pyproject = _find_pyproject(start)
    if not pyproject:
        return {}

    try:
        with pyproject.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError):
        return {}

    tool_cfg = data.get("tool", {}).get("stripworks", {})
    if not isinstance(tool_cfg, dict):
        return {}

    examiner_cfg = tool_cfg.get("strip_examiner")
    return dict(examiner_cfg) if isinstance(examiner_cfg, dict) else {}


def _load_env_settings() -> Dict[str, object]:
    values: Dict[str, object] = {}
    for env_key, env_value in os.environ.items():
        if not env_key.startswith(_CONFIG_ENV_PREFIX):
            continue
        key = env_key[len(_CONFIG_ENV_PREFIX) :].lower()
        values[key] = env_value
    return values


def load_settings(start: Optional[Path] = None) -> ExaminerSettings:
    """Load project defaults, applying environment overrides when present."""

    raw = _load_pyproject_settings(start)
    raw.update(_load_env_settings())
    base = ExaminerSettings()

    return ExaminerSettings(
        default_shadow_threshold=_coerce_float(
            raw.get("default_shadow_threshold"), base.default_shadow_threshold
        ),
        default_glare_threshold=_coerce_float(
            raw.get("default_glare_threshold"), base.default_glare_threshold
        ),
        default_target_white=_coerce_float(
            raw.get("default_target_white"), base.default_target_white
        ),
        default_saturation_warning=_coerce_float(
            raw.get("default_saturation_warning"), base.default_saturation_warning
        ),
        default_generate_narrative=_coerce_bool(
            raw.get("default_generate_narrative"), base.default_generate_narrative
        ),
        default_backend=_coerce_str(raw.get("default_backend"), base.default_backend),
        default_base_url=_coerce_str(
            raw.get("default_base_url"), base.default_base_url
        ),
        default_model=_coerce_str(raw.get("default_model"), base.default_model),
        default_api_key=_coerce_str(raw.get("default_api_key"), base.default_api_key),
        default_timeout=_coerce_int(raw.get("default_timeout"), base.default_timeout),
        default_prompt_profile=_coerce_str(
            raw.get("default_prompt_profile"), base.default_prompt_profile
        ),
        default_fallback_narrative=_coerce_str(
            raw.get("default_fallback_narrative"), base.default_fallback_narrative
        ),
        default_output_json=_as_path(raw.get("default_output_json"))
        or base.default_output_json,
        default_summary_path=_as_path(raw.get("default_summary_path"))
        or base.default_summary_path,
    )


def build_runtime_config(
    *,
    settings: ExaminerSettings,
    shadow_threshold: Optional[float] = None,
    glare_threshold: Optional[float] = None,
    target_white: Optional[float] = None,
    saturation_warning: Optional[float] = None,
    generate_narrative: Optional[bool] = None,
    backend: Optional[str] = None,
    base_url: Optional[str] = None,
    model: Optional[str] = None,
    api_key: Optional[str] = None,
    timeout: Optional[int] = None,
    prompt_profile: Optional[str] = None,
    fallback_narrative: Optional[str] = None,
    output_json: Optional[Path] = None,
    summary_path: Optional[Path] = None,
) -> ExaminerConfig:
    """Merge CLI overrides with defaults to produce a validated runtime config."""

    resolved_shadow = (
        settings.default_shadow_threshold
        if shadow_threshold is None
        else float(shadow_threshold)
    )
    resolved_glare = (
        settings.default_glare_threshold
        if glare_threshold is None
        else float(glare_threshold)
    )
    if not 0.0 <= resolved_shadow < resolved_glare <= 1.0:
        raise ValueError(
            "Clipping thresholds must satisfy 0 <= shadow < glare <= 1 "
            f"(got shadow={resolved_shadow}, glare={resolved_glare})"
        )

    resolved_target = (
        settings.default_target_white if target_white is None else float(target_white)
    )
    if not 0.0 < resolved_target <= 255.0:
        raise ValueError(f"Target white must be in (0, 255], got {resolved_target}")

    resolved_warning = (
        settings.default_saturation_warning
        if saturation_warning is None
        else float(saturation_warning)
    )
    if not 0.0 <= resolved_warning <= 1.0:
        raise ValueError(
            f"Saturation warning threshold must be in [0, 1], got {resolved_warning}"
        )

    resolved_backend = (backend or settings.default_backend).strip().lower()
    try:
        VLMBackend(resolved_backend)
    except ValueError as exc:
        choices = ", ".join(member.value for member in VLMBackend)
        raise ValueError(
            f"Unknown backend '{resolved_backend}' (expected one of: {choices})"
        ) from exc

    resolved_prompt = (prompt_profile or settings.default_prompt_profile).strip()
    try:
        resolved_prompt = get_prompt_profile(resolved_prompt, strict=True).name
    except KeyError as exc:
        choices = ", ".join(PROMPT_LIBRARY.names())
        raise ValueError(
            f"Unknown prompt profile {resolved_prompt!r} (expected one of: {choices})"
        ) from exc

    resolved_timeout = (
        settings.default_timeout if timeout is None else int(timeout)
    )
    if resolved_timeout <= 0:
        raise ValueError("Timeout must be a positive number of seconds")

    return ExaminerConfig(
        shadow_threshold=resolved_shadow,
        glare_threshold=resolved_glare,
        target_white=resolved_target,
        saturation_warning=resolved_warning,
        generate_narrative=(
            settings.default_generate_narrative
            if generate_narrative is None
            else bool(generate_narrative)
        ),
        backend=resolved_backend,
        base_url=(base_url or settings.default_base_url).strip(),
        model=(model or settings.default_model).strip(),
        api_key=(api_key or settings.default_api_key).strip(),
        timeout=resolved_timeout,
        prompt_profile=resolved_prompt,
        fallback_narrative=fallback_narrative or settings.default_fallback_narrative,
        output_json=(output_json or settings.default_output_json).expanduser(),
        summary_path=(summary_path or settings.default_summary_path).expanduser(),
    )


def load_config(*, start: Optional[Path] = None, **overrides: object) -> ExaminerConfig:
    """Convenience helper used by the CLI to resolve the runtime config."""

    settings = load_settings(start)
    return build_runtime_config(settings=settings, **overrides)
