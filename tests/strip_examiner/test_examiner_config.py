from pathlib import Path

import pytest

from stripworks.apps.strip_examiner.core.config import (
    ExaminerSettings,
    build_runtime_config,
    load_settings,
)
from stripworks.apps.strip_examiner.core.prompts import FALLBACK_NARRATIVE


def test_defaults_resolve_to_documented_values():
    config = build_runtime_config(settings=ExaminerSettings())

    assert config.shadow_threshold == 0.05
    assert config.glare_threshold == 0.95
    assert config.target_white == 240.0
    assert config.saturation_warning == 0.15
    assert config.generate_narrative is True
    assert config.backend == "vllm"
    assert config.prompt_profile == "technical_audit"
    assert config.fallback_narrative == FALLBACK_NARRATIVE


def test_overrides_take_precedence(tmp_path):
    config = build_runtime_config(
        settings=ExaminerSettings(),
        glare_threshold=0.9,
        backend="Ollama",
        generate_narrative=False,
        output_json=tmp_path / "out.json",
    )

    assert config.glare_threshold == 0.9
    assert config.backend == "ollama"
    assert config.generate_narrative is False
    assert config.output_json == tmp_path / "out.json"


@pytest.mark.parametrize(
    "overrides",
    [
        {"shadow_threshold": 0.5, "glare_threshold": 0.4},
        {"glare_threshold": 1.2},
        {"shadow_threshold": -0.1},
        {"target_white": 0},
        {"target_white": 300},
        {"saturation_warning": 1.5},
        {"backend": "gemini"},
        {"prompt_profile": "does_not_exist"},
        {"timeout": -5},
    ],
)
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ValueError):
        build_runtime_config(settings=ExaminerSettings(), **overrides)


def test_prompt_profile_accepts_numeric_id():
    config = build_runtime_config(settings=ExaminerSettings(), prompt_profile="2")
    assert config.prompt_profile == "field_brief"


def test_analysis_parameters_mirror_config():
    config = build_runtime_config(
        settings=ExaminerSettings(), shadow_threshold=0.1, target_white=200
    )
    params = config.analysis_parameters()

    assert params.shadow_threshold == 0.1
    assert params.glare_threshold == 0.95
    assert params.target_white == 200.0


def test_load_settings_reads_pyproject_and_env(tmp_path, monkeypatch):
    (tmp_path / "pyproject.toml").write_text(
        "\n".join(
            [
                "[tool.stripworks.strip_examiner]",
                "default_shadow_threshold = 0.08",
                "default_generate_narrative = false",
                'default_model = "local-model"',
                'default_output_json = "reports/out.json"',
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("STRIPWORKS_STRIP_EXAMINER__DEFAULT_GLARE_THRESHOLD", "0.9")

    settings = load_settings(tmp_path)

    assert settings.default_shadow_threshold == 0.08
    assert settings.default_glare_threshold == 0.9
    assert settings.default_generate_narrative is False
    assert settings.default_model == "local-model"
    assert settings.default_output_json == Path("reports/out.json")
    assert settings.default_target_white == 240.0


def test_unparseable_env_value_falls_back(tmp_path, monkeypatch):
    (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n", encoding="utf-8")
    monkeypatch.setenv("STRIPWORKS_STRIP_EXAMINER__DEFAULT_TIMEOUT", "soon")

    settings = load_settings(tmp_path)

    assert settings.default_timeout == 120


def test_explicit_zero_timeout_is_rejected():
    with pytest.raises(ValueError, match="Timeout"):
        build_runtime_config(settings=ExaminerSettings(), timeout=0)


def test_unknown_prompt_error_lists_choices():
    with pytest.raises(ValueError) as excinfo:
        build_runtime_config(settings=ExaminerSettings(), prompt_profile="verbose")

    message = str(excinfo.value)
    assert "'verbose'" in message
    assert "technical_audit" in message
    assert "field_brief" in message
