import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from stripworks.apps.strip_examiner.core.config import (  # noqa: E402
    ExaminerSettings,
    build_runtime_config,
)

PATCH = 10

# Left-to-right patches of the synthetic strip photo
STRIP_COLOURS = {
    "A": (200, 60, 60),
    "B": (60, 60, 200),
    "TEST": (190, 70, 70),
    "CONTROL": (120, 120, 120),
}


def strip_pixels(colours=None) -> np.ndarray:
    """A 4-patch strip image, one PATCH x PATCH square per role."""

    colours = colours or STRIP_COLOURS
    pixels = np.zeros((PATCH, PATCH * 4, 3), dtype=np.uint8)
    for index, role in enumerate(("A", "B", "TEST", "CONTROL")):
        pixels[:, index * PATCH : (index + 1) * PATCH] = colours[role]
    return pixels


def strip_regions() -> dict:
    return {
        role: (index * PATCH, 0, PATCH, PATCH)
        for index, role in enumerate(("A", "B", "TEST", "CONTROL"))
    }


@pytest.fixture
def strip_image() -> np.ndarray:
    return strip_pixels()


@pytest.fixture
def make_strip():
    """Factory for strip images with selected patches recoloured."""

    def _make(**overrides):
        colours = dict(STRIP_COLOURS)
        colours.update(overrides)
        return strip_pixels(colours)

    return _make


@pytest.fixture
def regions() -> dict:
    return strip_regions()


@pytest.fixture
def examiner_config(tmp_path):
    """Runtime config with narratives off and outputs under tmp_path."""

    return build_runtime_config(
        settings=ExaminerSettings(),
        generate_narrative=False,
        output_json=tmp_path / "report.json",
        summary_path=tmp_path / "report.md",
    )
