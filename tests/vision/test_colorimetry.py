import numpy as np
import pytest

from stripworks.libs.vision.colorimetry import (
    delta_e_cie76,
    srgb_to_lab,
    srgb_to_linear,
    srgb_to_xyz,
)


def test_white_maps_to_reference_white():
    lab = srgb_to_lab((255, 255, 255))
    assert lab[0] == pytest.approx(100.0, abs=0.5)
    assert lab[1] == pytest.approx(0.0, abs=0.5)
    assert lab[2] == pytest.approx(0.0, abs=0.5)


def test_black_maps_to_origin():
    lab = srgb_to_lab((0, 0, 0))
    assert lab.tolist() == pytest.approx([0.0, 0.0, 0.0], abs=1e-9)


def test_pure_red_matches_published_values():
    lightness, a, b = srgb_to_lab((255, 0, 0))
    assert lightness == pytest.approx(53.23, abs=0.1)
    assert a == pytest.approx(80.11, abs=0.1)
    assert b == pytest.approx(67.22, abs=0.1)


def test_neutral_grey_has_no_chroma():
    _, a, b = srgb_to_lab((128, 128, 128))
    assert abs(a) < 0.05
    assert abs(b) < 0.05


def test_gamma_uses_linear_segment_for_dark_values():
    linear = srgb_to_linear((10, 10, 10))
    assert linear[0] == pytest.approx((10 / 255) / 12.92)
    bright = srgb_to_linear((200, 200, 200))
    assert bright[0] == pytest.approx(((200 / 255 + 0.055) / 1.055) ** 2.4)


def test_white_xyz_is_d65_scaled():
    xyz = srgb_to_xyz((255, 255, 255))
    assert xyz.tolist() == pytest.approx([95.05, 100.0, 108.9], abs=1e-6)


def test_conversion_is_vectorised():
    image = np.zeros((2, 3, 3), dtype=np.uint8)
    image[1, 2] = (255, 255, 255)
    lab = srgb_to_lab(image)
    assert lab.shape == (2, 3, 3)
    assert lab[1, 2, 0] == pytest.approx(100.0, abs=0.5)
    assert lab[0, 0, 0] == pytest.approx(0.0, abs=1e-9)


def test_rejects_non_triples():
    with pytest.raises(ValueError):
        srgb_to_lab((1, 2))


def test_delta_e_is_euclidean():
    assert float(delta_e_cie76((50, 0, 0), (50, 3, 4))) == pytest.approx(5.0)
    assert float(delta_e_cie76((12.5, -3.0, 7.0), (12.5, -3.0, 7.0))) == 0.0
