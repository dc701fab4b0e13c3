from .colorimetry import (
    delta_e_cie76 as delta_e_cie76,
    srgb_to_lab as srgb_to_lab,
    srgb_to_linear as srgb_to_linear,
    srgb_to_xyz as srgb_to_xyz,
    xyz_to_lab as xyz_to_lab,
)

__all__ = [
    "delta_e_cie76",
    "srgb_to_lab",
    "srgb_to_linear",
    "srgb_to_xyz",
    "xyz_to_lab",
]
