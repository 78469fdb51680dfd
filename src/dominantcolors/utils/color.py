"""Color space conversion utilities for dominantcolors."""

from typing import Sequence, Tuple, Union

import numpy as np
import torch

ArrayLike = Union[np.ndarray, torch.Tensor, Sequence]


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color string to RGB tuple."""
    hex_color = hex_color.lstrip("#")
    if len(hex_color) == 3:
        hex_color = "".join(c * 2 for c in hex_color)
    if len(hex_color) != 6:
        raise ValueError(f"Invalid hex color: #{hex_color}")
    rgb_values = tuple(int(hex_color[i : i + 2], 16) for i in (0, 2, 4))
    return (rgb_values[0], rgb_values[1], rgb_values[2])


def rgb_to_hex(rgb: Sequence[int]) -> str:
    """Convert an RGB triple in [0, 255] to an uppercase hex string."""
    r, g, b = (int(c) for c in rgb[:3])
    return f"#{r:02X}{g:02X}{b:02X}"


class ColorConverter:
    """sRGB <-> CIELAB conversion on the last axis of a tensor.

    RGB channels use the [0, 255] convention. All math runs in float64 so
    that repeated conversions of the same color give bit-identical results.
    """

    def __init__(self, device: str = "cpu", dtype: torch.dtype = torch.float64):
        """Initialize color converter.

        Args:
            device: Device for tensor operations
            dtype: Floating point type used for the conversion
        """
        self.device = torch.device(device)
        self.dtype = dtype

        # D65 illuminant white point for XYZ conversion
        self.white_point = torch.tensor(
            [0.95047, 1.0, 1.08883], dtype=dtype, device=self.device
        )

        # sRGB to XYZ conversion matrix (D65 illuminant)
        self.rgb_to_xyz_matrix = torch.tensor(
            [
                [0.4124564, 0.3575761, 0.1804375],
                [0.2126729, 0.7151522, 0.0721750],
                [0.0193339, 0.1191920, 0.9503041],
            ],
            dtype=dtype,
            device=self.device,
        )
        self.xyz_to_rgb_matrix = torch.linalg.inv(self.rgb_to_xyz_matrix)

    def as_tensor(self, values: ArrayLike) -> torch.Tensor:
        """Convert an array-like of colors to a tensor of this converter's dtype."""
        if isinstance(values, torch.Tensor):
            return values.to(device=self.device, dtype=self.dtype)
        return torch.as_tensor(np.asarray(values), dtype=self.dtype, device=self.device)

    def rgb_to_lab(self, rgb: ArrayLike) -> torch.Tensor:
        """Convert RGB colors to CIELAB.

        Implements the sRGB -> XYZ -> LAB pipeline with the D65 white point.

        Args:
            rgb: Colors with shape (..., 3), channels in [0, 255]

        Returns:
            LAB tensor of the same shape, L* in [0, 100]
        """
        rgb_normalized = torch.clamp(self.as_tensor(rgb) / 255.0, 0.0, 1.0)
        rgb_linear = self._srgb_to_linear(rgb_normalized)
        xyz = rgb_linear @ self.rgb_to_xyz_matrix.T
        return self._xyz_to_lab(xyz / self.white_point)

    def lab_to_rgb(self, lab: ArrayLike) -> torch.Tensor:
        """Convert CIELAB colors back to RGB.

        Args:
            lab: LAB colors with shape (..., 3)

        Returns:
            RGB tensor in [0, 255], clamped to the sRGB gamut
        """
        xyz = self._lab_to_xyz(self.as_tensor(lab)) * self.white_point
        rgb_linear = xyz @ self.xyz_to_rgb_matrix.T
        rgb_normalized = self._linear_to_srgb(torch.clamp(rgb_linear, 0.0, 1.0))
        return torch.clamp(rgb_normalized * 255.0, 0.0, 255.0)

    def lab_to_rgb8(self, lab: ArrayLike) -> np.ndarray:
        """Convert LAB colors to rounded uint8 RGB."""
        return torch.round(self.lab_to_rgb(lab)).to(torch.uint8).cpu().numpy()

    @staticmethod
    def chroma(lab: torch.Tensor) -> torch.Tensor:
        """Chroma C*ab of LAB colors."""
        return torch.sqrt(lab[..., 1] ** 2 + lab[..., 2] ** 2)

    @staticmethod
    def hue_degrees(lab: torch.Tensor) -> torch.Tensor:
        """Hue angle h_ab in degrees, in [0, 360)."""
        return torch.remainder(torch.rad2deg(torch.atan2(lab[..., 2], lab[..., 1])), 360.0)

    def _srgb_to_linear(self, srgb: torch.Tensor) -> torch.Tensor:
        """Apply inverse gamma correction to convert sRGB to linear RGB."""
        threshold = 0.04045
        return torch.where(
            srgb <= threshold,
            srgb / 12.92,
            torch.pow((srgb + 0.055) / 1.055, 2.4),
        )

    def _linear_to_srgb(self, linear: torch.Tensor) -> torch.Tensor:
        """Apply gamma correction to convert linear RGB to sRGB."""
        threshold = 0.0031308
        return torch.where(
            linear <= threshold,
            linear * 12.92,
            1.055 * torch.pow(linear, 1.0 / 2.4) - 0.055,
        )

    def _xyz_to_lab(self, xyz_normalized: torch.Tensor) -> torch.Tensor:
        """Convert white-normalized XYZ to LAB."""
        epsilon = 216.0 / 24389.0  # (6/29)^3
        kappa = 24389.0 / 27.0

        f_xyz = torch.where(
            xyz_normalized > epsilon,
            torch.pow(torch.clamp(xyz_normalized, min=epsilon), 1.0 / 3.0),
            (kappa * xyz_normalized + 16) / 116,
        )
        fX, fY, fZ = f_xyz.unbind(-1)

        L = 116 * fY - 16
        a = 500 * (fX - fY)
        b = 200 * (fY - fZ)
        return torch.stack([L, a, b], dim=-1)

    def _lab_to_xyz(self, lab: torch.Tensor) -> torch.Tensor:
        """Convert LAB to white-normalized XYZ."""
        L, a, b = lab.unbind(-1)

        fy = (L + 16) / 116
        fx = a / 500 + fy
        fz = fy - b / 200

        epsilon = 216.0 / 24389.0
        kappa = 24389.0 / 27.0

        def finv(t: torch.Tensor) -> torch.Tensor:
            t_cubed = t**3
            return torch.where(t_cubed > epsilon, t_cubed, (116 * t - 16) / kappa)

        X = finv(fx)
        Y = torch.where(L > kappa * epsilon, fy**3, L / kappa)
        Z = finv(fz)
        return torch.stack([X, Y, Z], dim=-1)


_default_converter = ColorConverter()


def rgb_to_lab(rgb: ArrayLike) -> np.ndarray:
    """Convert RGB colors (..., 3) in [0, 255] to a LAB numpy array."""
    return _default_converter.rgb_to_lab(rgb).cpu().numpy()


def lab_to_rgb(lab: ArrayLike) -> np.ndarray:
    """Convert LAB colors (..., 3) to rounded uint8 RGB."""
    return _default_converter.lab_to_rgb8(lab)
