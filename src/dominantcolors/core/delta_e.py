"""Perceptual color difference (Delta E) formulas.

Every formula takes two LAB tensors of broadcastable shape (..., 3) and
returns a tensor of non-negative distances with the broadcast leading shape.
Formulas are plain functions looked up in ``DELTA_E_FUNCTIONS``.
"""

import math
from typing import Callable, Dict, Optional, Sequence

import torch

from ..utils.color import ColorConverter
from .options import DeltaEFormula

# CIE94 graphic arts constants
_CIE94_KL = 1.0
_CIE94_K1 = 0.045
_CIE94_K2 = 0.015

_POW25_7 = 25.0**7


def delta_e_cie76(lab1: torch.Tensor, lab2: torch.Tensor) -> torch.Tensor:
    """Euclidean distance in LAB space."""
    diff = lab1 - lab2
    return torch.sqrt(torch.sum(diff**2, dim=-1))


def delta_e_cie94(lab1: torch.Tensor, lab2: torch.Tensor) -> torch.Tensor:
    """CIE94 color difference, using ``lab1`` as the reference color.

    The chroma and hue weights depend on the reference chroma only, so
    ``delta_e_cie94(x, y)`` and ``delta_e_cie94(y, x)`` generally differ.
    """
    L1, a1, b1 = lab1.unbind(-1)
    L2, a2, b2 = lab2.unbind(-1)

    C1 = torch.sqrt(a1**2 + b1**2)
    C2 = torch.sqrt(a2**2 + b2**2)

    delta_L = L1 - L2
    delta_C = C1 - C2
    delta_H_sq = torch.clamp((a1 - a2) ** 2 + (b1 - b2) ** 2 - delta_C**2, min=0.0)

    S_C = 1.0 + _CIE94_K1 * C1
    S_H = 1.0 + _CIE94_K2 * C1

    return torch.sqrt(
        (delta_L / _CIE94_KL) ** 2 + (delta_C / S_C) ** 2 + delta_H_sq / S_H**2
    )


def delta_e_ciede2000(lab1: torch.Tensor, lab2: torch.Tensor) -> torch.Tensor:
    """CIEDE2000 color difference (kL = kC = kH = 1)."""
    L1, a1, b1 = lab1.unbind(-1)
    L2, a2, b2 = lab2.unbind(-1)

    C1 = torch.sqrt(a1**2 + b1**2)
    C2 = torch.sqrt(a2**2 + b2**2)
    C_bar7 = ((C1 + C2) / 2) ** 7
    G = 0.5 * (1 - torch.sqrt(C_bar7 / (C_bar7 + _POW25_7)))

    a1_prime = a1 * (1 + G)
    a2_prime = a2 * (1 + G)
    C1_prime = torch.sqrt(a1_prime**2 + b1**2)
    C2_prime = torch.sqrt(a2_prime**2 + b2**2)

    two_pi = 2 * math.pi
    h1_prime = torch.remainder(torch.atan2(b1, a1_prime), two_pi)
    h2_prime = torch.remainder(torch.atan2(b2, a2_prime), two_pi)

    chroma_product = C1_prime * C2_prime
    achromatic = chroma_product == 0

    delta_L_prime = L2 - L1
    delta_C_prime = C2_prime - C1_prime

    delta_h = h2_prime - h1_prime
    delta_h = torch.where(delta_h > math.pi, delta_h - two_pi, delta_h)
    delta_h = torch.where(delta_h < -math.pi, delta_h + two_pi, delta_h)
    delta_h = torch.where(achromatic, torch.zeros_like(delta_h), delta_h)
    delta_H_prime = 2 * torch.sqrt(chroma_product) * torch.sin(delta_h / 2)

    L_bar_prime = (L1 + L2) / 2
    C_bar_prime = (C1_prime + C2_prime) / 2

    h_sum = h1_prime + h2_prime
    h_bar_prime = torch.where(
        torch.abs(h1_prime - h2_prime) <= math.pi,
        h_sum / 2,
        torch.where(h_sum < two_pi, (h_sum + two_pi) / 2, (h_sum - two_pi) / 2),
    )
    h_bar_prime = torch.where(achromatic, h_sum, h_bar_prime)

    T = (
        1
        - 0.17 * torch.cos(h_bar_prime - math.radians(30))
        + 0.24 * torch.cos(2 * h_bar_prime)
        + 0.32 * torch.cos(3 * h_bar_prime + math.radians(6))
        - 0.20 * torch.cos(4 * h_bar_prime - math.radians(63))
    )

    delta_theta = math.radians(30) * torch.exp(
        -(((torch.rad2deg(h_bar_prime) - 275) / 25) ** 2)
    )
    C_bar_prime7 = C_bar_prime**7
    R_C = 2 * torch.sqrt(C_bar_prime7 / (C_bar_prime7 + _POW25_7))

    L_offset_sq = (L_bar_prime - 50) ** 2
    S_L = 1 + (0.015 * L_offset_sq) / torch.sqrt(20 + L_offset_sq)
    S_C = 1 + 0.045 * C_bar_prime
    S_H = 1 + 0.015 * C_bar_prime * T
    R_T = -torch.sin(2 * delta_theta) * R_C

    lightness = delta_L_prime / S_L
    chroma = delta_C_prime / S_C
    hue = delta_H_prime / S_H

    return torch.sqrt(
        torch.clamp(lightness**2 + chroma**2 + hue**2 + R_T * chroma * hue, min=0.0)
    )


DELTA_E_FUNCTIONS: Dict[DeltaEFormula, Callable[[torch.Tensor, torch.Tensor], torch.Tensor]] = {
    DeltaEFormula.CIE76: delta_e_cie76,
    DeltaEFormula.CIE94: delta_e_cie94,
    DeltaEFormula.CIEDE2000: delta_e_ciede2000,
}

SYMMETRIC_FORMULAS = frozenset({DeltaEFormula.CIE76, DeltaEFormula.CIEDE2000})

# Largest lightness weight of each formula for LAB colors of real RGB values.
# The remaining terms are non-negative, so d(x, y) >= |L_x - L_y| / scale.
# CIEDE2000's S_L peaks at 1 + 0.015 * 50**2 / sqrt(20 + 50**2) ~= 1.747.
LIGHTNESS_SCALE: Dict[DeltaEFormula, float] = {
    DeltaEFormula.CIE76: 1.0,
    DeltaEFormula.CIE94: _CIE94_KL,
    DeltaEFormula.CIEDE2000: 1.75,
}


def delta_e(
    lab1: torch.Tensor, lab2: torch.Tensor, formula: DeltaEFormula = DeltaEFormula.CIEDE2000
) -> torch.Tensor:
    """Distance from ``lab1`` to ``lab2`` under ``formula``."""
    return DELTA_E_FUNCTIONS[formula](lab1, lab2)


def pair_distance(
    lab1: torch.Tensor, lab2: torch.Tensor, formula: DeltaEFormula = DeltaEFormula.CIEDE2000
) -> torch.Tensor:
    """Order-independent distance between two colors.

    For the asymmetric CIE94 formula this is the smaller of both directions,
    so two colors count as close when either one sees the other as close.
    """
    function = DELTA_E_FUNCTIONS[formula]
    if formula in SYMMETRIC_FORMULAS:
        return function(lab1, lab2)
    return torch.minimum(function(lab1, lab2), function(lab2, lab1))


def color_difference(
    rgb1: Sequence[int],
    rgb2: Sequence[int],
    formula: DeltaEFormula = DeltaEFormula.CIEDE2000,
    converter: Optional[ColorConverter] = None,
) -> float:
    """Delta E between two RGB colors given in [0, 255]."""
    converter = converter or ColorConverter()
    lab = converter.rgb_to_lab([list(rgb1)[:3], list(rgb2)[:3]])
    return float(delta_e(lab[0], lab[1], formula))
