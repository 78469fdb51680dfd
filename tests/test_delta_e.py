"""Tests for the Delta E formulas."""

import pytest
import torch

from dominantcolors.core.delta_e import (
    DELTA_E_FUNCTIONS,
    color_difference,
    delta_e,
    delta_e_cie76,
    delta_e_cie94,
    delta_e_ciede2000,
    pair_distance,
)
from dominantcolors.core.options import DeltaEFormula


def lab(*values):
    return torch.tensor(values, dtype=torch.float64)


class TestCIEDE2000:
    """CIEDE2000 against the published reference pairs (Sharma et al.)."""

    @pytest.mark.parametrize(
        "lab1, lab2, expected",
        [
            ((50.0, 2.6772, -79.7751), (50.0, 0.0, -82.7485), 2.0425),
            ((50.0, 0.0, 0.0), (50.0, -1.0, 2.0), 2.3669),
            ((50.0, 2.5, 0.0), (73.0, 25.0, -18.0), 27.1492),
            ((60.2574, -34.0099, 36.2677), (60.4626, -34.1751, 39.4387), 1.2644),
            ((2.0776, 0.0795, -1.1350), (0.9033, -0.0636, -0.5514), 0.9082),
        ],
    )
    def test_reference_pairs(self, lab1, lab2, expected):
        result = delta_e_ciede2000(lab(*lab1), lab(*lab2)).item()
        assert result == pytest.approx(expected, abs=1e-4)

    def test_symmetric(self):
        a = lab(40.0, 30.0, -20.0)
        b = lab(65.0, -10.0, 45.0)

        assert delta_e_ciede2000(a, b).item() == pytest.approx(
            delta_e_ciede2000(b, a).item(), abs=1e-9
        )

    def test_identical_colors_have_zero_distance(self):
        a = lab(50.0, 0.0, 0.0)
        assert delta_e_ciede2000(a, a).item() == 0.0

    def test_broadcasts_over_matrices(self):
        rows = torch.zeros(3, 1, 3, dtype=torch.float64)
        cols = torch.ones(1, 4, 3, dtype=torch.float64)
        assert delta_e_ciede2000(rows, cols).shape == (3, 4)


class TestCIE76AndCIE94:
    """Test the Euclidean and CIE94 formulas."""

    def test_cie76_is_euclidean(self):
        assert delta_e_cie76(lab(0.0, 0.0, 0.0), lab(3.0, 4.0, 0.0)).item() == pytest.approx(5.0)

    def test_cie94_uses_first_color_as_reference(self):
        saturated = lab(50.0, 50.0, 0.0)
        muted = lab(50.0, 10.0, 0.0)

        # Pure chroma difference of 40, scaled by 1 + 0.045 * C_reference
        assert delta_e_cie94(saturated, muted).item() == pytest.approx(40.0 / 3.25)
        assert delta_e_cie94(muted, saturated).item() == pytest.approx(40.0 / 1.45)

    def test_pair_distance_takes_closer_direction_for_cie94(self):
        saturated = lab(50.0, 50.0, 0.0)
        muted = lab(50.0, 10.0, 0.0)

        forward = pair_distance(saturated, muted, DeltaEFormula.CIE94).item()
        backward = pair_distance(muted, saturated, DeltaEFormula.CIE94).item()
        assert forward == backward == pytest.approx(40.0 / 3.25)

    def test_dispatch_table_covers_all_formulas(self):
        assert set(DELTA_E_FUNCTIONS) == set(DeltaEFormula)

    def test_delta_e_dispatches_by_formula(self):
        a = lab(0.0, 0.0, 0.0)
        b = lab(3.0, 4.0, 0.0)
        assert delta_e(a, b, DeltaEFormula.CIE76).item() == pytest.approx(5.0)


class TestColorDifference:
    """Test Delta E on RGB input."""

    @pytest.mark.parametrize("formula", list(DeltaEFormula))
    def test_identical_colors(self, formula):
        assert color_difference((10, 120, 200), (10, 120, 200), formula) == pytest.approx(0.0)

    def test_red_and_blue_are_far_apart(self):
        assert color_difference((255, 0, 0), (0, 0, 255)) > 40.0

    def test_nearby_colors_are_close(self):
        assert color_difference((255, 0, 0), (250, 0, 0), DeltaEFormula.CIE76) < 5.0
