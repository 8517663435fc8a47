"""
Tests for the individual color adjustment stages.
"""

import pytest
import numpy as np

from photoeditor.processing.errors import SingularityError
from photoeditor.processing.filters import (
    apply_brightness, average_brightness, apply_contrast, apply_saturation,
    apply_gamma, gamma_lut, contrast_alpha, saturation_alpha, round_clamp
)


def gray(value, height=2, width=2):
    return np.full((height, width, 3), value, dtype=np.uint8)


class TestRounding:
    """Test the shared rounding and clamping policy."""

    def test_rounds_half_up(self):
        values = np.array([0.4, 0.5, 1.5, 254.49, 254.5])
        assert round_clamp(values).tolist() == [0, 1, 2, 254, 255]

    def test_clamps_to_channel_range(self):
        values = np.array([-300.0, -0.6, 255.4, 1e9])
        assert round_clamp(values).tolist() == [0, 0, 255, 255]


class TestBrightness:
    """Test the brightness stage and its accumulated sum."""

    def test_mid_gray_plus_twenty(self):
        band = gray(128)
        total = apply_brightness(band, 20)

        assert np.all(band == 148)
        assert total == 148 * 2 * 2 * 3
        assert average_brightness(total, 4) == 148

    def test_sum_uses_clamped_values(self):
        band = gray(250, height=1, width=1)
        total = apply_brightness(band, 100)

        assert np.all(band == 255)
        assert total == 255 * 3

    def test_negative_offset_clamps_at_zero(self):
        band = np.array([[[10, 20, 30]]], dtype=np.uint8)
        total = apply_brightness(band, -25)

        assert band[0, 0].tolist() == [0, 0, 5]
        assert total == 5

    def test_fractional_offset_rounds(self):
        band = gray(100, height=1, width=1)
        apply_brightness(band, 0.5)
        assert np.all(band == 101)


class TestAverageBrightness:
    """Test derivation of the average brightness statistic."""

    def test_integer_division_floors(self):
        # 3 pixels, 9 channels, 1000 / 9 = 111.1
        assert average_brightness(1000, 3) == 111

    def test_rejects_empty_buffer(self):
        with pytest.raises(ValueError):
            average_brightness(0, 0)


class TestContrast:
    """Test the contrast stage."""

    def test_alpha_value(self):
        assert contrast_alpha(50) == pytest.approx(305 / 205)
        assert contrast_alpha(0) == 1.0

    def test_pixel_at_average_is_unchanged(self):
        band = gray(148)
        apply_contrast(band, 50, 148)
        assert np.all(band == 148)

    def test_stretches_away_from_average(self):
        band = np.array([[[100, 148, 200]]], dtype=np.uint8)
        apply_contrast(band, 50, 148)

        alpha = 305 / 205
        expected = [int(np.floor(alpha * (c - 148) + 148 + 0.5)) for c in (100, 148, 200)]
        assert band[0, 0].tolist() == expected

    def test_negative_contrast_flattens(self):
        band = np.array([[[0, 128, 255]]], dtype=np.uint8)
        apply_contrast(band, -254, 128)
        # alpha = 1/509, everything collapses to the average
        assert band[0, 0].tolist() == [128, 128, 128]

    @pytest.mark.parametrize("amount", [255, -255, 300])
    def test_singularity_is_rejected(self, amount):
        with pytest.raises(SingularityError):
            apply_contrast(gray(100), amount, 100)

    def test_singularity_error_is_value_error(self):
        with pytest.raises(ValueError):
            contrast_alpha(255)


class TestSaturation:
    """Test the saturation stage."""

    def test_gray_pixels_unchanged(self):
        band = gray(90)
        apply_saturation(band, 200)
        assert np.all(band == 90)

    def test_uses_per_pixel_floor_average(self):
        band = np.array([[[10, 20, 31]]], dtype=np.uint8)  # avg = 61 // 3 = 20
        apply_saturation(band, 85)  # alpha = 340 / 170 = 2

        assert band[0, 0].tolist() == [0, 20, 42]

    def test_near_singularity_stays_in_range(self):
        band = np.array([[[10, 128, 250]]], dtype=np.uint8)
        apply_saturation(band, 254)

        assert band.dtype == np.uint8
        # per-pixel mean is 129, so the 128 channel is pushed below zero
        assert band[0, 0].tolist() == [0, 0, 255]

    def test_singularity_is_rejected(self):
        assert saturation_alpha(0) == 1.0
        with pytest.raises(SingularityError):
            apply_saturation(gray(100), 255)


class TestGamma:
    """Test the gamma stage."""

    def test_gamma_two_on_mid_value(self):
        band = gray(128, height=1, width=1)
        apply_gamma(band, 2.0)
        assert np.all(band == 64)

    def test_identity_lut(self):
        assert np.array_equal(gamma_lut(1.0), np.arange(256, dtype=np.uint8))

    def test_endpoints_fixed(self):
        for g in (0.01, 0.5, 3.0, 10.0):
            lut = gamma_lut(g)
            assert lut[0] == 0
            assert lut[255] == 255

    def test_lut_is_monotonic(self):
        lut = gamma_lut(2.2).astype(int)
        assert np.all(np.diff(lut) >= 0)

    @pytest.mark.parametrize("g", [0.0, -1.0])
    def test_non_positive_gamma_rejected(self, g):
        with pytest.raises(ValueError):
            gamma_lut(g)


class TestStageOrder:
    """The average brightness depends on running brightness first."""

    def test_contrast_first_changes_statistic(self):
        source = np.array([[[10, 10, 10], [200, 200, 200]]], dtype=np.uint8)

        # Mandated order: brightness, then the statistic
        mandated = source.copy()
        mandated_avg = average_brightness(apply_brightness(mandated, 60), 2)

        # Reversed: contrast around the source mean, then brightness
        reversed_band = source.copy()
        source_avg = int(source.astype(int).sum()) // 6
        apply_contrast(reversed_band, 100, source_avg)
        reversed_avg = average_brightness(apply_brightness(reversed_band, 60), 2)

        assert mandated_avg == 162
        assert reversed_avg == 157
        assert mandated_avg != reversed_avg
