"""
Tests for pixel buffers and adjustment parameter models.
"""

import math

import pytest
import numpy as np

from photoeditor.processing import (
    PixelBuffer, InvalidBufferError, AdjustmentParameters, ParameterLimits,
    PipelineConfig, RunState
)


class TestPixelBuffer:
    """Test PixelBuffer construction and conversions."""

    def test_shape_must_match_dimensions(self):
        with pytest.raises(InvalidBufferError):
            PixelBuffer(width=3, height=2, pixels=np.zeros((3, 2, 3), dtype=np.uint8))

    def test_rejects_non_uint8(self):
        with pytest.raises(InvalidBufferError):
            PixelBuffer(width=1, height=1, pixels=np.zeros((1, 1, 3), dtype=np.float32))

    def test_rejects_empty_dimensions(self):
        with pytest.raises(InvalidBufferError):
            PixelBuffer(width=0, height=1, pixels=np.zeros((1, 0, 3), dtype=np.uint8))

    def test_from_array_clips_and_converts(self):
        buffer = PixelBuffer.from_array(np.array([[[-5.0, 127.6, 300.0]]]))

        assert buffer.size == (1, 1)
        assert buffer.pixels.dtype == np.uint8
        assert buffer.pixels[0, 0].tolist() == [0, 128, 255]

    def test_from_array_rejects_grayscale(self):
        with pytest.raises(InvalidBufferError):
            PixelBuffer.from_array(np.zeros((4, 4)))

    def test_packed_conversion(self):
        packed = [0x102030, 0xFFFFFF, 0x000000, 0xFF00FF80]
        buffer = PixelBuffer.from_packed(packed, width=2, height=2)

        assert buffer.pixels[0, 0].tolist() == [0x10, 0x20, 0x30]
        assert buffer.pixels[1, 1].tolist() == [0x00, 0xFF, 0x80]  # alpha byte dropped
        assert buffer.to_packed().tolist() == [0x102030, 0xFFFFFF, 0x000000, 0x00FF80]

    def test_packed_count_must_match(self):
        with pytest.raises(InvalidBufferError):
            PixelBuffer.from_packed([0, 1, 2], width=2, height=2)

    def test_copy_is_independent(self):
        original = PixelBuffer.filled(2, 2, (10, 20, 30))
        clone = original.copy()
        clone.pixels[0, 0] = (0, 0, 0)

        assert original.pixels[0, 0].tolist() == [10, 20, 30]
        assert clone != original

    def test_read_only_copy(self):
        original = PixelBuffer.filled(2, 2, (10, 20, 30))
        frozen = original.read_only()

        assert not frozen.is_writeable
        assert frozen == original
        with pytest.raises(ValueError):
            frozen.pixels[0, 0] = (1, 2, 3)

        # Copies of a read-only buffer are writeable again
        assert frozen.copy().is_writeable


class TestAdjustmentParameters:
    """Test parameter validation and clamping."""

    def test_defaults_are_identity(self):
        assert AdjustmentParameters().is_identity
        assert not AdjustmentParameters(gamma=1.5).is_identity

    @pytest.mark.parametrize("field_name", ["contrast", "saturation"])
    def test_amount_at_pole_is_clamped(self, field_name):
        params = AdjustmentParameters(**{field_name: 255.0}).validated()
        assert getattr(params, field_name) == 254.0

        params = AdjustmentParameters(**{field_name: -1000.0}).validated()
        assert getattr(params, field_name) == -254.0

    def test_brightness_and_gamma_clamped(self):
        params = AdjustmentParameters(brightness=400, gamma=50).validated()
        assert params.brightness == 255.0
        assert params.gamma == 10.0

        params = AdjustmentParameters(gamma=0.0001).validated()
        assert params.gamma == 0.01

    def test_in_range_values_unchanged(self):
        params = AdjustmentParameters(brightness=-20, contrast=50, saturation=-30, gamma=2.0)
        assert params.validated() == params

    @pytest.mark.parametrize("gamma", [0.0, -1.0])
    def test_non_positive_gamma_rejected(self, gamma):
        with pytest.raises(ValueError):
            AdjustmentParameters(gamma=gamma).validated()

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_rejected(self, value):
        with pytest.raises(ValueError):
            AdjustmentParameters(saturation=value).validated()

    def test_custom_limits(self):
        limits = ParameterLimits(max_amount=100.0, gamma_min=0.5, gamma_max=3.0)
        params = AdjustmentParameters(contrast=200, gamma=5).validated(limits)

        assert params.contrast == 100.0
        assert params.gamma == 3.0

    def test_limits_must_exclude_pole(self):
        with pytest.raises(ValueError):
            ParameterLimits(max_amount=255.0)

    def test_dict_round_trip(self):
        params = AdjustmentParameters(brightness=5, contrast=-10, saturation=15, gamma=0.8)
        assert AdjustmentParameters.from_dict(params.to_dict()) == params
        assert AdjustmentParameters.from_dict({}) == AdjustmentParameters()


class TestPipelineConfig:
    """Test pipeline configuration models."""

    def test_from_dict(self):
        config = PipelineConfig.from_dict({
            'pipeline': {'rows_per_batch': 8, 'stage_workers': 3, 'run_workers': 1},
            'limits': {'max_amount': 200.0},
        })

        assert config.rows_per_batch == 8
        assert config.stage_workers == 3
        assert config.run_workers == 1
        assert config.limits.max_amount == 200.0
        assert config.limits.gamma_max == 10.0

    def test_from_empty_dict_uses_defaults(self):
        assert PipelineConfig.from_dict({}) == PipelineConfig()

    def test_rejects_zero_batch(self):
        with pytest.raises(ValueError):
            PipelineConfig(rows_per_batch=0)

    def test_terminal_states(self):
        assert RunState.COMPLETED.is_terminal
        assert RunState.CANCELLED.is_terminal
        assert RunState.FAILED.is_terminal
        assert not RunState.RUNNING.is_terminal
        assert not RunState.PENDING.is_terminal
