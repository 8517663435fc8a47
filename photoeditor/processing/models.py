"""
Data models for the adjustment pipeline.
"""

import math
from dataclasses import dataclass, field, replace, asdict
from enum import Enum
from typing import Dict, Any, Optional

from .buffer import PixelBuffer


class Stage(Enum):
    """Filter stages, in pipeline order."""
    BRIGHTNESS = "brightness"
    CONTRAST = "contrast"
    SATURATION = "saturation"
    GAMMA = "gamma"


STAGE_ORDER = (Stage.BRIGHTNESS, Stage.CONTRAST, Stage.SATURATION, Stage.GAMMA)


class RunState(Enum):
    """Lifecycle of a single pipeline run."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.COMPLETED, RunState.CANCELLED, RunState.FAILED)


@dataclass(frozen=True)
class ParameterLimits:
    """Accepted ranges for adjustment parameters."""
    max_brightness: float = 255.0
    max_amount: float = 254.0   # contrast/saturation, must stay below 255
    gamma_min: float = 0.01
    gamma_max: float = 10.0

    def __post_init__(self):
        if not 0 <= self.max_amount < 255:
            raise ValueError(f"max_amount must be in [0, 255), got {self.max_amount}")
        if not 0 < self.gamma_min <= self.gamma_max:
            raise ValueError(
                f"Invalid gamma range [{self.gamma_min}, {self.gamma_max}]"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ParameterLimits':
        return cls(
            max_brightness=float(data.get('max_brightness', 255.0)),
            max_amount=float(data.get('max_amount', 254.0)),
            gamma_min=float(data.get('gamma_min', 0.01)),
            gamma_max=float(data.get('gamma_max', 10.0)),
        )


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class AdjustmentParameters:
    """
    Snapshot of the four adjustment values for one pipeline run.

    Brightness, contrast and saturation are centered at 0 and roughly span
    the 8-bit channel range. Gamma is a positive exponent where 1.0 is a no-op.
    """
    brightness: float = 0.0
    contrast: float = 0.0
    saturation: float = 0.0
    gamma: float = 1.0

    @property
    def is_identity(self) -> bool:
        return (self.brightness == 0 and self.contrast == 0
                and self.saturation == 0 and self.gamma == 1.0)

    def validated(self, limits: Optional[ParameterLimits] = None) -> 'AdjustmentParameters':
        """
        Return a copy with every value inside the accepted range.

        Contrast and saturation are clamped to an open range around the
        alpha pole at 255 so the stages never divide by zero.

        Raises:
            ValueError: If any value is not finite or gamma is not positive
        """
        limits = limits or ParameterLimits()

        for name, value in self.to_dict().items():
            if not math.isfinite(value):
                raise ValueError(f"{name} must be a finite number, got {value}")
        if self.gamma <= 0:
            raise ValueError(f"gamma must be positive, got {self.gamma}")

        return replace(
            self,
            brightness=_clamp(self.brightness, -limits.max_brightness, limits.max_brightness),
            contrast=_clamp(self.contrast, -limits.max_amount, limits.max_amount),
            saturation=_clamp(self.saturation, -limits.max_amount, limits.max_amount),
            gamma=_clamp(self.gamma, limits.gamma_min, limits.gamma_max),
        )

    def to_dict(self) -> Dict[str, float]:
        return {key: float(value) for key, value in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AdjustmentParameters':
        return cls(
            brightness=float(data.get('brightness', 0.0)),
            contrast=float(data.get('contrast', 0.0)),
            saturation=float(data.get('saturation', 0.0)),
            gamma=float(data.get('gamma', 1.0)),
        )


@dataclass
class PipelineConfig:
    """Configuration for pipeline execution."""
    rows_per_batch: int = 64        # Rows processed between cancellation checks
    stage_workers: int = 1          # Threads per stage; 1 runs bands inline
    run_workers: int = 2            # Concurrent runs in the coordinator
    limits: ParameterLimits = field(default_factory=ParameterLimits)

    def __post_init__(self):
        if self.rows_per_batch < 1:
            raise ValueError(f"rows_per_batch must be >= 1, got {self.rows_per_batch}")
        if self.stage_workers < 1 or self.run_workers < 1:
            raise ValueError("Worker counts must be >= 1")

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'PipelineConfig':
        """Build from a loaded configuration dictionary."""
        pipeline = config.get('pipeline', {}) or {}
        return cls(
            rows_per_batch=int(pipeline.get('rows_per_batch', 64)),
            stage_workers=int(pipeline.get('stage_workers', 1)),
            run_workers=int(pipeline.get('run_workers', 2)),
            limits=ParameterLimits.from_dict(config.get('limits', {}) or {}),
        )


@dataclass
class PipelineResult:
    """Outcome of one pipeline run."""
    status: RunState
    parameters: AdjustmentParameters
    buffer: Optional[PixelBuffer] = None
    average_brightness: Optional[int] = None
    duration: float = 0.0

    @property
    def is_completed(self) -> bool:
        return self.status == RunState.COMPLETED

    @property
    def is_cancelled(self) -> bool:
        return self.status == RunState.CANCELLED
