"""Parameter model: the five scalar inputs of the visualization."""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields

import numpy as np

logger = logging.getLogger(__name__)


DEFAULT_THETA = 0.0
DEFAULT_AXIS = (1.0, 0.0)
DEFAULT_TARGET = (2.0, 1.0)


@dataclass(frozen=True)
class ParameterSnapshot:
    """Immutable copy of the parameters at one point in time."""
    theta: float
    dx: float
    dy: float
    vx: float
    vy: float

    @property
    def axis(self) -> np.ndarray:
        return np.array([self.dx, self.dy], dtype=float)

    @property
    def target(self) -> np.ndarray:
        return np.array([self.vx, self.vy], dtype=float)


@dataclass
class Parameters:
    """
    Mutable parameter record owned by the controller.

    :ivar theta: Rotation angle in degrees (any real value).
    :ivar dx: X component of the rotation axis D (need not be unit).
    :ivar dy: Y component of the rotation axis D.
    :ivar vx: X component of the target point V.
    :ivar vy: Y component of the target point V.
    """
    theta: float = DEFAULT_THETA
    dx: float = DEFAULT_AXIS[0]
    dy: float = DEFAULT_AXIS[1]
    vx: float = DEFAULT_TARGET[0]
    vy: float = DEFAULT_TARGET[1]

    @property
    def axis(self) -> np.ndarray:
        return np.array([self.dx, self.dy], dtype=float)

    @property
    def target(self) -> np.ndarray:
        return np.array([self.vx, self.vy], dtype=float)

    @classmethod
    def names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def update(self, **values: float) -> bool:
        """
        Set one or more parameters in place.

        :return: True if any value actually changed.
        :raise ValueError: For an unknown parameter name.
        """
        unknown = set(values) - set(self.names())
        if unknown:
            raise ValueError(f"Unknown parameter(s): {', '.join(sorted(unknown))}")

        changed = False
        for name, value in values.items():
            value = float(value)
            if getattr(self, name) != value:
                setattr(self, name, value)
                changed = True
        return changed

    def reset(self) -> None:
        """Restore the defaults (θ=0, D=(1, 0), V=(2, 1))."""
        self.theta = DEFAULT_THETA
        self.dx, self.dy = DEFAULT_AXIS
        self.vx, self.vy = DEFAULT_TARGET
        logger.debug("Parameters reset to defaults")

    def snapshot(self) -> ParameterSnapshot:
        return ParameterSnapshot(self.theta, self.dx, self.dy, self.vx, self.vy)


@dataclass(frozen=True)
class ParameterRange:
    """
    Slider range of one parameter.

    Sliders are integer-valued; a parameter is shown on the slider as
    ``round(value * slider_scale)``.
    """
    name: str
    label: str
    minimum: float
    maximum: float
    slider_scale: int = 1
    fmt: str = "{:.2f}"

    def clamp(self, value: float) -> float:
        return max(self.minimum, min(self.maximum, float(value)))

    def to_slider(self, value: float) -> int:
        return int(round(self.clamp(value) * self.slider_scale))

    def from_slider(self, position: int) -> float:
        return self.clamp(position / self.slider_scale)

    def format(self, value: float) -> str:
        return self.fmt.format(value)


PARAMETER_RANGES: dict[str, ParameterRange] = {
    "theta": ParameterRange("theta", "θ", -180.0, 180.0, slider_scale=1, fmt="{:.0f}°"),
    "dx": ParameterRange("dx", "D.x", -1.0, 1.0, slider_scale=100),
    "dy": ParameterRange("dy", "D.y", -1.0, 1.0, slider_scale=100),
    "vx": ParameterRange("vx", "V.x", -3.0, 3.0, slider_scale=100),
    "vy": ParameterRange("vy", "V.y", -3.0, 3.0, slider_scale=100),
}
