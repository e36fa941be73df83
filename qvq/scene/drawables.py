"""Renderer-independent description of what is on screen."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Sequence

from qvq.core.quaternion import Quaternion

Color = tuple[float, float, float]


def hex_color(value: int) -> Color:
    """0xRRGGBB -> (r, g, b) in 0..1."""
    return (
        ((value >> 16) & 0xFF) / 255.0,
        ((value >> 8) & 0xFF) / 255.0,
        (value & 0xFF) / 255.0,
    )


class Palette:
    CANONICAL = hex_color(0x00FF00)
    ROTATION_AXIS = hex_color(0xFF00FF)
    TARGET = hex_color(0xFFFF00)
    ELEMENT = hex_color(0x00FFFF)
    ELEMENT_INVERSE = hex_color(0xFF00AA)
    INTERMEDIATE = hex_color(0xFF6600)
    FINAL = hex_color(0x00FF00)
    BACKGROUND = hex_color(0x1A1A1A)


class DrawableKind(Enum):
    ARROW = auto()       # unit arrow along +z, posed by orientation/scale
    POINT = auto()       # sphere at position plus a line from the origin
    AXIS_LINE = auto()   # line through the origin along the unit direction in position
    FRAME = auto()       # x/y/z coordinate axes, posed by position/orientation/scale
    PROJECTION = auto()  # sphere at (x, y, 0) and a dashed drop line up to position


class Role:
    """Logical drawable roles, used as scene graph keys."""
    CANONICAL_AXIS = "canonical_axis"
    ROTATION_AXIS = "rotation_axis"
    TARGET = "target"
    ELEMENT = "element"
    ELEMENT_INVERSE = "element_inverse"
    INTERMEDIATE_PROJECTION = "intermediate_projection"
    FINAL_RESULT = "final_result"

    FIRST_FRAME = "anim.first_frame"
    SECOND_FRAME = "anim.second_frame"
    MOVING_ELEMENT = "anim.moving_element"
    MOVING_FINAL = "anim.moving_final"
    MOVING_CANONICAL = "anim.moving_canonical"
    ANIMATED_INVERSE = "anim.element_inverse"
    ANIMATED_PROJECTION = "anim.projection"


def _vec3(values: Sequence[float]) -> tuple[float, float, float]:
    x, y, z = (float(v) for v in values)
    return x, y, z


@dataclass(frozen=True)
class DrawableState:
    """
    Pose and look of one drawable.

    Vectors are stored as tuples so states compare by value; the scene
    graph relies on that to skip unchanged drawables.
    """
    kind: DrawableKind
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    orientation: Quaternion = field(default_factory=Quaternion.identity)
    scale: float = 1.0
    color: Color = (1.0, 1.0, 1.0)
    visible: bool = True
    opacity: float = 1.0
    size: float = 0.12

    def __post_init__(self):
        object.__setattr__(self, "position", _vec3(self.position))
        object.__setattr__(self, "color", _vec3(self.color))
        object.__setattr__(self, "scale", float(self.scale))
        object.__setattr__(self, "opacity", float(self.opacity))

    def with_(self, **changes) -> DrawableState:
        return replace(self, **changes)

    def hidden(self) -> DrawableState:
        return replace(self, visible=False)
