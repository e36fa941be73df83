"""Scene layer: drawable descriptions and the role-keyed scene graph."""

from qvq.scene.drawables import DrawableKind, DrawableState, Palette, Role
from qvq.scene.scene_graph import (
    ANIMATION_LAYER,
    STATIC_LAYER,
    DrawableSink,
    SceneDiff,
    SceneGraph,
)
from qvq.scene.static_scene import static_scene

__all__ = [
    "ANIMATION_LAYER",
    "STATIC_LAYER",
    "DrawableKind",
    "DrawableSink",
    "DrawableState",
    "Palette",
    "Role",
    "SceneDiff",
    "SceneGraph",
    "static_scene",
]
