"""Scene graph keyed by logical role."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Protocol

from qvq.scene.drawables import DrawableState

logger = logging.getLogger(__name__)

STATIC_LAYER = "static"
ANIMATION_LAYER = "animation"


class DrawableSink(Protocol):
    """Receiver of drawable changes (e.g. the VTK viewer)."""

    def add(self, role: str, state: DrawableState) -> None: ...

    def replace(self, role: str, state: DrawableState) -> None: ...

    def remove(self, role: str) -> None: ...


@dataclass(frozen=True)
class SceneDiff:
    added: tuple[str, ...] = ()
    replaced: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()

    @property
    def empty(self) -> bool:
        return not (self.added or self.replaced or self.removed)


@dataclass
class _Node:
    layer: str
    state: DrawableState = field(compare=False)


class SceneGraph:
    """
    Currently displayed drawables, one per role.

    Roles are grouped into layers. The static layer is rebuilt on every
    recompute pass with ``sync``; the animation layer is driven frame by
    frame with ``update`` and cleared when no longer needed. Every change
    is forwarded to the sink, unchanged states are not.
    """

    def __init__(self, sink: DrawableSink | None = None) -> None:
        self._sink = sink
        self._nodes: dict[str, _Node] = {}

    # =====================================================
    # Queries
    # =====================================================

    def get(self, role: str) -> DrawableState | None:
        node = self._nodes.get(role)
        return node.state if node else None

    def layer_of(self, role: str) -> str | None:
        node = self._nodes.get(role)
        return node.layer if node else None

    def roles(self, layer: str | None = None) -> list[str]:
        return [r for r, n in self._nodes.items() if layer is None or n.layer == layer]

    def __contains__(self, role: str) -> bool:
        return role in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    # =====================================================
    # Mutation
    # =====================================================

    def set_sink(self, sink: DrawableSink | None) -> None:
        """Attach a sink and push every existing drawable to it."""
        self._sink = sink
        if sink is None:
            return
        for role, node in self._nodes.items():
            sink.add(role, node.state)

    def sync(self, states: Mapping[str, DrawableState], layer: str = STATIC_LAYER) -> SceneDiff:
        """
        Make *layer* hold exactly *states*.

        The whole diff is computed before anything is sent to the sink;
        removals go out first so no stale handle outlives the pass.
        """
        removed = tuple(r for r in self.roles(layer) if r not in states)
        diff = self._diff(states, layer, removed)
        self._apply(diff, states, layer)
        return diff

    def update(self, states: Mapping[str, DrawableState], layer: str = ANIMATION_LAYER) -> SceneDiff:
        """Add or replace *states* in *layer*, leaving its other roles alone."""
        diff = self._diff(states, layer, ())
        self._apply(diff, states, layer)
        return diff

    def remove(self, roles: Iterable[str]) -> SceneDiff:
        removed = tuple(r for r in roles if r in self._nodes)
        diff = SceneDiff(removed=removed)
        self._apply(diff, {}, None)
        return diff

    def clear_layer(self, layer: str) -> SceneDiff:
        return self.remove(self.roles(layer))

    def clear(self) -> SceneDiff:
        return self.remove(list(self._nodes))

    # =====================================================
    # Internals
    # =====================================================

    def _diff(self, states: Mapping[str, DrawableState], layer: str,
              removed: tuple[str, ...]) -> SceneDiff:
        added: list[str] = []
        replaced: list[str] = []
        for role, state in states.items():
            node = self._nodes.get(role)
            if node is None:
                added.append(role)
            elif node.state != state or node.layer != layer:
                replaced.append(role)
        return SceneDiff(tuple(added), tuple(replaced), removed)

    def _apply(self, diff: SceneDiff, states: Mapping[str, DrawableState], layer: str | None) -> None:
        if diff.empty:
            return

        for role in diff.removed:
            del self._nodes[role]
        for role in diff.added + diff.replaced:
            self._nodes[role] = _Node(layer=layer, state=states[role])

        if self._sink is not None:
            for role in diff.removed:
                self._sink.remove(role)
            for role in diff.added:
                self._sink.add(role, states[role])
            for role in diff.replaced:
                self._sink.replace(role, states[role])

        logger.debug("scene diff (%s): +%s ~%s -%s",
                     layer, list(diff.added), list(diff.replaced), list(diff.removed))
