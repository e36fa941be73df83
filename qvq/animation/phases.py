"""Phase tables partitioning an animation's global progress."""
from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import Sequence

from qvq.animation.easing import EasingFunction, ease_in_out_quad

_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Phase:
    name: str
    start: float
    end: float
    easing: EasingFunction = field(default=ease_in_out_quad, compare=False)

    @property
    def span(self) -> float:
        return self.end - self.start

    def contains(self, t: float, last: bool = False) -> bool:
        """Closed at entry, open at exit; the last phase is also closed at its end."""
        if last:
            return self.start <= t <= self.end
        return self.start <= t < self.end

    def local_progress(self, t: float) -> float:
        u = (t - self.start) / self.span
        return min(max(u, 0.0), 1.0)

    def eased(self, t: float) -> float:
        return self.easing(self.local_progress(t))


class PhaseTable:
    """
    Ordered phases covering [0, 1] without gaps or overlaps.

    :raises ValueError: if the phases do not partition [0, 1].
    """

    def __init__(self, phases: Sequence[Phase]):
        self._phases = tuple(phases)
        self._validate()
        self._starts = [p.start for p in self._phases]

    @classmethod
    def from_boundaries(cls, boundaries: Sequence[float],
                        names: Sequence[str] | None = None,
                        easing: EasingFunction = ease_in_out_quad) -> PhaseTable:
        """
        Build a table from the interior boundaries, e.g. ``[0.33, 0.67]``
        gives three phases.
        """
        edges = [0.0, *[float(b) for b in boundaries], 1.0]
        count = len(edges) - 1
        if names is None:
            names = [f"phase{i + 1}" for i in range(count)]
        if len(names) != count:
            raise ValueError(f"expected {count} phase names, got {len(names)}")
        return cls([Phase(n, edges[i], edges[i + 1], easing) for i, n in enumerate(names)])

    def _validate(self) -> None:
        if not self._phases:
            raise ValueError("phase table is empty")
        if abs(self._phases[0].start) > _TOLERANCE:
            raise ValueError(f"first phase must start at 0, got {self._phases[0].start}")
        if abs(self._phases[-1].end - 1.0) > _TOLERANCE:
            raise ValueError(f"last phase must end at 1, got {self._phases[-1].end}")
        for phase in self._phases:
            if phase.end <= phase.start:
                raise ValueError(f"phase {phase.name!r} is empty or reversed")
        for prev, cur in zip(self._phases, self._phases[1:]):
            if abs(prev.end - cur.start) > _TOLERANCE:
                kind = "gap" if cur.start > prev.end else "overlap"
                raise ValueError(f"{kind} between phases {prev.name!r} and {cur.name!r}")

    @property
    def phases(self) -> tuple[Phase, ...]:
        return self._phases

    @property
    def boundaries(self) -> list[float]:
        return [p.end for p in self._phases[:-1]]

    def __len__(self) -> int:
        return len(self._phases)

    def __iter__(self):
        return iter(self._phases)

    def __getitem__(self, index: int) -> Phase:
        return self._phases[index]

    def locate(self, t: float) -> tuple[int, Phase]:
        """
        Phase containing global progress *t* (clamped to [0, 1]).

        A boundary value belongs to the phase it starts; t == 1 belongs to
        the last phase.
        """
        t = min(max(t, 0.0), 1.0)
        index = bisect.bisect_right(self._starts, t) - 1
        index = min(max(index, 0), len(self._phases) - 1)
        return index, self._phases[index]
