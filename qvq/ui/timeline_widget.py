import logging

import numpy as np
import pyqtgraph as pg
from PySide6.QtCore import Qt

from qvq.animation.phases import PhaseTable
from qvq.animation.sequencer import AnimationSpec
from qvq.utils.log_util import log_io

logger = logging.getLogger(__name__)


def phase_curve(phases: PhaseTable, n_samples: int = 301) -> tuple[np.ndarray, np.ndarray]:
    """
    Eased local progress over global progress.

    Each phase ramps from 0 to 1 with its own easing; the curve restarts
    at every boundary.
    """
    xs = np.linspace(0.0, 1.0, n_samples)
    ys = np.empty_like(xs)
    for i, t in enumerate(xs):
        _, phase = phases.locate(float(t))
        ys[i] = phase.eased(float(t))
    return xs, ys


class TimelineWidget(pg.PlotWidget):
    """
    Phase table of an animation with a cursor at the current progress.
    -------------
    - set_spec(): Show the phases of an AnimationSpec.
    - set_progress(): Move the cursor (global progress 0-1).
    - clear_progress(): Hide the cursor.
    """
    def __init__(self, parent=None, spec: AnimationSpec = None):
        super().__init__(parent)
        self.plot_item = self.getPlotItem()
        self.plot_item.setLabel("bottom", "time", units="ms")
        self.plot_item.setLabel("left", "eased progress")
        self.plot_item.showGrid(x=True, y=True, alpha=0.2)
        self.getViewBox().setLimits(yMin=-0.05, yMax=1.05)
        self.setMouseEnabled(x=False, y=False)

        self._spec: AnimationSpec | None = None
        self._boundary_lines: list[pg.InfiniteLine] = []
        self._curve = self.plot_item.plot(pen=pg.mkPen(color=(0, 255, 255), width=2))
        self.cursor = pg.InfiniteLine(angle=90, movable=False,
                                      pen=pg.mkPen(color=(255, 102, 0), width=2))
        self.cursor.hide()
        self.plot_item.addItem(self.cursor)

        if spec is not None:
            self.set_spec(spec)

    @property
    def spec(self) -> AnimationSpec | None:
        return self._spec

    @log_io(level=logging.DEBUG)
    def set_spec(self, spec: AnimationSpec) -> None:
        self._spec = spec
        xs, ys = phase_curve(spec.phases)
        self._curve.setData(x=xs * spec.duration_ms, y=ys)

        for line in self._boundary_lines:
            self.plot_item.removeItem(line)
        self._boundary_lines = []
        for b in spec.phases.boundaries:
            line = pg.InfiniteLine(pos=b * spec.duration_ms, angle=90, movable=False,
                                   pen=pg.mkPen(color=(120, 120, 120), style=Qt.PenStyle.DashLine))
            self.plot_item.addItem(line)
            self._boundary_lines.append(line)

        self.setXRange(0, spec.duration_ms, padding=0.02)
        self.plot_item.setTitle(f"{spec.name}: {len(spec.phases)} phases, {spec.duration_ms:.0f} ms")

    def set_progress(self, t: float) -> None:
        if self._spec is None:
            return
        self.cursor.setValue(t * self._spec.duration_ms)
        self.cursor.show()

    def clear_progress(self) -> None:
        self.cursor.hide()
