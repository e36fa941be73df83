from dataclasses import dataclass
from typing import Any, Callable

from qvq.core.angles import ANGLE_PLACEHOLDER


@dataclass
class StatusField:
    """
    A status bar field: label, format, formatter function and value.

    :ivar label: The label shown before the value.
    :type label: str
    :ivar fmt: Format string used by the default formatter.
    :type fmt: str
    :ivar formatter: Callable turning the value into text. Defaults to
        ``fmt.format(value)``.
    :type formatter: Callable[[Any], str]
    :ivar value: Current value of the field.
    :ivar visible: Whether the field gets a label in the status bar.
    :type visible: bool
    """
    label: str
    fmt: str = "{}"
    formatter: Callable[[Any], str] = None
    value: Any = None
    visible: bool = True

    def __post_init__(self):
        if self.formatter is None:
            self.formatter = lambda v, fmt=self.fmt: fmt.format(v)

    def text(self) -> str:
        return f"{self.label}: {self.formatter(self.value)}"


def format_readout(value: str | None) -> str:
    """Angle readouts arrive pre-formatted; None means nothing to show."""
    return ANGLE_PLACEHOLDER if value is None else value


def format_progress(progress: float | None) -> str:
    """
    Animation progress in percent.
    None -> idle
    """
    if progress is None:
        return "idle"
    return f"{100.0 * progress:.0f}%"


# Adding a field here also needs an update call in MainWindow.
STATUS_FIELDS = {
    "angle_source_intermediate": StatusField(label="∠(Q, _Q)", formatter=format_readout),
    "angle_source_final": StatusField(label="∠(Q, Q')", formatter=format_readout),
    "angle_intermediate_final": StatusField(label="∠(_Q, Q')", formatter=format_readout),
    "mode": StatusField(label="Mode", fmt="{}", value="pseudo"),
    "animation": StatusField(label="Animation", formatter=format_progress),
}
