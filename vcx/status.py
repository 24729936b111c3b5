from dataclasses import dataclass
from typing import Any, Callable

from vcx.core.orientation_math import format_angle


@dataclass
class StatusField:
    """
    A labelled value shown in the status bar.

    :ivar label: Text shown before the value.
    :ivar fmt: Format string used when no formatter is given.
    :ivar formatter: Callable turning the value into text. Defaults to fmt.format.
    :ivar value: Current value.
    :ivar visible: Whether a label is created for the field.
    """
    label: str
    fmt: str = "{}"
    formatter: Callable[[Any], str] = None
    value: Any = 0.0
    visible: bool = True

    def __post_init__(self):
        if self.formatter is None:
            self.formatter = lambda v, fmt=self.fmt: fmt.format(v)

    def text(self) -> str:
        return f"{self.label}: {self.formatter(self.value)}"


def format_aligned(aligned: bool) -> str:
    return "ALIGNED" if aligned else "--"


def format_level(level: bool) -> str:
    return "LEVEL" if level else "TILTED"


def angle_formatter(precision: int = 1, fmt: str = 'degrees') -> Callable[[float], str]:
    """Formatter for angle fields honouring the display settings."""
    return lambda v: format_angle(v, precision, fmt)


# If you add a field here, feed it from MainWindow._update_status.
STATUS_FIELDS = {
    "pitch": StatusField(label="P", formatter=angle_formatter()),
    "roll": StatusField(label="R", formatter=angle_formatter()),
    "yaw": StatusField(label="Y", formatter=angle_formatter()),
    "deviation": StatusField(label="Dev", formatter=angle_formatter(2)),
    "aligned": StatusField(label="Align", formatter=format_aligned, value=False),
    "roll_angle": StatusField(label="Level", fmt="{:.1f}°"),
    "level": StatusField(label="State", formatter=format_level, value=False),
}
