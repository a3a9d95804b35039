"""Unicode sparklines for score series."""

from typing import Sequence

BARS = "▁▂▃▄▅▆▇█"


def render_sparkline(values: Sequence[float]) -> str:
    """
    One bar per value, scaled between the series minimum and maximum.

    A flat series renders as the lowest bar throughout.

    >>> render_sparkline([0, 50, 100])
    '▁▅█'
    """
    if not values:
        return ""
    low, high = min(values), max(values)
    spread = (high - low) or 1
    top = len(BARS) - 1
    return "".join(BARS[min(int((v - low) / spread * top + 0.5), top)] for v in values)
