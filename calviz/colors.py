"""
Deterministic variable colours for the Calibration Report Visualizer.

Every variable of a dataset gets one colour, used identically by the
variable list, both plot panes and exported images.  Colours come from
``VARIABLE_PALETTE`` indexed by the variable's position in the sorted
name list.  Once the palette is exhausted it wraps, and each wrap shifts
the HLS lightness (lighter on odd wraps, darker on even ones) so wrapped
names remain distinguishable from their palette twin.  Lightness is kept
within [0.12, 0.92]; a shift that would leave that range lowers the
saturation by twice the overshoot instead, down to 10 % of the original.
The base palette plus eight wraps (108 variables with the default
palette) are all distinct; past that, heavily desaturated colours can
coincide.
"""

import colorsys
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Sequence, Tuple

from matplotlib.colors import to_rgb

from .constants import VARIABLE_PALETTE, VARIABLE_LIGHTNESS_STEP
from .data_model import CalibrationDataset

_MIN_LIGHTNESS = 0.12
_MAX_LIGHTNESS = 0.92


@dataclass(frozen=True)
class Color:
    """8-bit RGB colour."""
    r: int
    g: int
    b: int

    @classmethod
    def from_hex(cls, text: str) -> "Color":
        r, g, b = to_rgb(text)
        return cls(round(r * 255), round(g * 255), round(b * 255))

    @property
    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    @property
    def rgb_float(self) -> Tuple[float, float, float]:
        """Colour as matplotlib-style 0–1 floats."""
        return (self.r / 255.0, self.g / 255.0, self.b / 255.0)


def _shift_lightness(base: Color, wrap: int) -> Color:
    """Return *base* with its lightness shifted for the *wrap*-th cycle."""
    if wrap == 0:
        return base
    h, l, s = colorsys.rgb_to_hls(*base.rgb_float)
    # wrap 1 → +1 step, wrap 2 → -1 step, wrap 3 → +2 steps, ...
    steps = (wrap + 1) // 2
    sign = 1.0 if wrap % 2 == 1 else -1.0
    target = l + sign * steps * VARIABLE_LIGHTNESS_STEP
    l = min(_MAX_LIGHTNESS, max(_MIN_LIGHTNESS, target))
    overshoot = abs(target - l)
    if overshoot:
        s *= max(0.1, 1.0 - 2.0 * overshoot)
    r, g, b = colorsys.hls_to_rgb(h, l, s)
    return Color(round(r * 255), round(g * 255), round(b * 255))


def palette_color(index: int, palette: Sequence[str] = VARIABLE_PALETTE) -> Color:
    """Colour for the *index*-th variable in canonical order."""
    if index < 0:
        raise ValueError(f"palette index must be non-negative, got {index}")
    base = Color.from_hex(palette[index % len(palette)])
    return _shift_lightness(base, index // len(palette))


class ColorAssignment:
    """Immutable name → colour mapping derived from one dataset.

    Build with :meth:`for_dataset`; the mapping never changes afterwards.
    A theme toggle or reload derives a fresh assignment instead.
    """

    def __init__(self, colors: Mapping[str, Color]):
        self._colors = MappingProxyType(dict(colors))

    @classmethod
    def for_names(cls, names, palette: Sequence[str] = VARIABLE_PALETTE):
        ordered = sorted(set(names))
        return cls({
            name: palette_color(i, palette) for i, name in enumerate(ordered)
        })

    @classmethod
    def for_dataset(cls, dataset: CalibrationDataset,
                    palette: Sequence[str] = VARIABLE_PALETTE):
        return cls.for_names(dataset.variable_names, palette)

    def color_for(self, name: str) -> Color:
        """Colour of *name*; ``KeyError`` for names outside the dataset."""
        try:
            return self._colors[name]
        except KeyError:
            raise KeyError(f"No colour assigned to unknown variable {name!r}") from None

    def as_dict(self) -> Dict[str, Color]:
        return dict(self._colors)

    def __contains__(self, name) -> bool:
        return name in self._colors

    def __len__(self) -> int:
        return len(self._colors)


def color_for(dataset: CalibrationDataset, name: str) -> Color:
    """Colour of *name* within *dataset*.

    Depends only on the sorted name list, so repeated calls for the same
    dataset always agree with each other and with ``ColorAssignment``.
    """
    ordered = dataset.sorted_names()
    if name not in dataset:
        raise KeyError(f"No colour assigned to unknown variable {name!r}")
    return palette_color(ordered.index(name))
