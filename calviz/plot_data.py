"""
Plot-data preparation for the Calibration Report Visualizer.

Turns the selected variables of a dataset into renderable line series
for one pane (error or value) plus the bounding box used to fit the
view.  Absent cells become ``NaN`` in the y array so matplotlib breaks
the line there instead of bridging the gap.  Error magnitudes are
plotted as ``abs(error)``; values are plotted as-is.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple

import numpy as np

from .colors import Color, ColorAssignment
from .constants import FIT_PADDING
from .data_model import CalibrationDataset, SeriesKind


@dataclass(frozen=True)
class PlotBounds:
    """Axis-aligned data rectangle ``[x_min, x_max] × [y_min, y_max]``."""
    x_min: float
    x_max: float
    y_min: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.x_min + self.x_max) / 2.0, (self.y_min + self.y_max) / 2.0)

    def padded(self, fraction: float = FIT_PADDING) -> "PlotBounds":
        """Grow each side by *fraction* of the span.

        Degenerate spans (a single iteration or a constant series) are
        widened to a unit-scale window so the transform stays invertible.
        """
        def _pad(lo, hi):
            span = hi - lo
            if span <= 0:
                half = max(abs(lo) * 0.5, 0.5)
                return lo - half, hi + half
            return lo - span * fraction, hi + span * fraction

        x0, x1 = _pad(self.x_min, self.x_max)
        y0, y1 = _pad(self.y_min, self.y_max)
        return PlotBounds(x0, x1, y0, y1)

    def union(self, other: "PlotBounds") -> "PlotBounds":
        return PlotBounds(
            min(self.x_min, other.x_min), max(self.x_max, other.x_max),
            min(self.y_min, other.y_min), max(self.y_max, other.y_max),
        )


@dataclass(frozen=True, eq=False)
class PlotSeries:
    """One variable's line in one pane.

    Parameters
    ----------
    name : str
        Variable name (legend label).
    color : Color
    kind : SeriesKind
    x : numpy.ndarray
        Iteration indices, full length.
    y : numpy.ndarray
        Magnitudes, ``NaN`` where the cell was absent.
    """
    name: str
    color: Color
    kind: SeriesKind
    x: np.ndarray
    y: np.ndarray

    @property
    def present_mask(self) -> np.ndarray:
        return np.isfinite(self.y)

    @property
    def n_points(self) -> int:
        return int(np.count_nonzero(self.present_mask))

    def points(self) -> Iterator[Tuple[int, float]]:
        """Present ``(iteration, magnitude)`` pairs in iteration order."""
        mask = self.present_mask
        for xi, yi in zip(self.x[mask], self.y[mask]):
            yield int(xi), float(yi)

    def bounds(self) -> PlotBounds:
        mask = self.present_mask
        xs = self.x[mask]
        ys = self.y[mask]
        return PlotBounds(float(xs.min()), float(xs.max()),
                          float(ys.min()), float(ys.max()))


@dataclass(frozen=True)
class PlotData:
    """All series of one pane plus their overall bounding box."""
    kind: SeriesKind
    series: Tuple[PlotSeries, ...]
    bounds: Optional[PlotBounds]

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(s.name for s in self.series)

    def __bool__(self) -> bool:
        return bool(self.series)


def _magnitudes(values, kind: SeriesKind) -> np.ndarray:
    y = np.array(
        [np.nan if v is None else v for v in values], dtype=float,
    )
    if kind is SeriesKind.ERROR:
        y = np.abs(y)
    return y


def build_plot_data(
    dataset: CalibrationDataset,
    selection: Sequence[str],
    colors: ColorAssignment,
    kind: SeriesKind,
) -> PlotData:
    """Build the line series of *kind* for the selected variables.

    Parameters
    ----------
    dataset : CalibrationDataset
    selection : sequence of str
        Ordered variable names; output order (and legend order) follows it.
    colors : ColorAssignment
        Assignment derived from the same dataset.
    kind : SeriesKind
        ``ERROR`` for the convergence pane, ``VALUE`` for the evolution pane.

    Returns
    -------
    PlotData
        Names unknown to the dataset, lacking the requested series, or
        with no present points are omitted.  ``bounds`` is ``None`` when
        nothing remains.
    """
    x = np.array(dataset.iterations, dtype=float)
    series = []
    bounds: Optional[PlotBounds] = None
    seen = set()

    for name in selection:
        if name in seen or name not in dataset:
            continue
        seen.add(name)
        values = dataset.series(name).get(kind)
        if values is None:
            continue
        y = _magnitudes(values, kind)
        if not np.any(np.isfinite(y)):
            continue
        line = PlotSeries(
            name=name, color=colors.color_for(name), kind=kind, x=x, y=y,
        )
        series.append(line)
        line_bounds = line.bounds()
        bounds = line_bounds if bounds is None else bounds.union(line_bounds)

    return PlotData(kind=kind, series=tuple(series), bounds=bounds)
