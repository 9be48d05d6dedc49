"""
Interactive view state for the Calibration Report Visualizer.

``ViewState`` is the single owner of session UI state: the loaded
dataset and its colour assignment, the selection set, filter settings,
one ``ViewTransform`` per plot pane, and the theme.  The GUI translates
widget events into calls on this object; nothing else mutates it.

Phases::

    EMPTY ──load──▶ LOADED ──user action──▶ INTERACTING ─┐
      ▲               ▲                        ▲         │
      └──────────── load (any phase) ──────────┴─────────┘

Selection changes refit both panes; pan / zoom touch one pane's
transform only.  Background loading uses tickets: ``begin_load`` hands
out a ticket, and only the newest non-cancelled ticket may apply its
result via ``complete_load``; anything else is dropped untouched.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from .colors import ColorAssignment
from .config import AppConfig, Theme, get_config
from .data_model import CalibrationDataset, SeriesKind
from .errors import InvalidArgument
from .filter_engine import matching_variables, parse_filter_terms, select_variables
from .plot_data import PlotBounds, PlotData, build_plot_data

logger = logging.getLogger(__name__)

# Panes correspond one-to-one with series kinds
Pane = SeriesKind


class ViewPhase(Enum):
    EMPTY = "empty"
    LOADED = "loaded"
    INTERACTING = "interacting"


# Fit window used before any data is plotted in a pane
_DEFAULT_BOUNDS = PlotBounds(0.0, 1.0, 0.0, 1.0)


@dataclass(frozen=True)
class ViewTransform:
    """Pan / zoom state of one pane.

    The visible window is the fit window scaled by ``1 / zoom`` on each
    axis around ``(center_x, center_y)``.  ``zoom > 1`` magnifies.

    Parameters
    ----------
    fit : PlotBounds
        Padded bounding box of the pane's series (fit-to-selection).
    zoom_x, zoom_y : float
        Independent zoom factors.
    center_x, center_y : float
        Centre of the visible window in data coordinates.
    """
    fit: PlotBounds
    zoom_x: float = 1.0
    zoom_y: float = 1.0
    center_x: float = 0.5
    center_y: float = 0.5

    @classmethod
    def fit_to(cls, bounds: Optional[PlotBounds]) -> "ViewTransform":
        fit = bounds.padded() if bounds is not None else _DEFAULT_BOUNDS
        cx, cy = fit.center
        return cls(fit=fit, center_x=cx, center_y=cy)

    @property
    def is_fit(self) -> bool:
        cx, cy = self.fit.center
        return (self.zoom_x == 1.0 and self.zoom_y == 1.0
                and self.center_x == cx and self.center_y == cy)

    def visible_bounds(self) -> PlotBounds:
        half_w = self.fit.width / self.zoom_x / 2.0
        half_h = self.fit.height / self.zoom_y / 2.0
        return PlotBounds(
            self.center_x - half_w, self.center_x + half_w,
            self.center_y - half_h, self.center_y + half_h,
        )

    def panned(self, dx: float, dy: float) -> "ViewTransform":
        """Shift the window by ``(dx, dy)`` data units."""
        return replace(self, center_x=self.center_x + dx,
                       center_y=self.center_y + dy)

    def zoomed(self, factor, anchor: Optional[Tuple[float, float]] = None,
               ) -> "ViewTransform":
        """Zoom by *factor* keeping *anchor* fixed on screen.

        *factor* is a number (both axes) or an ``(fx, fy)`` pair; values
        above 1 zoom in.  *anchor* defaults to the window centre.
        """
        if isinstance(factor, (tuple, list)):
            fx, fy = factor
        else:
            fx = fy = factor
        if fx <= 0 or fy <= 0:
            raise InvalidArgument(f"Zoom factor must be positive, got {factor}")
        ax, ay = anchor if anchor is not None else (self.center_x, self.center_y)
        return replace(
            self,
            zoom_x=self.zoom_x * fx,
            zoom_y=self.zoom_y * fy,
            center_x=ax + (self.center_x - ax) / fx,
            center_y=ay + (self.center_y - ay) / fy,
        )

    def to_display(self, x: float, y: float, width: float, height: float,
                   ) -> Tuple[float, float]:
        """Map data ``(x, y)`` to pixel coordinates in a *width*×*height*
        viewport (origin top-left, y growing downward)."""
        vb = self.visible_bounds()
        px = (x - vb.x_min) / vb.width * width
        py = (vb.y_max - y) / vb.height * height
        return px, py

    def from_display(self, px: float, py: float, width: float, height: float,
                     ) -> Tuple[float, float]:
        """Inverse of :meth:`to_display`."""
        vb = self.visible_bounds()
        x = vb.x_min + px / width * vb.width
        y = vb.y_max - py / height * vb.height
        return x, y


@dataclass(frozen=True)
class PaneSnapshot:
    """Consistent, read-only capture of one pane for export."""
    pane: Pane
    theme: Theme
    dataset: CalibrationDataset
    plot_data: PlotData
    visible_bounds: PlotBounds


class ViewState:
    """Session state machine; see module docstring.

    Parameters
    ----------
    config : AppConfig, optional
        Startup configuration (initial theme and max-vars).  Defaults to
        the process-wide config.
    """

    def __init__(self, config: Optional[AppConfig] = None):
        config = config or get_config()
        self._phase = ViewPhase.EMPTY
        self._dataset: Optional[CalibrationDataset] = None
        self._colors: Optional[ColorAssignment] = None
        self._selection: set = set()
        self._filter_text = ""
        self._max_vars = config.max_vars
        self._theme = config.theme
        self._transforms: Dict[Pane, ViewTransform] = {
            pane: ViewTransform.fit_to(None) for pane in Pane
        }
        self._next_ticket = 1
        self._pending_ticket: Optional[int] = None

    # ── Read-only accessors ──────────────────────────────────────────

    @property
    def phase(self) -> ViewPhase:
        return self._phase

    @property
    def dataset(self) -> Optional[CalibrationDataset]:
        return self._dataset

    @property
    def colors(self) -> Optional[ColorAssignment]:
        return self._colors

    @property
    def selection(self) -> FrozenSet[str]:
        return frozenset(self._selection)

    @property
    def filter_text(self) -> str:
        return self._filter_text

    @property
    def filter_terms(self) -> List[str]:
        return parse_filter_terms(self._filter_text)

    @property
    def max_vars(self) -> int:
        return self._max_vars

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def is_loading(self) -> bool:
        return self._pending_ticket is not None

    def transform(self, pane: Pane) -> ViewTransform:
        return self._transforms[Pane(pane)]

    def ordered_selection(self) -> List[str]:
        """Selected names in canonical (sorted) order, which is the legend order."""
        return sorted(self._selection)

    def filtered_names(self) -> List[str]:
        """Names matching the current filter (no ranking, no cap)."""
        if self._dataset is None:
            return []
        return matching_variables(self._dataset, self.filter_terms)

    def plot_data(self, pane: Pane) -> PlotData:
        pane = Pane(pane)
        if self._dataset is None:
            return PlotData(kind=pane, series=(), bounds=None)
        return build_plot_data(
            self._dataset, self.ordered_selection(), self._colors, pane,
        )

    def snapshot(self, pane: Pane) -> PaneSnapshot:
        """Capture everything an export of *pane* needs."""
        pane = Pane(pane)
        if self._dataset is None:
            dataset = CalibrationDataset(iterations=())
        else:
            dataset = self._dataset
        return PaneSnapshot(
            pane=pane,
            theme=self._theme,
            dataset=dataset,
            plot_data=self.plot_data(pane),
            visible_bounds=self._transforms[pane].visible_bounds(),
        )

    # ── Loading ──────────────────────────────────────────────────────

    def load_dataset(self, dataset: CalibrationDataset) -> None:
        """Replace the dataset; any phase → LOADED.

        Prior selection and transforms are discarded; the default
        selection is the filter engine's result for the current filter
        and max-vars.
        """
        self._dataset = dataset
        self._colors = ColorAssignment.for_dataset(dataset)
        self._selection = set(
            select_variables(dataset, self.filter_terms, self._max_vars)
        )
        self._refit()
        self._phase = ViewPhase.LOADED
        logger.info(
            "Dataset loaded: %d iterations, %d variables, %d selected",
            dataset.n_iterations, len(dataset.variables), len(self._selection),
        )

    def begin_load(self) -> int:
        """Register a background load and return its ticket.

        Starting a new load supersedes any pending one.
        """
        ticket = self._next_ticket
        self._next_ticket += 1
        if self._pending_ticket is not None:
            logger.debug("Load %d superseded by %d", self._pending_ticket, ticket)
        self._pending_ticket = ticket
        return ticket

    def complete_load(self, ticket: int, dataset: CalibrationDataset) -> bool:
        """Apply a finished background load.

        Returns ``False`` (state untouched) when *ticket* was cancelled or
        superseded.
        """
        if ticket != self._pending_ticket:
            logger.debug("Discarding result of stale load %d", ticket)
            return False
        self._pending_ticket = None
        self.load_dataset(dataset)
        return True

    def fail_load(self, ticket: int, exc: BaseException) -> bool:
        """Record a failed background load; the prior dataset stays active.

        Returns ``True`` when *ticket* was the pending load (so the error
        should be reported to the user).
        """
        if ticket != self._pending_ticket:
            return False
        self._pending_ticket = None
        logger.warning("Load failed: %s", exc)
        return True

    def cancel_load(self) -> bool:
        """Abandon the pending load.  No-op (returns ``False``) if idle."""
        if self._pending_ticket is None:
            return False
        logger.info("Load %d cancelled", self._pending_ticket)
        self._pending_ticket = None
        return True

    # ── Selection ────────────────────────────────────────────────────

    def _require_dataset(self) -> CalibrationDataset:
        if self._dataset is None:
            raise InvalidArgument("No dataset loaded")
        return self._dataset

    def _check_names(self, names: Iterable[str]) -> List[str]:
        dataset = self._require_dataset()
        names = list(names)
        unknown = [n for n in names if n not in dataset]
        if unknown:
            raise InvalidArgument(
                f"Unknown variable(s): {', '.join(repr(n) for n in unknown[:5])}"
            )
        return names

    def _selection_changed(self) -> None:
        self._refit()
        self._phase = ViewPhase.INTERACTING

    def toggle_variable(self, name: str) -> bool:
        """Select or deselect *name*; returns the new selected state."""
        self._check_names([name])
        if name in self._selection:
            self._selection.discard(name)
            selected = False
        else:
            self._selection.add(name)
            selected = True
        self._selection_changed()
        return selected

    def set_selected(self, name: str, selected: bool) -> None:
        """Explicit select / deselect of *name*."""
        self._check_names([name])
        if selected:
            self._selection.add(name)
        else:
            self._selection.discard(name)
        self._selection_changed()

    def select_all(self, names: Optional[Iterable[str]] = None) -> None:
        """Add *names* (default: all filter matches) to the selection."""
        if names is None:
            names = self.filtered_names()
        self._selection.update(self._check_names(names))
        self._selection_changed()

    def clear_selection(self) -> None:
        self._require_dataset()
        self._selection.clear()
        self._selection_changed()

    def set_filter(self, text: str) -> None:
        """Change the filter text; the selection itself is unchanged."""
        self._filter_text = text or ""

    def set_max_vars(self, max_vars: int) -> None:
        if max_vars <= 0:
            raise InvalidArgument(f"max-vars must be at least 1, got {max_vars}")
        self._max_vars = max_vars

    def apply_filter_selection(self) -> List[str]:
        """Replace the selection with the ranked, capped filter result."""
        dataset = self._require_dataset()
        selected = select_variables(dataset, self.filter_terms, self._max_vars)
        self._selection = set(selected)
        self._selection_changed()
        return selected

    # ── Transforms ───────────────────────────────────────────────────

    def _refit(self) -> None:
        for pane in Pane:
            self._transforms[pane] = ViewTransform.fit_to(
                self.plot_data(pane).bounds
            )

    def pan(self, pane: Pane, dx: float, dy: float) -> None:
        self._require_dataset()
        pane = Pane(pane)
        self._transforms[pane] = self._transforms[pane].panned(dx, dy)
        self._phase = ViewPhase.INTERACTING

    def zoom(self, pane: Pane, factor,
             anchor: Optional[Tuple[float, float]] = None) -> None:
        self._require_dataset()
        pane = Pane(pane)
        self._transforms[pane] = self._transforms[pane].zoomed(factor, anchor)
        self._phase = ViewPhase.INTERACTING

    def reset_view(self, pane: Pane) -> None:
        """Return *pane* to fit-to-selection."""
        pane = Pane(pane)
        self._transforms[pane] = ViewTransform.fit_to(self.plot_data(pane).bounds)

    # ── Theme ────────────────────────────────────────────────────────

    def toggle_theme(self) -> Theme:
        """Switch dark ↔ light and re-derive the colour assignment."""
        self._theme = self._theme.toggled()
        if self._dataset is not None:
            self._colors = ColorAssignment.for_dataset(self._dataset)
        return self._theme
