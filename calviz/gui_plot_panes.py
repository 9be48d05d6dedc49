"""
Plot panes (right side) for the Calibration Report Visualizer.

Two side-by-side panes, "Error Convergence" and "Value Evolution", each
hosting a matplotlib FigureCanvas with its own export buttons.  Mouse
wheel zooms around the cursor, left-drag pans, double-click resets the
view; every gesture goes through ``ViewState`` so exports see exactly the
window on screen.
"""

import os

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QSplitter, QPushButton,
    QFileDialog, QMessageBox, QApplication,
)
from PySide6.QtGui import QImage
from PySide6.QtCore import Qt, Signal

import matplotlib
matplotlib.use('QtAgg')
from matplotlib.figure import Figure
from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg as FigureCanvas

from .chart_lines import PANE_TITLES, render_line_chart
from .constants import CLIPBOARD_DPI
from .errors import CalvizError
from .export import export_image, save_csv, save_image
from .view_state import Pane, ViewState

# Zoom step per wheel notch
_WHEEL_ZOOM = 1.2


def copy_to_clipboard(state: ViewState, pane: Pane) -> bool:
    """Copy the export image of *pane* to the system clipboard.

    Returns ``True`` on success, ``False`` if the clipboard is unavailable.
    Raises ``EmptySelection`` if nothing is plotted.
    """
    data = export_image(state, pane, dpi=CLIPBOARD_DPI)
    img = QImage()
    img.loadFromData(data, "PNG")
    clipboard = QApplication.clipboard()
    if clipboard is None or img.isNull():
        return False
    clipboard.setImage(img)
    return True


class PlotPane(QWidget):
    """One plot pane with canvas, gesture handling and export buttons."""

    # Emitted with a status-bar message after exports / copies
    status_message = Signal(str)

    def __init__(self, pane: Pane, parent=None):
        super().__init__(parent)
        self._pane = Pane(pane)
        self._state = None
        self._drag_last = None

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(4)

        # ── Button row ───────────────────────────────────────────────
        button_row = QHBoxLayout()
        button_row.setSpacing(4)
        button_row.addStretch()

        self._btn_reset = self._make_button("Reset View", button_row)
        self._btn_copy = self._make_button("Copy to Clipboard", button_row)
        self._btn_png = self._make_button("Export PNG...", button_row)
        self._btn_csv = self._make_button("Export CSV...", button_row)
        layout.addLayout(button_row)

        # ── Canvas ───────────────────────────────────────────────────
        self._fig = Figure(figsize=(6, 5))
        self._canvas = FigureCanvas(self._fig)
        self._canvas.setFocusPolicy(Qt.FocusPolicy.ClickFocus)
        layout.addWidget(self._canvas, 1)

        self._btn_reset.clicked.connect(lambda *_: self._on_reset())
        self._btn_copy.clicked.connect(lambda *_: self._on_copy())
        self._btn_png.clicked.connect(lambda *_: self._on_export_png())
        self._btn_csv.clicked.connect(lambda *_: self._on_export_csv())

        self._canvas.mpl_connect('scroll_event', self._on_scroll)
        self._canvas.mpl_connect('button_press_event', self._on_press)
        self._canvas.mpl_connect('motion_notify_event', self._on_motion)
        self._canvas.mpl_connect('button_release_event', self._on_release)

    @staticmethod
    def _make_button(text: str, row: QHBoxLayout) -> QPushButton:
        btn = QPushButton(text)
        btn.setFixedHeight(28)
        btn.setStyleSheet("font-size: 11px; padding: 2px 8px;")
        row.addWidget(btn)
        return btn

    @property
    def pane(self) -> Pane:
        return self._pane

    @property
    def fig(self) -> Figure:
        return self._fig

    @property
    def canvas(self) -> FigureCanvas:
        return self._canvas

    def bind(self, state: ViewState):
        self._state = state

    # ── Rendering ────────────────────────────────────────────────────

    def refresh(self):
        """Full re-render from the bound state."""
        if self._state is None:
            return
        plot_data = self._state.plot_data(self._pane)
        render_line_chart(
            self._fig, plot_data,
            theme=self._state.theme,
            view_bounds=(self._state.transform(self._pane).visible_bounds()
                         if plot_data.series else None),
        )
        has_data = bool(plot_data.series)
        for btn in (self._btn_reset, self._btn_copy, self._btn_png, self._btn_csv):
            btn.setEnabled(has_data)
        self._canvas.draw_idle()

    def _apply_view(self):
        """Push the current transform to the axes without re-plotting."""
        if not self._fig.axes:
            return
        bounds = self._state.transform(self._pane).visible_bounds()
        ax = self._fig.axes[0]
        ax.set_xlim(bounds.x_min, bounds.x_max)
        ax.set_ylim(bounds.y_min, bounds.y_max)
        self._canvas.draw_idle()

    # ── Gestures ─────────────────────────────────────────────────────

    def _can_interact(self, event) -> bool:
        return (self._state is not None and self._state.dataset is not None
                and bool(self._fig.axes) and event.inaxes is self._fig.axes[0])

    def _on_scroll(self, event):
        if not self._can_interact(event):
            return
        factor = _WHEEL_ZOOM if event.button == 'up' else 1.0 / _WHEEL_ZOOM
        self._state.zoom(self._pane, factor, anchor=(event.xdata, event.ydata))
        self._apply_view()

    def _on_press(self, event):
        if not self._can_interact(event) or event.button != 1:
            return
        if event.dblclick:
            self._on_reset()
            return
        self._drag_last = (event.x, event.y)

    def _on_motion(self, event):
        if self._drag_last is None or not self._fig.axes:
            return
        inverse = self._fig.axes[0].transData.inverted()
        x0, y0 = inverse.transform(self._drag_last)
        x1, y1 = inverse.transform((event.x, event.y))
        self._drag_last = (event.x, event.y)
        # Content follows the cursor, so the window moves the other way
        self._state.pan(self._pane, x0 - x1, y0 - y1)
        self._apply_view()

    def _on_release(self, event):
        self._drag_last = None

    # ── Button slots ─────────────────────────────────────────────────

    def _on_reset(self):
        if self._state is None:
            return
        self._state.reset_view(self._pane)
        self._apply_view()

    def _on_copy(self):
        try:
            success = copy_to_clipboard(self._state, self._pane)
        except CalvizError as exc:
            QMessageBox.warning(self, "Copy Failed", str(exc))
            return
        if success:
            self.status_message.emit(f"{PANE_TITLES[self._pane]} copied to clipboard")
        else:
            QMessageBox.warning(self, "Copy Failed",
                                "Could not copy chart to clipboard.")

    def _ask_path(self, title: str, suffix: str, file_filter: str) -> str:
        default = PANE_TITLES[self._pane].lower().replace(' ', '_') + suffix
        path, _ = QFileDialog.getSaveFileName(self, title, default, file_filter)
        if path and not path.lower().endswith(suffix):
            path += suffix
        return path

    def _on_export_png(self):
        path = self._ask_path("Export Chart as PNG", '.png',
                              "PNG Files (*.png);;All Files (*)")
        if not path:
            return
        try:
            save_image(self._state, self._pane, path)
        except (CalvizError, OSError) as exc:
            QMessageBox.critical(self, "Export Error", f"Failed to export: {exc}")
            return
        self.status_message.emit(f"Exported to {os.path.basename(path)}")

    def _on_export_csv(self):
        path = self._ask_path("Export Plotted Data as CSV", '.csv',
                              "CSV Files (*.csv);;All Files (*)")
        if not path:
            return
        try:
            save_csv(self._state, self._pane, path)
        except (CalvizError, OSError) as exc:
            QMessageBox.critical(self, "Export Error", f"Failed to export: {exc}")
            return
        self.status_message.emit(f"Exported to {os.path.basename(path)}")


class PlotPanesWidget(QSplitter):
    """Side-by-side container for the error and value panes."""

    def __init__(self, parent=None):
        super().__init__(Qt.Orientation.Horizontal, parent)
        self._panes = {pane: PlotPane(pane) for pane in Pane}
        for pane in Pane:
            self.addWidget(self._panes[pane])
        self.setSizes([500, 500])

    def pane(self, pane: Pane) -> PlotPane:
        return self._panes[Pane(pane)]

    def panes(self):
        return list(self._panes.values())

    def bind(self, state: ViewState):
        for widget in self._panes.values():
            widget.bind(state)

    def refresh(self):
        for widget in self._panes.values():
            widget.refresh()
