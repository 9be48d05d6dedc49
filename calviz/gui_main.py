"""
Main window for the Calibration Report Visualizer.

Hosts the VariablePanel (left) and the PlotPanesWidget (right) in a
horizontal splitter, with a menu bar and status bar.  The window owns
the ``ViewState``; panel intents are applied to it here and both sides
are refreshed afterwards.
"""

import logging
import os

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QSplitter, QScrollArea,
    QFileDialog, QMessageBox, QApplication,
)
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtCore import Qt, QTimer

from . import APP_NAME, APP_VERSION
from .errors import CalvizError
from .export import export_pane_images
from .constants import ERROR_CONVERGENCE_PNG, VALUE_EVOLUTION_PNG
from .gui_plot_panes import PlotPanesWidget
from .gui_variable_panel import VariablePanel
from .load_worker import DatasetLoadWorker
from .theme import apply_plot_style, get_stylesheet
from .view_state import Pane, ViewState

logger = logging.getLogger(__name__)


class VisualizerMainWindow(QMainWindow):
    """Main window for the Calibration Report Visualizer."""

    def __init__(self, state: ViewState = None):
        super().__init__()
        self._state = state or ViewState()
        self._worker = None

        self.setWindowTitle(APP_NAME)
        self.resize(1600, 1000)
        self.setMinimumSize(1000, 700)

        self._setup_ui()
        self._setup_menu()
        self._connect_signals()
        self._apply_theme()
        self._refresh()

        self.statusBar().showMessage(
            "Ready. Load a calibration CSV file to begin analysis"
        )

    @property
    def view_state(self) -> ViewState:
        return self._state

    # ── UI setup ─────────────────────────────────────────────────────

    def _setup_ui(self):
        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QVBoxLayout(central)
        main_layout.setContentsMargins(4, 4, 4, 4)
        main_layout.setSpacing(4)

        splitter = QSplitter(Qt.Orientation.Horizontal)

        # Left panel: variables in scroll area
        self._panel = VariablePanel()
        scroll = QScrollArea()
        scroll.setWidget(self._panel)
        scroll.setWidgetResizable(True)
        scroll.setMinimumWidth(320)
        scroll.setMaximumWidth(520)

        # Right panel: plot panes
        self._plots = PlotPanesWidget()
        self._plots.bind(self._state)

        splitter.addWidget(scroll)
        splitter.addWidget(self._plots)
        splitter.setStretchFactor(0, 0)
        splitter.setStretchFactor(1, 1)
        splitter.setSizes([400, 1200])

        main_layout.addWidget(splitter)

    def _setup_menu(self):
        menubar = self.menuBar()

        # ── File menu ────────────────────────────────────────────────
        file_menu = menubar.addMenu("File")

        act_open = QAction("Open...", self)
        act_open.setShortcut(QKeySequence.StandardKey.Open)
        act_open.triggered.connect(lambda *_: self._panel.browse_file())
        file_menu.addAction(act_open)

        act_reload = QAction("Reload", self)
        act_reload.setShortcut(QKeySequence("F5"))
        act_reload.triggered.connect(lambda *_: self._reload())
        file_menu.addAction(act_reload)

        file_menu.addSeparator()

        act_export_all = QAction("Export Both Charts...", self)
        act_export_all.triggered.connect(lambda *_: self._export_all())
        file_menu.addAction(act_export_all)

        file_menu.addSeparator()

        act_exit = QAction("Exit", self)
        act_exit.triggered.connect(self.close)
        file_menu.addAction(act_exit)

        # ── View menu ────────────────────────────────────────────────
        view_menu = menubar.addMenu("View")

        act_theme = QAction("Toggle Dark/Light Theme", self)
        act_theme.setShortcut(QKeySequence("Ctrl+T"))
        act_theme.triggered.connect(lambda *_: self._toggle_theme())
        view_menu.addAction(act_theme)

        act_reset = QAction("Reset Views", self)
        act_reset.triggered.connect(lambda *_: self._reset_views())
        view_menu.addAction(act_reset)

        # ── Examples menu ────────────────────────────────────────────
        examples_menu = menubar.addMenu("Examples")

        act_load_example = QAction("Load Example Report", self)
        act_load_example.triggered.connect(lambda *_: self._load_example())
        examples_menu.addAction(act_load_example)

        # ── Help menu ────────────────────────────────────────────────
        help_menu = menubar.addMenu("Help")

        act_about = QAction("About", self)
        act_about.triggered.connect(lambda *_: self._show_about())
        help_menu.addAction(act_about)

    def _connect_signals(self):
        self._panel.file_chosen.connect(self._start_load)
        self._panel.reload_requested.connect(self._reload)
        self._panel.cancel_requested.connect(self._cancel_load)
        self._panel.filter_applied.connect(self._on_filter_applied)
        self._panel.variable_toggled.connect(self._on_variable_toggled)
        self._panel.select_all_requested.connect(self._on_select_all)
        self._panel.clear_requested.connect(self._on_clear)
        for pane_widget in self._plots.panes():
            pane_widget.status_message.connect(
                lambda msg: self.statusBar().showMessage(msg, 5000)
            )

    # ── State helpers ────────────────────────────────────────────────

    def _refresh(self):
        self._panel.refresh(self._state)
        self._plots.refresh()

    def _apply_theme(self):
        theme = self._state.theme
        apply_plot_style(theme)
        app = QApplication.instance()
        if app is not None:
            app.setStyleSheet(get_stylesheet(theme))

    def _run_action(self, action, *args):
        """Apply a ViewState mutation, reporting argument errors."""
        try:
            action(*args)
        except CalvizError as exc:
            self.statusBar().showMessage(f"Error: {exc}", 5000)
            return False
        self._refresh()
        return True

    # ── Loading ──────────────────────────────────────────────────────

    def _start_load(self, path: str):
        """Parse *path* on a worker thread; supersedes any pending load."""
        self._stop_worker()
        self._panel.set_file_path(path)
        ticket = self._state.begin_load()
        logger.info("Loading %s (ticket %d)", path, ticket)

        self._worker = DatasetLoadWorker(path, ticket, parent=self)
        self._worker.progress_updated.connect(self._on_load_progress)
        self._worker.finished_result.connect(self._on_load_finished)
        self._worker.error_occurred.connect(self._on_load_error)
        self._panel.set_loading(True)
        self.statusBar().showMessage(f"Loading {os.path.basename(path)}...")
        self._worker.start()

    def _stop_worker(self):
        if self._worker is not None and self._worker.isRunning():
            self._worker.abort()
            self._worker.wait(2000)
        self._worker = None

    def _reload(self):
        path = self._panel.file_path
        if not path:
            self.statusBar().showMessage("No file to reload", 3000)
            return
        self._start_load(path)

    def _cancel_load(self):
        if self._state.cancel_load():
            self._stop_worker()
            self._panel.set_loading(False)
            self._refresh()
            self.statusBar().showMessage("Load cancelled", 3000)

    def _on_load_progress(self, ticket: int, rows: int):
        if ticket == self._worker_ticket():
            self._panel.set_loading(True, rows)

    def _on_load_finished(self, ticket: int, dataset):
        if not self._state.complete_load(ticket, dataset):
            return
        self._panel.set_loading(False)
        self._refresh()
        self.statusBar().showMessage(
            f"Loaded {dataset.n_iterations} iterations, "
            f"{len(dataset.variables)} variables, "
            f"{len(self._state.selection)} selected",
            5000,
        )

    def _on_load_error(self, ticket: int, message: str):
        if not self._state.fail_load(ticket, RuntimeError(message)):
            return
        self._panel.set_loading(False)
        self._refresh()
        self._panel.show_error(message)
        self.statusBar().showMessage("Load failed", 5000)
        QMessageBox.critical(self, "Data Load Error", message)

    def _worker_ticket(self):
        return self._worker.ticket if self._worker is not None else None

    def _load_example(self):
        """Generate and load the example report."""
        from .example_data import generate_example_csv
        import tempfile

        path = os.path.join(
            tempfile.gettempdir(), 'calviz_example', 'calibration_report.csv'
        )
        generate_example_csv(path)
        self._start_load(path)

    # ── Selection slots ──────────────────────────────────────────────

    def _on_filter_applied(self, text: str, max_vars: int):
        self._state.set_filter(text)
        if not self._run_action(self._state.set_max_vars, max_vars):
            return
        if self._state.dataset is None:
            self._refresh()
            return
        selected = self._state.apply_filter_selection()
        self._refresh()
        self.statusBar().showMessage(
            f"Filter selected {len(selected)} variable(s)", 5000
        )

    def _on_variable_toggled(self, name: str, selected: bool):
        try:
            self._state.set_selected(name, selected)
        except CalvizError as exc:
            self.statusBar().showMessage(f"Error: {exc}", 5000)
        # Emitted from the list's own itemChanged; rebuild it afterwards
        QTimer.singleShot(0, self._refresh)

    def _on_select_all(self):
        self._run_action(self._state.select_all)

    def _on_clear(self):
        self._run_action(self._state.clear_selection)

    # ── View slots ───────────────────────────────────────────────────

    def _toggle_theme(self):
        theme = self._state.toggle_theme()
        self._apply_theme()
        self._refresh()
        self.statusBar().showMessage(f"Theme: {theme.value}", 3000)

    def _reset_views(self):
        for pane in Pane:
            self._state.reset_view(pane)
        self._plots.refresh()

    def _export_all(self):
        """Export both panes, each in its current view, to a folder."""
        if self._state.dataset is None or not self._state.selection:
            QMessageBox.warning(
                self, "No Data",
                "Please load a report and select variables first.",
            )
            return

        folder = QFileDialog.getExistingDirectory(
            self, "Select Output Folder for Charts"
        )
        if not folder:
            return

        filenames = {
            Pane.ERROR: ERROR_CONVERGENCE_PNG,
            Pane.VALUE: VALUE_EVOLUTION_PNG,
        }
        try:
            paths = export_pane_images(self._state, folder, filenames)
        except (CalvizError, OSError) as exc:
            QMessageBox.critical(
                self, "Export Error",
                f"Failed to export charts:\n\n{exc}",
            )
            return
        self.statusBar().showMessage(
            f"Exported {len(paths)} charts to {os.path.basename(folder)}",
            5000,
        )

    def _show_about(self):
        QMessageBox.about(
            self,
            f"About {APP_NAME}",
            f"<h3>{APP_NAME} v{APP_VERSION}</h3>"
            f"<p>Interactive explorer for calibration convergence "
            f"reports.</p>"
            f"<p>Plots the absolute error and value of each calibrated "
            f"variable per iteration, with filtering, pan / zoom and "
            f"PNG / CSV export.</p>",
        )

    def closeEvent(self, event):
        self._state.cancel_load()
        self._stop_worker()
        super().closeEvent(event)
