"""
Variable panel (left side) for the Calibration Report Visualizer.

File selection and reload, the comma-separated filter with its max-vars
cap, the variable checklist with colour swatches, and the convergence
summary.  The panel never mutates ``ViewState`` itself; it emits intent
signals and the main window applies them, then calls ``refresh``.
"""

import os

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QGroupBox,
    QLabel, QPushButton, QLineEdit, QSpinBox, QListWidget,
    QListWidgetItem, QTextEdit, QFileDialog, QProgressBar,
)
from PySide6.QtGui import QColor, QIcon, QPixmap
from PySide6.QtCore import Qt, Signal

from .config import Theme
from .summary import format_summary, summarize
from .theme import theme_colors
from .view_state import ViewState

_SWATCH_SIZE = 12


def _swatch_icon(hex_color: str) -> QIcon:
    pixmap = QPixmap(_SWATCH_SIZE, _SWATCH_SIZE)
    pixmap.fill(QColor(hex_color))
    return QIcon(pixmap)


class VariablePanel(QWidget):
    """Left-side panel with file inputs, filter and variable checklist."""

    # Signals
    file_chosen = Signal(str)
    reload_requested = Signal()
    cancel_requested = Signal()
    filter_applied = Signal(str, int)       # filter text, max vars
    variable_toggled = Signal(str, bool)    # name, selected
    select_all_requested = Signal()
    clear_requested = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._file_path = ''
        self._theme = Theme.DARK
        # Guards itemChanged while the list is being rebuilt
        self._populating = False
        self._setup_ui()
        self._connect_signals()

    # ── UI setup ─────────────────────────────────────────────────────

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(8)

        # ── Group 1: Data File ───────────────────────────────────────
        grp_file = QGroupBox("Calibration Report")
        file_layout = QVBoxLayout(grp_file)
        file_layout.setSpacing(4)

        row = QHBoxLayout()
        row.setSpacing(4)
        self._edt_file = QLineEdit()
        self._edt_file.setReadOnly(True)
        self._edt_file.setPlaceholderText("No file selected")
        self._btn_browse = QPushButton("Browse...")
        self._btn_browse.setFixedWidth(80)
        self._btn_reload = QPushButton("Reload")
        self._btn_reload.setFixedWidth(70)
        self._btn_reload.setEnabled(False)
        row.addWidget(self._edt_file, 1)
        row.addWidget(self._btn_browse)
        row.addWidget(self._btn_reload)
        file_layout.addLayout(row)

        progress_row = QHBoxLayout()
        self._progress = QProgressBar()
        self._progress.setRange(0, 0)
        self._progress.setTextVisible(False)
        self._btn_cancel = QPushButton("Cancel")
        self._btn_cancel.setFixedWidth(70)
        progress_row.addWidget(self._progress, 1)
        progress_row.addWidget(self._btn_cancel)
        file_layout.addLayout(progress_row)
        self._set_progress_visible(False)

        self._lbl_status = QLabel("Load a calibration CSV file to begin analysis")
        self._lbl_status.setWordWrap(True)
        file_layout.addWidget(self._lbl_status)

        layout.addWidget(grp_file)

        # ── Group 2: Filter ──────────────────────────────────────────
        grp_filter = QGroupBox("Filter")
        filter_layout = QFormLayout(grp_filter)
        filter_layout.setSpacing(4)

        self._edt_filter = QLineEdit()
        self._edt_filter.setPlaceholderText("e.g. temp, press")
        self._edt_filter.setToolTip(
            "Comma-separated terms; a variable matches if its name\n"
            "contains any term (case-insensitive)."
        )
        filter_layout.addRow("Terms:", self._edt_filter)

        self._spn_max_vars = QSpinBox()
        self._spn_max_vars.setRange(1, 9999)
        filter_layout.addRow("Max variables:", self._spn_max_vars)

        self._btn_apply = QPushButton("Apply Filter")
        self._btn_apply.setToolTip(
            "Select the matching variables with the largest final error"
        )
        filter_layout.addRow(self._btn_apply)

        layout.addWidget(grp_filter)

        # ── Group 3: Variables ───────────────────────────────────────
        grp_vars = QGroupBox("Variables")
        vars_layout = QVBoxLayout(grp_vars)
        vars_layout.setSpacing(4)

        btn_row = QHBoxLayout()
        self._btn_select_all = QPushButton("Select All Filtered")
        self._btn_unselect_all = QPushButton("Unselect All")
        btn_row.addWidget(self._btn_select_all)
        btn_row.addWidget(self._btn_unselect_all)
        vars_layout.addLayout(btn_row)

        self._lbl_count = QLabel("")
        vars_layout.addWidget(self._lbl_count)

        self._lst_vars = QListWidget()
        self._lst_vars.setMinimumHeight(240)
        vars_layout.addWidget(self._lst_vars, 1)

        layout.addWidget(grp_vars, 1)

        # ── Group 4: Summary ─────────────────────────────────────────
        grp_summary = QGroupBox("Summary")
        summary_layout = QVBoxLayout(grp_summary)
        self._txt_summary = QTextEdit()
        self._txt_summary.setReadOnly(True)
        self._txt_summary.setMinimumHeight(160)
        self._txt_summary.setStyleSheet("font-family: monospace; font-size: 11px;")
        summary_layout.addWidget(self._txt_summary)
        layout.addWidget(grp_summary)

        self._set_data_controls_enabled(False)

    # ── Signal connections ───────────────────────────────────────────

    def _connect_signals(self):
        # Lambdas absorb the bool argument of clicked(bool)
        self._btn_browse.clicked.connect(lambda *_: self.browse_file())
        self._btn_reload.clicked.connect(lambda *_: self.reload_requested.emit())
        self._btn_cancel.clicked.connect(lambda *_: self.cancel_requested.emit())
        self._btn_apply.clicked.connect(lambda *_: self._emit_filter())
        self._edt_filter.returnPressed.connect(self._emit_filter)
        self._btn_select_all.clicked.connect(
            lambda *_: self.select_all_requested.emit()
        )
        self._btn_unselect_all.clicked.connect(
            lambda *_: self.clear_requested.emit()
        )
        self._lst_vars.itemChanged.connect(self._on_item_changed)

    # ── Slot implementations ─────────────────────────────────────────

    def browse_file(self):
        start_dir = os.path.dirname(self._file_path) if self._file_path else ""
        path, _ = QFileDialog.getOpenFileName(
            self, "Open Calibration Report",
            start_dir, "CSV Files (*.csv);;All Files (*)",
        )
        if path:
            self.set_file_path(path)
            self.file_chosen.emit(path)

    def _emit_filter(self):
        self.filter_applied.emit(self._edt_filter.text(), self._spn_max_vars.value())

    def _on_item_changed(self, item: QListWidgetItem):
        if self._populating:
            return
        name = item.data(Qt.ItemDataRole.UserRole)
        self.variable_toggled.emit(name, item.checkState() == Qt.CheckState.Checked)

    def _set_progress_visible(self, visible: bool):
        self._progress.setVisible(visible)
        self._btn_cancel.setVisible(visible)

    def _set_data_controls_enabled(self, enabled: bool):
        for widget in (self._btn_apply, self._btn_select_all,
                       self._btn_unselect_all, self._lst_vars):
            widget.setEnabled(enabled)

    def _set_status(self, text: str, color_key: str = 'fg_dim'):
        self._lbl_status.setText(text)
        self._lbl_status.setStyleSheet(
            f"color: {theme_colors(self._theme)[color_key]}; font-size: 11px;"
        )

    # ── Public API ───────────────────────────────────────────────────

    @property
    def file_path(self) -> str:
        return self._file_path

    def set_file_path(self, path: str):
        self._file_path = path
        self._edt_file.setText(os.path.basename(path))
        self._edt_file.setToolTip(path)
        self._btn_reload.setEnabled(bool(path))

    def set_loading(self, loading: bool, rows: int = 0):
        """Show or hide the load progress row."""
        self._set_progress_visible(loading)
        self._btn_browse.setEnabled(not loading)
        self._btn_reload.setEnabled(not loading and bool(self._file_path))
        if loading:
            self._set_status(
                f"Loading... {rows:,} records" if rows else "Loading...",
                'yellow',
            )

    def show_error(self, message: str):
        self._set_status(f"Error: {message}", 'red')

    def refresh(self, state: ViewState):
        """Rebuild the checklist, counts and summary from *state*."""
        self._theme = state.theme
        self._spn_max_vars.setValue(state.max_vars)
        if self._edt_filter.text() != state.filter_text:
            self._edt_filter.setText(state.filter_text)

        dataset = state.dataset
        self._populating = True
        try:
            self._lst_vars.clear()
            if dataset is None:
                self._lbl_count.setText("")
                self._txt_summary.clear()
                self._set_data_controls_enabled(False)
                return

            selection = state.selection
            matching = set(state.filtered_names())
            # Filter narrows the list, but selected variables stay visible
            shown = sorted(matching | selection)
            for name in shown:
                item = QListWidgetItem(name)
                item.setData(Qt.ItemDataRole.UserRole, name)
                item.setFlags(item.flags() | Qt.ItemFlag.ItemIsUserCheckable)
                item.setCheckState(
                    Qt.CheckState.Checked if name in selection
                    else Qt.CheckState.Unchecked
                )
                item.setIcon(_swatch_icon(state.colors.color_for(name).hex))
                tags = []
                if not dataset.has_error(name):
                    tags.append("no error")
                if not dataset.has_value(name):
                    tags.append("no value")
                if tags:
                    item.setToolTip(f"{name} ({', '.join(tags)})")
                self._lst_vars.addItem(item)
        finally:
            self._populating = False

        self._set_data_controls_enabled(True)
        self._lbl_count.setText(
            f"{len(selection)} selected, {len(matching)} of "
            f"{len(dataset.variables)} match filter"
        )
        self._txt_summary.setPlainText(format_summary(summarize(dataset)))
        self._set_status(
            f"Loaded {os.path.basename(dataset.source) or 'dataset'}: "
            f"{dataset.n_iterations} iterations, "
            f"{len(dataset.variables)} variables",
            'green',
        )
