"""
Theme and stylesheet for the Calibration Report Visualizer.

Provides the Qt stylesheet for both GUI themes (dark Catppuccin-inspired
and light) and helpers mapping a ``Theme`` to its matplotlib style dict.
Exports render with the theme that is active in the view, so the same
tables drive both the widgets and the saved images.
"""

from .config import Theme
from .constants import DARK_COLORS, LIGHT_COLORS, PLOT_STYLE_DARK, PLOT_STYLE_LIGHT


def theme_colors(theme: Theme) -> dict:
    """GUI colour table of *theme*."""
    return DARK_COLORS if Theme(theme) is Theme.DARK else LIGHT_COLORS


def plot_style(theme: Theme) -> dict:
    """matplotlib rcParams dict of *theme*."""
    return PLOT_STYLE_DARK if Theme(theme) is Theme.DARK else PLOT_STYLE_LIGHT


def get_stylesheet(theme: Theme) -> str:
    """Generate the Qt stylesheet for *theme*."""
    c = theme_colors(theme)
    return f"""
    QMainWindow, QWidget {{
        background-color: {c['bg']};
        color: {c['fg']};
        font-size: 13px;
    }}
    QGroupBox {{
        border: 1px solid {c['border']};
        border-radius: 6px;
        margin-top: 12px;
        padding-top: 16px;
        font-weight: bold;
        color: {c['accent']};
    }}
    QGroupBox::title {{
        subcontrol-origin: margin;
        left: 12px;
        padding: 0 6px;
    }}
    QPushButton {{
        background-color: {c['bg_widget']};
        color: {c['fg']};
        border: 1px solid {c['border']};
        border-radius: 4px;
        padding: 6px 16px;
        min-height: 24px;
    }}
    QPushButton:hover {{
        background-color: {c['selection']};
        border-color: {c['accent']};
    }}
    QPushButton:pressed {{
        background-color: {c['accent']};
        color: {c['bg']};
    }}
    QPushButton:disabled {{
        color: {c['fg_dim']};
        background-color: {c['bg']};
    }}
    QLineEdit, QSpinBox {{
        background-color: {c['bg_input']};
        color: {c['fg']};
        border: 1px solid {c['border']};
        border-radius: 4px;
        padding: 4px 8px;
        min-height: 22px;
    }}
    QLineEdit:focus, QSpinBox:focus {{
        border-color: {c['accent']};
    }}
    QTextEdit, QPlainTextEdit {{
        background-color: {c['bg_input']};
        color: {c['fg']};
        border: 1px solid {c['border']};
        border-radius: 4px;
    }}
    QScrollBar:vertical {{
        background-color: {c['bg']};
        width: 12px;
        border: none;
    }}
    QScrollBar::handle:vertical {{
        background-color: {c['border']};
        border-radius: 4px;
        min-height: 20px;
    }}
    QScrollBar::handle:vertical:hover {{
        background-color: {c['fg_dim']};
    }}
    QScrollBar:horizontal {{
        background-color: {c['bg']};
        height: 12px;
        border: none;
    }}
    QScrollBar::handle:horizontal {{
        background-color: {c['border']};
        border-radius: 4px;
        min-width: 20px;
    }}
    QScrollBar::add-line, QScrollBar::sub-line {{
        height: 0; width: 0;
    }}
    QProgressBar {{
        background-color: {c['bg_input']};
        border: 1px solid {c['border']};
        border-radius: 4px;
        text-align: center;
        color: {c['fg']};
    }}
    QProgressBar::chunk {{
        background-color: {c['accent']};
        border-radius: 3px;
    }}
    QStatusBar {{
        background-color: {c['bg_alt']};
        color: {c['fg_dim']};
        border-top: 1px solid {c['border']};
    }}
    QMenuBar {{
        background-color: {c['bg_alt']};
        color: {c['fg']};
    }}
    QMenuBar::item:selected {{
        background-color: {c['selection']};
    }}
    QMenu {{
        background-color: {c['bg_widget']};
        color: {c['fg']};
        border: 1px solid {c['border']};
    }}
    QMenu::item:selected {{
        background-color: {c['selection']};
    }}
    QToolTip {{
        background-color: {c['bg_widget']};
        color: {c['fg']};
        border: 1px solid {c['accent']};
        padding: 6px;
        border-radius: 4px;
    }}
    QCheckBox {{
        color: {c['fg']};
        spacing: 8px;
    }}
    QCheckBox::indicator {{
        width: 16px; height: 16px;
        border: 1px solid {c['border']};
        border-radius: 3px;
        background-color: {c['bg_input']};
    }}
    QCheckBox::indicator:checked {{
        background-color: {c['accent']};
        border-color: {c['accent']};
    }}
    QSplitter::handle {{
        background-color: {c['border']};
    }}
    QLabel {{
        color: {c['fg']};
    }}
    QListWidget {{
        background-color: {c['bg_widget']};
        color: {c['fg']};
        border: 1px solid {c['border']};
        border-radius: 4px;
    }}
    QListWidget::item:selected {{
        background-color: {c['selection']};
    }}
    """


def apply_plot_style(theme: Theme) -> None:
    """Apply the matplotlib style of *theme* to the global rcParams.

    Used for the on-screen canvases.  Off-screen exports use
    ``matplotlib.rc_context(plot_style(theme))`` instead so they never
    leak style into the GUI.
    """
    import matplotlib as mpl
    for key, value in plot_style(theme).items():
        mpl.rcParams[key] = value
