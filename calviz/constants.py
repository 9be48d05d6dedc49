"""
Constants for the Calibration Report Visualizer.

Centralises column-header prefixes, colour palettes, font families,
matplotlib style dicts, and default values for selection, summary
and export.
"""

# ── CSV header conventions ───────────────────────────────────────────────
ITERATION_HEADER = "Iteration"
ERROR_PREFIX = "Error:"
VALUE_PREFIX = "Value:"

# Loading progress is reported every N data rows
LOAD_PROGRESS_STEP = 100

# Files above this size trigger a warning before parsing
LARGE_FILE_BYTES = 100 * 1024 * 1024

# ── Font family fallback chain ──────────────────────────────────────────
FONT_FAMILIES = [
    "Segoe UI", "DejaVu Sans", "Liberation Sans", "Noto Sans",
    "Ubuntu", "Helvetica", "Arial", "sans-serif",
]

# ── Dark Catppuccin-inspired GUI colour palette ──────────────────────────
DARK_COLORS = {
    'bg':           '#1e1e2e',
    'bg_alt':       '#252536',
    'bg_widget':    '#2a2a3c',
    'bg_input':     '#333348',
    'fg':           '#cdd6f4',
    'fg_dim':       '#9399b2',
    'accent':       '#89b4fa',
    'green':        '#a6e3a1',
    'yellow':       '#f9e2af',
    'red':          '#f38ba8',
    'border':       '#45475a',
    'selection':    '#45475a',
}

# ── Light GUI colour palette (theme toggle / export default) ─────────────
LIGHT_COLORS = {
    'bg':           '#ffffff',
    'bg_alt':       '#f3f4f7',
    'bg_widget':    '#fafafa',
    'bg_input':     '#ffffff',
    'fg':           '#1a1a2e',
    'fg_dim':       '#5c5f77',
    'accent':       '#1e66f5',
    'green':        '#40a02b',
    'yellow':       '#df8e1d',
    'red':          '#d20f39',
    'border':       '#bcc0cc',
    'selection':    '#dce0e8',
}

# ── Variable colour palette (12 well-separated hues) ─────────────────────
# Cycled by position in the sorted variable list; each full wrap shifts
# lightness by VARIABLE_LIGHTNESS_STEP (alternating lighter / darker).
VARIABLE_PALETTE = [
    '#e6194b',   # red
    '#3cb44b',   # green
    '#4363d8',   # blue
    '#f58231',   # orange
    '#911eb4',   # purple
    '#42d4f4',   # cyan
    '#f032e6',   # magenta
    '#bfef45',   # lime
    '#9a6324',   # brown
    '#469990',   # teal
    '#ffe119',   # yellow
    '#808000',   # olive
]
VARIABLE_LIGHTNESS_STEP = 0.12

# ── Default configuration values ─────────────────────────────────────────
DEFAULT_MAX_VARS = 20
DEFAULT_TOP_N = 10
DEFAULT_THEME = "dark"
DEFAULT_OUTPUT_DIR = "output"

# ── Export settings ──────────────────────────────────────────────────────
EXPORT_RESOLUTION = (1600, 1200)   # pixels (width, height)
EXPORT_DPI = 100
CLIPBOARD_DPI = 100

# Output artifact names for the command-line surface
ERROR_CONVERGENCE_PNG = "error_convergence.png"
VALUE_EVOLUTION_PNG = "value_evolution.png"
ERROR_DISTRIBUTION_PNG = "error_distribution.png"

# ── Line styling ─────────────────────────────────────────────────────────
LINE_WIDTH = 2.0
MAX_LEGEND_ENTRIES = 24
FIT_PADDING = 0.05   # fraction of span added on each side for fit-to-view

# ── Matplotlib dark-theme style dict ─────────────────────────────────────
PLOT_STYLE_DARK = {
    'figure.facecolor':  DARK_COLORS['bg_alt'],
    'axes.facecolor':    DARK_COLORS['bg_widget'],
    'axes.edgecolor':    DARK_COLORS['border'],
    'axes.labelcolor':   DARK_COLORS['fg'],
    'text.color':        DARK_COLORS['fg'],
    'xtick.color':       DARK_COLORS['fg_dim'],
    'ytick.color':       DARK_COLORS['fg_dim'],
    'xtick.labelsize':   8,
    'ytick.labelsize':   8,
    'axes.labelsize':    9,
    'axes.titlesize':    11,
    'legend.fontsize':   7,
    'grid.color':        DARK_COLORS['border'],
    'legend.facecolor':  DARK_COLORS['bg_widget'],
    'legend.edgecolor':  DARK_COLORS['border'],
}

# ── Matplotlib light-theme style dict ────────────────────────────────────
PLOT_STYLE_LIGHT = {
    'figure.facecolor':  '#ffffff',
    'axes.facecolor':    '#ffffff',
    'axes.edgecolor':    '#333333',
    'axes.labelcolor':   '#1a1a2e',
    'text.color':        '#1a1a2e',
    'xtick.color':       '#333333',
    'ytick.color':       '#333333',
    'xtick.labelsize':   8,
    'ytick.labelsize':   8,
    'axes.labelsize':    9,
    'axes.titlesize':    11,
    'legend.fontsize':   7,
    'grid.color':        '#cccccc',
    'legend.facecolor':  '#ffffff',
    'legend.edgecolor':  '#999999',
}
