"""
Export utilities for the Calibration Report Visualizer.

Two exports per plot pane, both taken from a ``PaneSnapshot`` captured
before any work starts so the output is consistent even if the view
changes meanwhile:

- PNG image of exactly the selected series, in the pane's current pan /
  zoom window and the active theme, at a fixed pixel resolution that does
  not depend on the on-screen canvas size.
- CSV of the plotted points (data values, not pixels): ``Iteration`` plus
  one ``Error:<name>`` / ``Value:<name>`` column per variable, so the file
  can be loaded back into the tool.

Files are written only after rendering succeeded, through a temporary
file and ``os.replace``, so a failure never leaves a partial artifact.
"""

import csv
import io
import logging
import math
import os
import tempfile
from typing import Dict, List, Optional, Tuple

import matplotlib
from matplotlib.figure import Figure

from .chart_lines import render_line_chart
from .constants import ERROR_PREFIX, VALUE_PREFIX, ITERATION_HEADER
from .config import Theme, get_config
from .data_model import SeriesKind
from .errors import EmptySelection, MissingResource
from .theme import plot_style
from .view_state import Pane, PaneSnapshot, ViewState

logger = logging.getLogger(__name__)


# ── Off-screen rendering ─────────────────────────────────────────────────

def _agg_canvas_class():
    try:
        from matplotlib.backends.backend_agg import FigureCanvasAgg
    except ImportError as exc:
        raise MissingResource(
            f"matplotlib Agg rendering backend is unavailable: {exc}",
            "matplotlib.backends.backend_agg",
        ) from exc
    return FigureCanvasAgg


def new_export_figure(resolution: Tuple[int, int], dpi: int) -> Figure:
    """Create an off-screen figure of exactly *resolution* pixels."""
    width, height = resolution
    fig = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
    _agg_canvas_class()(fig)
    return fig


def figure_to_png(fig: Figure, dpi: int) -> bytes:
    """Encode *fig* as PNG without cropping (pixel size is preserved)."""
    if fig.canvas is None or not hasattr(fig.canvas, 'print_png'):
        _agg_canvas_class()(fig)
    buf = io.BytesIO()
    fig.savefig(
        buf, format='png', dpi=dpi,
        facecolor=fig.get_facecolor(),
        edgecolor='none',
    )
    return buf.getvalue()


def render_snapshot_png(
    snapshot: PaneSnapshot,
    resolution: Tuple[int, int],
    dpi: int,
) -> bytes:
    """Render *snapshot* to PNG bytes."""
    if not snapshot.plot_data.series:
        raise EmptySelection(
            f"No variable is selected for the {snapshot.pane.label.lower()} pane"
        )
    with matplotlib.rc_context(plot_style(snapshot.theme)):
        fig = new_export_figure(resolution, dpi)
        render_line_chart(
            fig, snapshot.plot_data,
            theme=snapshot.theme,
            view_bounds=snapshot.visible_bounds,
        )
        return figure_to_png(fig, dpi)


def export_image(
    view_state: ViewState,
    pane: Pane,
    resolution: Optional[Tuple[int, int]] = None,
    dpi: Optional[int] = None,
) -> bytes:
    """Render *pane* of *view_state* as a PNG image.

    Parameters
    ----------
    view_state : ViewState
    pane : Pane
    resolution : (int, int), optional
        Pixel size; defaults to the configured export resolution
        (1600×1200).
    dpi : int, optional
        Defaults to the configured export DPI.

    Raises
    ------
    EmptySelection
        If nothing is plotted in *pane*.
    """
    config = get_config()
    snapshot = view_state.snapshot(pane)
    return render_snapshot_png(
        snapshot,
        resolution or config.export_resolution,
        dpi or config.export_dpi,
    )


# ── CSV ──────────────────────────────────────────────────────────────────

def _format_cell(value: float) -> str:
    if value is None or math.isnan(value):
        return ''
    return repr(float(value))


def snapshot_to_csv(snapshot: PaneSnapshot) -> bytes:
    """Serialise the plotted points of *snapshot* as CSV bytes."""
    series = snapshot.plot_data.series
    if not series:
        raise EmptySelection(
            f"No variable is selected for the {snapshot.pane.label.lower()} pane"
        )
    prefix = ERROR_PREFIX if snapshot.pane is SeriesKind.ERROR else VALUE_PREFIX

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator='\n')
    writer.writerow([ITERATION_HEADER] + [f"{prefix}{s.name}" for s in series])
    for i, iteration in enumerate(snapshot.dataset.iterations):
        writer.writerow(
            [str(iteration)] + [_format_cell(s.y[i]) for s in series]
        )
    return buf.getvalue().encode('utf-8')


def export_csv(view_state: ViewState, pane: Pane) -> bytes:
    """Serialise the points currently plotted in *pane*.

    Raises
    ------
    EmptySelection
        If nothing is plotted in *pane*.
    """
    return snapshot_to_csv(view_state.snapshot(pane))


# ── Writing files ────────────────────────────────────────────────────────

def write_bytes_atomic(filepath: str, data: bytes) -> None:
    """Write *data* to *filepath* via a temp file in the same directory."""
    directory = os.path.dirname(os.path.abspath(filepath))
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(
        prefix='.calviz-', suffix='.tmp', dir=directory,
    )
    try:
        with os.fdopen(fd, 'wb') as fh:
            fh.write(data)
        os.replace(tmp_path, filepath)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    logger.info("Wrote %s (%d bytes)", filepath, len(data))


def save_image(view_state: ViewState, pane: Pane, filepath: str, **kwargs) -> None:
    """Render *pane* and write it to *filepath* (nothing on failure)."""
    write_bytes_atomic(filepath, export_image(view_state, pane, **kwargs))


def save_csv(view_state: ViewState, pane: Pane, filepath: str) -> None:
    """Write the CSV export of *pane* to *filepath* (nothing on failure)."""
    write_bytes_atomic(filepath, export_csv(view_state, pane))


def export_figures(
    figures: Dict[str, Figure],
    output_dir: str,
    *,
    dpi: Optional[int] = None,
) -> List[str]:
    """Export multiple figures as PNGs to *output_dir*.

    Parameters
    ----------
    figures : dict
        ``{filename: Figure}``; ``.png`` is appended when missing.
    output_dir : str
        Directory to write PNG files into (created if needed).
    dpi : int, optional
        Defaults to the configured export DPI.

    Returns
    -------
    list of str
        Paths of exported files.
    """
    dpi = dpi or get_config().export_dpi
    # Encode everything first so a failure writes nothing at all
    encoded = []
    for name, fig in figures.items():
        safe_name = "".join(
            c if c.isalnum() or c in '-_. ' else '_'
            for c in name
        ).strip().replace(' ', '_')
        if not safe_name.lower().endswith('.png'):
            safe_name += '.png'
        encoded.append((os.path.join(output_dir, safe_name), figure_to_png(fig, dpi)))

    paths = []
    for filepath, data in encoded:
        write_bytes_atomic(filepath, data)
        paths.append(filepath)
    return paths


def export_pane_images(
    view_state: ViewState,
    output_dir: str,
    filenames: Dict[Pane, str],
    resolution: Optional[Tuple[int, int]] = None,
    dpi: Optional[int] = None,
) -> List[str]:
    """Export several panes of *view_state* as PNGs into *output_dir*.

    Each pane is rendered from its own snapshot, so the images show the
    same pan / zoom window as the screen.  Panes with nothing plotted are
    skipped, and every image is encoded before the first file is written.

    Returns
    -------
    list of str
        Paths of exported files.
    """
    config = get_config()
    resolution = resolution or config.export_resolution
    dpi = dpi or config.export_dpi

    encoded = []
    for pane, filename in filenames.items():
        snapshot = view_state.snapshot(pane)
        if not snapshot.plot_data.series:
            continue
        encoded.append((
            os.path.join(output_dir, filename),
            render_snapshot_png(snapshot, resolution, dpi),
        ))

    paths = []
    for filepath, data in encoded:
        write_bytes_atomic(filepath, data)
        paths.append(filepath)
    return paths


def themed_export_figure(theme: Theme, resolution: Tuple[int, int], dpi: int) -> Figure:
    """Off-screen figure created under *theme*'s rcParams."""
    with matplotlib.rc_context(plot_style(theme)):
        return new_export_figure(resolution, dpi)
