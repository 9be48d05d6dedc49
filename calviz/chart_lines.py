"""
Convergence line charts for the Calibration Report Visualizer.

One renderer serves both panes: "Error Convergence" (``abs(error)`` per
iteration) and "Value Evolution" (raw value per iteration).  Each selected
variable is one line in its assigned colour; absent cells are ``NaN`` and
show up as breaks in the line.
"""

from typing import Optional

from matplotlib.figure import Figure

from .config import Theme
from .constants import LINE_WIDTH, MAX_LEGEND_ENTRIES
from .data_model import SeriesKind
from .plot_data import PlotBounds, PlotData
from .theme import plot_style

PANE_TITLES = {
    SeriesKind.ERROR: "Error Convergence",
    SeriesKind.VALUE: "Value Evolution",
}
PANE_YLABELS = {
    SeriesKind.ERROR: "Absolute Error",
    SeriesKind.VALUE: "Value",
}


def style_axes(fig: Figure, ax, theme: Theme) -> None:
    """Colour *fig* / *ax* explicitly from *theme*'s style dict.

    Figures can outlive a theme switch (GUI canvases), so colours are set
    on the artists rather than relying on rcParams at creation time.
    """
    style = plot_style(theme)
    fig.set_facecolor(style['figure.facecolor'])
    ax.set_facecolor(style['axes.facecolor'])
    for spine in ax.spines.values():
        spine.set_edgecolor(style['axes.edgecolor'])
    ax.tick_params(axis='x', colors=style['xtick.color'],
                   labelsize=style['xtick.labelsize'])
    ax.tick_params(axis='y', colors=style['ytick.color'],
                   labelsize=style['ytick.labelsize'])
    ax.xaxis.label.set_color(style['axes.labelcolor'])
    ax.yaxis.label.set_color(style['axes.labelcolor'])
    ax.title.set_color(style['text.color'])


def render_line_chart(
    fig: Figure,
    plot_data: PlotData,
    *,
    theme: Theme = Theme.LIGHT,
    view_bounds: Optional[PlotBounds] = None,
    title: Optional[str] = None,
) -> None:
    """Render the line series of one pane on *fig*.

    Parameters
    ----------
    fig : matplotlib.figure.Figure
        Figure to draw on (will be cleared).
    plot_data : PlotData
        Output of ``build_plot_data`` for the pane.
    theme : Theme
        Colour theme for background, axes and text.
    view_bounds : PlotBounds, optional
        Visible window (from the pane's ``ViewTransform``).  When omitted
        the padded data bounds are used (fit-to-selection).
    title : str, optional
        Defaults to the pane's standard title.
    """
    fig.clf()
    style = plot_style(theme)
    kind = plot_data.kind
    ax = fig.add_subplot(111)
    style_axes(fig, ax, theme)

    ax.set_xlabel("Iteration")
    ax.set_ylabel(PANE_YLABELS[kind])
    ax.set_title(title or PANE_TITLES[kind], fontweight='bold')

    if not plot_data.series:
        ax.text(0.5, 0.5, 'No variables selected',
                transform=ax.transAxes, ha='center', va='center',
                color=style['text.color'])
        return

    for line in plot_data.series:
        # Lone points between gaps would be invisible without a marker
        n = line.n_points
        ax.plot(
            line.x, line.y,
            color=line.color.rgb_float,
            linewidth=LINE_WIDTH,
            marker='o' if n < 30 else None,
            markersize=3,
            label=line.name,
            zorder=3,
        )

    bounds = view_bounds or plot_data.bounds.padded()
    ax.set_xlim(bounds.x_min, bounds.x_max)
    ax.set_ylim(bounds.y_min, bounds.y_max)

    ax.grid(linewidth=0.4, alpha=0.5, color=style['grid.color'])

    handles, labels = ax.get_legend_handles_labels()
    if len(handles) > MAX_LEGEND_ENTRIES:
        hidden = len(handles) - (MAX_LEGEND_ENTRIES - 1)
        handles = handles[:MAX_LEGEND_ENTRIES]
        labels = labels[:MAX_LEGEND_ENTRIES]
        labels[-1] = f"... ({hidden} more)"
    legend = ax.legend(
        handles, labels,
        loc='upper left',
        bbox_to_anchor=(1.01, 1.0),
        fontsize=style['legend.fontsize'],
        framealpha=0.9,
        facecolor=style['legend.facecolor'],
        edgecolor=style['legend.edgecolor'],
    )
    for text in legend.get_texts():
        text.set_color(style['text.color'])

    fig.tight_layout(pad=1.5)

