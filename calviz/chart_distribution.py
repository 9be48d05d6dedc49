"""
Final-error distribution histogram for the Calibration Report Visualizer.

Shows how the absolute error at the last present iteration is spread
across all variables that carry an error series.  Errors span many
orders of magnitude, so the histogram is drawn over ``log10(|error|)``;
exact zeros are counted separately in the statistics box.
"""

import numpy as np
from matplotlib.figure import Figure

from .chart_lines import style_axes
from .config import Theme
from .data_model import CalibrationDataset, SeriesKind
from .errors import EmptySelection
from .theme import plot_style, theme_colors


def final_abs_errors(dataset: CalibrationDataset) -> np.ndarray:
    """``abs(last present error)`` of every variable that has one."""
    values = []
    for name in dataset.sorted_names():
        last = dataset.series(name).last_present(SeriesKind.ERROR)
        if last is not None:
            values.append(abs(last))
    return np.array(values, dtype=float)


def render_error_distribution(
    fig: Figure,
    dataset: CalibrationDataset,
    *,
    theme: Theme = Theme.LIGHT,
) -> None:
    """Render the final-error histogram on *fig*.

    Parameters
    ----------
    fig : matplotlib.figure.Figure
        Figure to draw on (will be cleared).
    dataset : CalibrationDataset
    theme : Theme
        Colour theme.

    Raises
    ------
    EmptySelection
        If no variable has error data.
    """
    errors = final_abs_errors(dataset)
    if errors.size == 0:
        raise EmptySelection("No variable has error data to plot")

    fig.clf()
    style = plot_style(theme)
    colors = theme_colors(theme)
    ax = fig.add_subplot(111)
    style_axes(fig, ax, theme)

    positive = errors[errors > 0]
    n_zero = int(errors.size - positive.size)

    if positive.size:
        logs = np.log10(positive)
        # Sturges' rule, capped at 50
        n_bins = min(50, max(10, int(np.ceil(np.log2(positive.size) + 1))))
        if np.ptp(logs) == 0:
            n_bins = 1
        ax.hist(
            logs, bins=n_bins, color=colors['accent'],
            edgecolor=style['axes.facecolor'], linewidth=0.5,
            zorder=3, alpha=0.85,
        )
        median = float(np.median(logs))
        ax.axvline(
            median, color=colors['red'], linewidth=1.5, linestyle='--',
            zorder=4, label=f'median = {10 ** median:.3g}',
        )
        legend = ax.legend(
            fontsize=style['legend.fontsize'], framealpha=0.9,
            facecolor=style['legend.facecolor'],
            edgecolor=style['legend.edgecolor'],
        )
        for text in legend.get_texts():
            text.set_color(style['text.color'])

    stats_text = (
        f"Variables: {errors.size}\n"
        f"Exactly zero: {n_zero}\n"
        f"Max |error|: {errors.max():.3g}\n"
        f"Mean |error|: {errors.mean():.3g}"
    )
    ax.text(
        0.98, 0.95, stats_text,
        transform=ax.transAxes, ha='right', va='top',
        fontsize=8, family='monospace',
        color=style['text.color'],
        bbox=dict(
            boxstyle='round,pad=0.4',
            facecolor=style['legend.facecolor'],
            edgecolor=style['legend.edgecolor'],
            alpha=0.9,
        ),
    )

    ax.set_xlabel("log10(final absolute error)")
    ax.set_ylabel("Variables")
    ax.set_title("Final Error Distribution", fontweight='bold')
    ax.grid(axis='y', linewidth=0.4, alpha=0.5, color=style['grid.color'])

    fig.tight_layout(pad=1.5)
