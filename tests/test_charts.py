import pytest
from matplotlib.figure import Figure

from calviz.chart_distribution import final_abs_errors, render_error_distribution
from calviz.chart_lines import render_line_chart
from calviz.colors import ColorAssignment
from calviz.config import Theme
from calviz.constants import MAX_LEGEND_ENTRIES
from calviz.data_model import CalibrationDataset, SeriesKind, VariableSeries
from calviz.errors import EmptySelection
from calviz.plot_data import PlotBounds, PlotData, build_plot_data
from calviz.theme import get_stylesheet, plot_style, theme_colors


def _many_variables(n):
    return CalibrationDataset(
        iterations=(0, 1),
        variables={
            f"v{i:02d}": VariableSeries(f"v{i:02d}", error=(1.0 + i, 0.5 + i))
            for i in range(n)
        },
    )


def test_line_chart_labels_and_limits(scenario_dataset):
    data = build_plot_data(
        scenario_dataset, ["A"], ColorAssignment.for_dataset(scenario_dataset),
        SeriesKind.ERROR,
    )
    fig = Figure()
    render_line_chart(fig, data, theme=Theme.DARK,
                      view_bounds=PlotBounds(0.0, 1.0, 0.1, 0.4))
    ax = fig.axes[0]
    assert ax.get_title() == "Error Convergence"
    assert ax.get_xlabel() == "Iteration"
    assert ax.get_ylabel() == "Absolute Error"
    assert ax.get_xlim() == pytest.approx((0.0, 1.0))
    assert ax.get_ylim() == pytest.approx((0.1, 0.4))
    assert [t.get_text() for t in ax.get_legend().get_texts()] == ["A"]


def test_empty_line_chart_shows_placeholder():
    fig = Figure()
    render_line_chart(fig, PlotData(SeriesKind.VALUE, (), None))
    ax = fig.axes[0]
    assert ax.get_title() == "Value Evolution"
    assert any(t.get_text() == "No variables selected" for t in ax.texts)


def test_long_legend_is_truncated():
    ds = _many_variables(MAX_LEGEND_ENTRIES + 6)
    data = build_plot_data(ds, ds.sorted_names(), ColorAssignment.for_dataset(ds),
                           SeriesKind.ERROR)
    fig = Figure()
    render_line_chart(fig, data)
    labels = [t.get_text() for t in fig.axes[0].get_legend().get_texts()]
    assert len(labels) == MAX_LEGEND_ENTRIES
    assert labels[-1] == "... (7 more)"
    assert len(fig.axes[0].lines) == MAX_LEGEND_ENTRIES + 6


def test_error_distribution_uses_final_errors(scenario_dataset):
    assert list(final_abs_errors(scenario_dataset)) == [0.05]
    fig = Figure()
    render_error_distribution(fig, _many_variables(20), theme=Theme.LIGHT)
    assert fig.axes[0].get_title() == "Final Error Distribution"


def test_error_distribution_requires_error_data():
    ds = CalibrationDataset(
        iterations=(0,), variables={"b": VariableSeries("b", value=(1.0,))},
    )
    with pytest.raises(EmptySelection):
        render_error_distribution(Figure(), ds)


@pytest.mark.parametrize("theme", list(Theme))
def test_theme_tables_are_complete(theme):
    colors = theme_colors(theme)
    assert colors["bg"] in get_stylesheet(theme)
    assert "QListWidget" in get_stylesheet(theme)
    assert plot_style(theme)["legend.fontsize"] == 7
