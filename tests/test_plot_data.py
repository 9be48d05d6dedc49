import math

import numpy as np
import pytest

from calviz.colors import ColorAssignment
from calviz.data_model import CalibrationDataset, SeriesKind, VariableSeries
from calviz.plot_data import PlotBounds, build_plot_data


def _build(ds, selection, kind):
    return build_plot_data(ds, selection, ColorAssignment.for_dataset(ds), kind)


def test_value_only_variable_is_omitted_from_error_pane(scenario_dataset):
    error = _build(scenario_dataset, ["A", "B"], SeriesKind.ERROR)
    value = _build(scenario_dataset, ["A", "B"], SeriesKind.VALUE)
    assert error.names == ("A",)
    assert value.names == ("A", "B")


def test_error_pane_plots_absolute_values():
    ds = CalibrationDataset(
        iterations=(0, 1),
        variables={"a": VariableSeries("a", error=(-0.5, 0.25), value=(-1.0, 2.0))},
    )
    error = _build(ds, ["a"], SeriesKind.ERROR).series[0]
    value = _build(ds, ["a"], SeriesKind.VALUE).series[0]
    assert list(error.y) == [0.5, 0.25]
    assert list(value.y) == [-1.0, 2.0]


def test_absent_cells_become_gaps(scenario_dataset):
    line = _build(scenario_dataset, ["B"], SeriesKind.VALUE).series[0]
    assert math.isnan(line.y[1])
    assert line.n_points == 2
    assert list(line.points()) == [(0, 3.0), (2, 2.0)]


def test_order_follows_selection_and_unknown_names_are_skipped(scenario_dataset):
    data = _build(scenario_dataset, ["B", "missing", "A", "B"], SeriesKind.VALUE)
    assert data.names == ("B", "A")


def test_all_absent_series_is_omitted():
    ds = CalibrationDataset(
        iterations=(0, 1),
        variables={"a": VariableSeries("a", error=(None, None))},
    )
    data = _build(ds, ["a"], SeriesKind.ERROR)
    assert not data
    assert data.bounds is None


def test_colors_match_assignment(scenario_dataset):
    colors = ColorAssignment.for_dataset(scenario_dataset)
    data = build_plot_data(scenario_dataset, ["A", "B"], colors, SeriesKind.VALUE)
    assert [s.color for s in data.series] == [colors.color_for("A"), colors.color_for("B")]


def test_bounds_cover_all_series(scenario_dataset):
    data = _build(scenario_dataset, ["A", "B"], SeriesKind.VALUE)
    assert data.bounds == PlotBounds(0.0, 2.0, 1.0, 3.0)


def test_padding_widens_degenerate_spans():
    padded = PlotBounds(3.0, 3.0, 0.0, 0.0).padded()
    assert padded.width > 0 and padded.height > 0
    assert padded.center == pytest.approx((3.0, 0.0))

    padded = PlotBounds(0.0, 10.0, 0.0, 1.0).padded(0.1)
    assert padded == PlotBounds(-1.0, 11.0, -0.1, 1.1)


def test_x_is_iteration_index():
    ds = CalibrationDataset(
        iterations=(5, 10, 20),
        variables={"a": VariableSeries("a", value=(1.0, 2.0, 3.0))},
    )
    line = _build(ds, ["a"], SeriesKind.VALUE).series[0]
    np.testing.assert_array_equal(line.x, [5.0, 10.0, 20.0])
