import math

import pytest

from calviz.data_model import CalibrationDataset, VariableSeries
from calviz.errors import InvalidArgument
from calviz.summary import (
    format_summary, improvement_percentage, summarize, total_error_by_iteration,
)


def test_scenario_improvement(scenario_dataset):
    result = summarize(scenario_dataset)

    assert result.iteration_count == 3
    assert result.variable_count == 2
    assert result.total_error_first == pytest.approx(0.5)
    assert result.total_error_last == pytest.approx(0.05)
    assert result.improvement_pct == pytest.approx(90.0)
    assert result.final_errors == {"A": pytest.approx(0.05), "B": None}
    assert result.top_errors == [("A", pytest.approx(0.05))]


def test_absent_cells_are_skipped_in_totals():
    ds = CalibrationDataset(
        iterations=(0, 1),
        variables={
            "a": VariableSeries("a", error=(None, -2.0)),
            "b": VariableSeries("b", error=(1.0, None)),
        },
    )
    assert total_error_by_iteration(ds) == [1.0, 2.0]
    result = summarize(ds)
    assert result.final_errors == {"a": 2.0, "b": 1.0}
    assert result.improvement_pct == pytest.approx(-100.0)


def test_increasing_error_gives_negative_improvement():
    ds = CalibrationDataset(
        iterations=(0, 1, 2),
        variables={
            "a": VariableSeries("a", error=(0.1, 0.2, 0.4)),
            "b": VariableSeries("b", error=(-0.1, 0.3, -0.6)),
        },
    )
    assert total_error_by_iteration(ds) == pytest.approx([0.2, 0.5, 1.0])
    result = summarize(ds)
    assert result.improvement_pct < 0
    assert result.improvement_pct == pytest.approx(-400.0)


def test_decreasing_error_across_variables():
    ds = CalibrationDataset(
        iterations=(0, 5, 10),
        variables={
            "a": VariableSeries("a", error=(2.0, 1.0, 0.5), value=(1.0, 1.5, 1.75)),
            "b": VariableSeries("b", error=(-2.0, -0.5, 0.0)),
            "c": VariableSeries("c", value=(4.0, 4.0, 4.0)),
        },
    )
    assert total_error_by_iteration(ds) == pytest.approx([4.0, 1.5, 0.5])
    result = summarize(ds)
    assert result.variable_count == 3
    assert result.improvement_pct == pytest.approx(87.5)
    assert result.top_errors == [("a", 0.5), ("b", 0.0)]


def test_top_n_ranks_descending_with_name_ties():
    ds = CalibrationDataset(
        iterations=(0,),
        variables={
            name: VariableSeries(name, error=(err,))
            for name, err in [("c", 0.1), ("b", -0.5), ("a", 0.5), ("d", 0.0)]
        },
    )
    result = summarize(ds, top_n=3)
    assert [name for name, _ in result.top_errors] == ["a", "b", "c"]


def test_zero_initial_error_is_undefined():
    assert improvement_percentage(0.0, 0.0) == 0.0
    assert math.isnan(improvement_percentage(0.0, 1.0))

    ds = CalibrationDataset(
        iterations=(0, 1),
        variables={"a": VariableSeries("a", error=(0.0, 1.0))},
    )
    result = summarize(ds)
    assert not result.improvement_defined
    assert "undefined" in format_summary(result)


def test_non_positive_top_n_rejected(scenario_dataset):
    with pytest.raises(InvalidArgument):
        summarize(scenario_dataset, top_n=0)


def test_format_summary_lists_top_variables(scenario_dataset):
    text = format_summary(summarize(scenario_dataset))
    assert "Iterations:            3" in text
    assert "Improvement:           90.00%" in text
    assert "1. A" in text
