import pytest

from calviz.data_model import CalibrationDataset, VariableSeries
from calviz.errors import InvalidArgument
from calviz.filter_engine import (
    matching_variables, parse_filter_terms, rank_variables, select_variables,
)


@pytest.fixture
def ranked_dataset():
    return CalibrationDataset(
        iterations=(0, 1),
        variables={
            "temp_inlet": VariableSeries("temp_inlet", error=(1.0, -0.3)),
            "temp_outlet": VariableSeries("temp_outlet", error=(2.0, 0.1)),
            "Pressure": VariableSeries("Pressure", error=(5.0, None)),
            "flow": VariableSeries("flow", value=(10.0, -40.0)),
            "gain": VariableSeries("gain", value=(1.0, 2.0)),
            "blank": VariableSeries("blank", error=(None, None)),
            "tie_b": VariableSeries("tie_b", error=(0.0, 0.3)),
        },
    )


def test_scenario_filter_selects_a(scenario_dataset):
    assert select_variables(scenario_dataset, ["A"], 5) == ["A"]


def test_parse_filter_terms_trims_and_drops_empty():
    assert parse_filter_terms(" temp , ,Press ") == ["temp", "Press"]
    assert parse_filter_terms("") == []


def test_matching_is_case_insensitive_any(ranked_dataset):
    assert matching_variables(ranked_dataset, ["PRESS", "outlet"]) == [
        "Pressure", "temp_outlet",
    ]


def test_no_terms_matches_everything(ranked_dataset):
    assert matching_variables(ranked_dataset, []) == ranked_dataset.sorted_names()


def test_ranking_tiers_and_ties(ranked_dataset):
    ranked = rank_variables(ranked_dataset, ranked_dataset.sorted_names())
    assert ranked == [
        "Pressure",      # |5.0| (last present error)
        "temp_inlet",    # |-0.3|
        "tie_b",         # 0.3, tie broken by name
        "temp_outlet",   # 0.1
        "flow",          # value only, |-40|
        "gain",          # value only, |2|
        "blank",         # no present data
    ]


def test_max_vars_truncates(ranked_dataset):
    assert select_variables(ranked_dataset, ["temp"], 1) == ["temp_inlet"]


def test_unmatched_filter_is_empty_not_error(ranked_dataset):
    assert select_variables(ranked_dataset, ["nothing"], 10) == []


@pytest.mark.parametrize("max_vars", [0, -3])
def test_non_positive_max_vars_rejected(scenario_dataset, max_vars):
    with pytest.raises(InvalidArgument):
        select_variables(scenario_dataset, [], max_vars)


def test_selection_has_no_duplicates(ranked_dataset):
    result = select_variables(ranked_dataset, ["temp", "temp_in", "TEMP"], 20)
    assert sorted(result) == ["temp_inlet", "temp_outlet"]
    assert len(result) == len(set(result))
