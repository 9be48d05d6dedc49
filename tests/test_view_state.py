import pytest

from calviz.config import AppConfig, Theme
from calviz.data_model import CalibrationDataset, VariableSeries
from calviz.errors import InvalidArgument
from calviz.view_state import Pane, ViewPhase, ViewState, ViewTransform
from calviz.plot_data import PlotBounds


@pytest.fixture
def state():
    return ViewState(AppConfig(theme=Theme.DARK, max_vars=5))


@pytest.fixture
def loaded(state, scenario_dataset):
    state.load_dataset(scenario_dataset)
    return state


def test_initial_state_is_empty(state):
    assert state.phase is ViewPhase.EMPTY
    assert state.dataset is None
    assert state.selection == frozenset()
    assert not state.plot_data(Pane.ERROR)


def test_load_sets_default_selection(loaded, scenario_dataset):
    assert loaded.phase is ViewPhase.LOADED
    assert loaded.dataset is scenario_dataset
    assert loaded.selection == {"A", "B"}
    assert loaded.transform(Pane.ERROR).is_fit


def test_default_selection_uses_filter(state, scenario_dataset):
    state.set_filter("a")
    state.load_dataset(scenario_dataset)
    assert state.selection == {"A"}


def test_toggle_moves_to_interacting_and_refits(loaded):
    loaded.zoom(Pane.VALUE, 2.0)
    assert not loaded.transform(Pane.VALUE).is_fit

    assert loaded.toggle_variable("B") is False
    assert loaded.phase is ViewPhase.INTERACTING
    assert loaded.selection == {"A"}
    assert loaded.transform(Pane.VALUE).is_fit
    assert loaded.plot_data(Pane.VALUE).names == ("A",)


def test_unknown_variable_rejected(loaded):
    with pytest.raises(InvalidArgument):
        loaded.toggle_variable("nope")
    assert loaded.selection == {"A", "B"}


def test_selection_requires_dataset(state):
    with pytest.raises(InvalidArgument, match="No dataset"):
        state.select_all()
    with pytest.raises(InvalidArgument):
        state.pan(Pane.ERROR, 1.0, 0.0)


def test_select_all_and_clear(loaded):
    loaded.clear_selection()
    assert loaded.selection == frozenset()
    assert not loaded.plot_data(Pane.ERROR)

    loaded.set_filter("b")
    loaded.select_all()
    assert loaded.selection == {"B"}


def test_apply_filter_selection_respects_max_vars(loaded):
    loaded.set_filter("")
    loaded.set_max_vars(1)
    assert loaded.apply_filter_selection() == ["A"]
    assert loaded.selection == {"A"}


def test_set_max_vars_rejects_zero(loaded):
    with pytest.raises(InvalidArgument):
        loaded.set_max_vars(0)
    assert loaded.max_vars == 5


def test_pan_only_touches_one_pane(loaded):
    before = loaded.transform(Pane.ERROR).visible_bounds()
    loaded.pan(Pane.ERROR, 1.0, -0.5)
    after = loaded.transform(Pane.ERROR).visible_bounds()
    assert after.x_min == pytest.approx(before.x_min + 1.0)
    assert after.y_max == pytest.approx(before.y_max - 0.5)
    assert loaded.transform(Pane.VALUE).is_fit


def test_zoom_keeps_anchor_fixed():
    t = ViewTransform.fit_to(PlotBounds(0.0, 10.0, 0.0, 4.0))
    anchor = (2.0, 1.0)
    before = t.to_display(*anchor, 800, 600)
    zoomed = t.zoomed(2.5, anchor)
    assert zoomed.to_display(*anchor, 800, 600) == pytest.approx(before)
    assert zoomed.visible_bounds().width == pytest.approx(t.visible_bounds().width / 2.5)


def test_display_round_trip():
    t = ViewTransform.fit_to(PlotBounds(0.0, 10.0, -1.0, 1.0)).panned(0.3, 0.1)
    px, py = t.to_display(4.0, 0.25, 640, 480)
    assert t.from_display(px, py, 640, 480) == pytest.approx((4.0, 0.25))


@pytest.mark.parametrize("factor", [0, -1.0, (1.0, 0.0)])
def test_non_positive_zoom_rejected(loaded, factor):
    with pytest.raises(InvalidArgument):
        loaded.zoom(Pane.ERROR, factor)


def test_reset_view_returns_to_fit(loaded):
    loaded.zoom(Pane.ERROR, (2.0, 3.0), anchor=(1.0, 0.1))
    loaded.reset_view(Pane.ERROR)
    assert loaded.transform(Pane.ERROR).is_fit


def test_toggle_theme_keeps_colors(loaded):
    colors = loaded.colors.as_dict()
    assert loaded.toggle_theme() is Theme.LIGHT
    assert loaded.colors.as_dict() == colors
    assert loaded.snapshot(Pane.VALUE).theme is Theme.LIGHT


def test_stale_ticket_is_discarded(state, scenario_dataset):
    first = state.begin_load()
    second = state.begin_load()
    assert state.is_loading
    assert state.complete_load(first, scenario_dataset) is False
    assert state.dataset is None
    assert state.complete_load(second, scenario_dataset) is True
    assert state.dataset is scenario_dataset
    assert not state.is_loading


def test_cancelled_load_never_applies(state, scenario_dataset):
    ticket = state.begin_load()
    assert state.cancel_load() is True
    assert state.cancel_load() is False
    assert state.complete_load(ticket, scenario_dataset) is False
    assert state.phase is ViewPhase.EMPTY


def test_failed_load_keeps_previous_dataset(loaded, scenario_dataset):
    ticket = loaded.begin_load()
    assert loaded.fail_load(ticket, ValueError("bad")) is True
    assert loaded.dataset is scenario_dataset
    assert loaded.selection == {"A", "B"}


def test_reload_discards_selection_and_transforms(loaded):
    loaded.toggle_variable("A")
    loaded.pan(Pane.VALUE, 5.0, 5.0)
    replacement = CalibrationDataset(
        iterations=(0, 1),
        variables={"C": VariableSeries("C", error=(1.0, 0.5))},
    )
    loaded.load_dataset(replacement)
    assert loaded.phase is ViewPhase.LOADED
    assert loaded.selection == {"C"}
    assert loaded.transform(Pane.VALUE).is_fit


def test_snapshot_without_dataset_is_empty(state):
    snap = state.snapshot(Pane.ERROR)
    assert snap.plot_data.series == ()
    assert snap.dataset.n_iterations == 0
