from calviz.csv_parser import load_calibration_csv
from calviz.data_model import SeriesKind
from calviz.example_data import generate_example_csv
from calviz.summary import summarize


def test_example_report_loads(tmp_path):
    path = generate_example_csv(str(tmp_path / "nested" / "report.csv"))
    ds = load_calibration_csv(path)

    assert ds.iterations == tuple(range(40))
    assert len(ds.variables) == 30
    names = ds.sorted_names()
    assert any(not ds.has_error(n) for n in names)
    assert any(not ds.has_value(n) for n in names)
    # Scattered blanks, but never in the first iteration
    assert any(
        None in ds.series(n).get(kind)
        for n in names for kind in SeriesKind
        if ds.series(n).get(kind) is not None
    )


def test_example_errors_converge(tmp_path):
    ds = load_calibration_csv(generate_example_csv(str(tmp_path / "r.csv")))
    assert summarize(ds).improvement_pct > 50.0


def test_example_is_reproducible(tmp_path):
    a = generate_example_csv(str(tmp_path / "a.csv"), n_variables=5, n_iterations=8)
    b = generate_example_csv(str(tmp_path / "b.csv"), n_variables=5, n_iterations=8)
    c = generate_example_csv(str(tmp_path / "c.csv"), n_variables=5,
                             n_iterations=8, seed=7)
    with open(a) as fa, open(b) as fb, open(c) as fc:
        text_a, text_b, text_c = fa.read(), fb.read(), fc.read()
    assert text_a == text_b
    assert text_a != text_c
