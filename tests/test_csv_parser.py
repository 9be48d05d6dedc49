import pytest

from calviz.csv_parser import load_calibration_csv, parse_calibration_rows
from calviz.data_model import SeriesKind
from calviz.errors import MalformedInput, MissingResource


def test_load_scenario_file(scenario_csv):
    ds = load_calibration_csv(scenario_csv)

    assert ds.iterations == (0, 1, 2)
    assert ds.sorted_names() == ["A", "B"]
    assert ds.series("A").error == (0.5, 0.2, 0.05)
    assert ds.series("B").error is None
    assert ds.series("B").value == (3.0, None, 2.0)
    assert ds.source == scenario_csv


def test_semicolon_delimiter_with_decimal_commas(write_csv):
    path = write_csv("Iteration;Error:x;Value:x\n0;0,5;1,25\n1;0,25;1,5\n")
    ds = load_calibration_csv(path)
    assert ds.series("x").error == (0.5, 0.25)
    assert ds.series("x").value == (1.25, 1.5)


def test_bom_blank_and_comment_lines_are_skipped(write_csv):
    path = write_csv(
        "# exported by calibrator\nIteration,Error:a\n\n0,1.0\n# mid\n1,0.5\n",
        encoding="utf-8-sig",
    )
    ds = load_calibration_csv(path)
    assert ds.iterations == (0, 1)
    assert ds.series("a").error == (1.0, 0.5)


def test_variable_names_are_trimmed_after_prefix(write_csv):
    path = write_csv("Iteration,Error: spaced ,Value: spaced\n0,1,2\n")
    ds = load_calibration_csv(path)
    assert ds.sorted_names() == ["spaced"]
    assert ds.has_error("spaced") and ds.has_value("spaced")


def test_integral_float_iteration_is_accepted(write_csv):
    ds = load_calibration_csv(write_csv("Iteration,Error:a\n0.0,1\n2.0,1\n"))
    assert ds.iterations == (0, 2)


def test_missing_file_raises_missing_resource(tmp_path):
    with pytest.raises(MissingResource) as exc:
        load_calibration_csv(str(tmp_path / "nope.csv"))
    assert isinstance(exc.value, FileNotFoundError)
    assert "nope.csv" in str(exc.value)


def test_empty_file_is_malformed(write_csv):
    with pytest.raises(MalformedInput, match="empty"):
        load_calibration_csv(write_csv(""))


def test_header_only_has_no_records(write_csv):
    with pytest.raises(MalformedInput, match="No records found in file"):
        load_calibration_csv(write_csv("Iteration,Error:a\n"))


def test_missing_iteration_column(write_csv):
    with pytest.raises(MalformedInput, match="Iteration"):
        load_calibration_csv(write_csv("Step,Error:a\n0,1\n"))


def test_duplicate_series_column(write_csv):
    with pytest.raises(MalformedInput, match="Duplicate"):
        load_calibration_csv(write_csv("Iteration,Error:a,Error:a\n0,1,2\n"))


def test_non_numeric_cell_reports_location(write_csv):
    path = write_csv("Iteration,Error:a\n0,0.5\n1,abc\n")
    with pytest.raises(MalformedInput) as exc:
        load_calibration_csv(path)
    assert exc.value.row == 3
    assert exc.value.column == "Error:a"
    assert "line 3" in str(exc.value)


def test_row_length_mismatch(write_csv):
    with pytest.raises(MalformedInput, match="cells"):
        load_calibration_csv(write_csv("Iteration,Error:a,Value:a\n0,1\n"))


@pytest.mark.parametrize("rows", ["0,1\n0,1\n", "1,1\n0,1\n", "-1,1\n", "1.5,1\n", ",1\n"])
def test_bad_iteration_sequences(write_csv, rows):
    with pytest.raises(MalformedInput):
        load_calibration_csv(write_csv("Iteration,Error:a\n" + rows))


def test_unrecognised_columns_warn_and_are_ignored(write_csv):
    path = write_csv("Iteration,Notes,Error:a\n0,first,1\n")
    with pytest.warns(UserWarning, match="Notes"):
        ds = load_calibration_csv(path)
    assert ds.sorted_names() == ["a"]


def test_no_usable_columns(write_csv):
    with pytest.warns(UserWarning):
        with pytest.raises(MalformedInput, match="usable"):
            load_calibration_csv(write_csv("Iteration,Notes\n0,x\n"))


def test_progress_reported_every_hundred_rows():
    headers = ["Iteration", "Error:a"]
    rows = [[str(i), "1.0"] for i in range(250)]
    seen = []
    ds = parse_calibration_rows(headers, rows, progress=seen.append)
    assert seen == [100, 200]
    assert ds.n_iterations == 250


def test_failed_load_returns_nothing_partial():
    rows = [["0", "1"], ["1", "2"], ["2", "oops"]]
    with pytest.raises(MalformedInput) as exc:
        parse_calibration_rows(["Iteration", "Value:v"], rows)
    assert exc.value.row == 4


def test_absent_cells_are_none_not_zero():
    ds = parse_calibration_rows(
        ["Iteration", "Error:a"], [["0", ""], ["1", "0"]],
    )
    assert ds.series("a").error == (None, 0.0)
    assert ds.series("a").last_present(SeriesKind.ERROR) == 0.0


def test_comma_file_with_semicolon_and_tab_in_names(write_csv):
    path = write_csv("Iteration,Error:k;1,Value:k;1,Value:t\tab\n0,0.5,1.5,2\n")
    ds = load_calibration_csv(path)
    assert ds.sorted_names() == ["k;1", "t\tab"]
    assert ds.series("k;1").error == (0.5,)
    assert ds.series("t\tab").value == (2.0,)


def test_tab_delimited_file(write_csv):
    ds = load_calibration_csv(write_csv("Iteration\tError:a\n0\t0,5\n1\t0.25\n"))
    assert ds.series("a").error == (0.5, 0.25)


def test_quoted_comma_in_comma_file_is_not_a_decimal(write_csv):
    path = write_csv('Iteration,Error:a\n0,"1,234"\n')
    with pytest.raises(MalformedInput) as exc:
        load_calibration_csv(path)
    assert exc.value.row == 2
    assert "1,234" in str(exc.value)


def test_quoted_fields_may_span_lines(write_csv):
    path = write_csv('Iteration,"Error:multi\nline",Value:b\n0,0.5,1\n1,0.25,\n2,x,1\n')
    with pytest.raises(MalformedInput) as exc:
        load_calibration_csv(path)
    # Physical line numbers account for the two-line header
    assert exc.value.row == 5

    ds = load_calibration_csv(write_csv(
        'Iteration,"Error:multi\nline",Value:b\n0,0.5,1\n1,0.25,\n', name="ok.csv",
    ))
    assert ds.series("multi\nline").error == (0.5, 0.25)
    assert ds.series("b").value == (1.0, None)


def test_invalid_utf8_is_malformed_input(tmp_path):
    path = tmp_path / "report.csv"
    path.write_bytes(b"Iteration,Error:A\n0,0.5\n1,\xff\xfe\n")
    with pytest.raises(MalformedInput, match="UTF-8") as exc:
        load_calibration_csv(str(path))
    assert exc.value.row == 3


@pytest.mark.parametrize("cell", ["NaN", "nan", "inf", "-Infinity"])
def test_non_finite_cells_are_missing(write_csv, cell):
    ds = load_calibration_csv(write_csv(f"Iteration,Error:a\n0,0.5\n1,{cell}\n2,0.1\n"))
    assert ds.series("a").error == (0.5, None, 0.1)


def test_non_finite_iteration_is_rejected(write_csv):
    with pytest.raises(MalformedInput, match="not an integer"):
        load_calibration_csv(write_csv("Iteration,Error:a\n0,1\nnan,1\n"))


def test_decimal_comma_only_when_requested():
    headers = ["Iteration", "Value:v"]
    with pytest.raises(MalformedInput):
        parse_calibration_rows(headers, [["0", "3,5"]])
    ds = parse_calibration_rows(headers, [["0", "3,5"]], decimal_comma=True)
    assert ds.series("v").value == (3.5,)
