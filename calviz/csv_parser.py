"""
CSV parser for the Calibration Report Visualizer.

Loads a calibration report (``Iteration,Error:<name>,…,Value:<name>,…``)
into a ``CalibrationDataset``.  Handles:

- Comma-separated files as the primary format, with semicolon and tab
  files recognised from the header row
- European locale decimal-comma parsing (semicolon / tab files only)
- Quoted fields, including names with delimiters or line breaks
- UTF-8 BOM markers
- Blank and non-finite cells (mapped to ``None``)
- Header schema inference: ``Iteration`` / ``Error:*`` / ``Value:*``
  columns are used, anything else is ignored with a warning

Loading is all-or-nothing: any structural problem raises
``MalformedInput`` and no partial dataset is ever returned.
"""

import csv
import io
import logging
import math
import os
import warnings
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .constants import (
    ITERATION_HEADER, ERROR_PREFIX, VALUE_PREFIX,
    LOAD_PROGRESS_STEP, LARGE_FILE_BYTES,
)
from .data_model import CalibrationDataset, SeriesKind, VariableSeries
from .errors import MalformedInput, MissingResource

logger = logging.getLogger(__name__)

# Optional hook called as progress(rows_parsed); loaders running in a
# worker thread use it to report back without touching UI state.
ProgressCallback = Callable[[int], None]

# Tried in order; the first one whose header row has an Iteration cell wins
_DELIMITERS = (',', ';', '\t')


# ── Locale-safe float parsing ────────────────────────────────────────────

def _locale_float(text: str, decimal_comma: bool = True) -> float:
    """Parse a numeric string that may use comma as decimal separator.

    Handles:
    - Standard period decimals: ``"3.14"``
    - European comma decimals: ``"3,14"``
    - Thousand separators: ``"1,234.56"`` / ``"1.234,56"``

    With ``decimal_comma=False`` only plain ``float`` syntax is accepted.
    Raises ``ValueError`` for non-numeric strings.
    """
    s = text.strip()
    if not s:
        raise ValueError("empty string")
    if decimal_comma:
        # If both '.' and ',' are present, the last one is the decimal
        if ',' in s and '.' in s:
            if s.rfind(',') > s.rfind('.'):
                s = s.replace('.', '').replace(',', '.')
            else:
                s = s.replace(',', '')
        elif ',' in s:
            s = s.replace(',', '.')
    return float(s)


def _parse_iteration(text: str, decimal_comma: bool = False) -> int:
    """Parse an iteration index; accepts ``"3"`` and integral ``"3.0"``."""
    s = text.strip()
    try:
        return int(s)
    except ValueError:
        pass
    value = _locale_float(s, decimal_comma)
    if not value.is_integer():
        raise ValueError(f"iteration is not an integer: {s!r}")
    return int(value)


# ── Tokenising ───────────────────────────────────────────────────────────

def _iter_records(
    lines: Iterable[str], delimiter: str,
) -> Iterator[Tuple[int, List[str]]]:
    """Yield ``(line_no, cells)`` for every non-blank, non-comment record.

    ``line_no`` is the physical line on which the record ends, so it
    matches the file for ordinary single-line records.
    """
    position = [0]

    def _content_lines():
        for line_no, line in enumerate(lines, start=1):
            position[0] = line_no
            if line.lstrip().startswith('#'):
                continue
            yield line

    reader = csv.reader(_content_lines(), delimiter=delimiter)
    while True:
        try:
            cells = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            raise MalformedInput(
                f"Unreadable CSV record: {exc}", row=position[0],
            ) from None
        if not cells or (len(cells) == 1 and not cells[0].strip()):
            continue
        yield position[0], cells


def _is_iteration_header(cell: str) -> bool:
    return cell.strip().lower() == ITERATION_HEADER.lower()


def _detect_delimiter(text: str) -> str:
    """Pick the delimiter that splits the header row into an Iteration cell.

    Comma is tried first, so a comma file keeps working when its variable
    names contain ``;`` or tabs.  Falls back to comma.
    """
    for delimiter in _DELIMITERS:
        records = _iter_records(io.StringIO(text, newline=''), delimiter)
        try:
            _, cells = next(records)
        except (StopIteration, MalformedInput):
            continue
        if any(_is_iteration_header(c) for c in cells):
            return delimiter
    return ','


# ── Header schema inference ──────────────────────────────────────────────

def _classify_header(header: str) -> Tuple[Optional[SeriesKind], str]:
    """Return ``(kind, variable_name)`` for a data column header.

    ``kind`` is ``None`` for headers that are not ``Error:``/``Value:``
    columns.
    """
    h = header.strip()
    if h.startswith(ERROR_PREFIX):
        return SeriesKind.ERROR, h[len(ERROR_PREFIX):].strip()
    if h.startswith(VALUE_PREFIX):
        return SeriesKind.VALUE, h[len(VALUE_PREFIX):].strip()
    return None, h


def _infer_schema(
    headers: Sequence[str],
) -> Tuple[int, Dict[Tuple[str, SeriesKind], int]]:
    """Locate the iteration column and all series columns.

    Returns
    -------
    iteration_col : int
        Index of the ``Iteration`` column.
    columns : dict
        ``{(variable_name, kind): column_index}`` in header order.
    """
    iteration_cols = [i for i, h in enumerate(headers) if _is_iteration_header(h)]
    if not iteration_cols:
        raise MalformedInput(
            f"Header has no '{ITERATION_HEADER}' column", row=1,
        )
    if len(iteration_cols) > 1:
        raise MalformedInput(
            f"Header has {len(iteration_cols)} '{ITERATION_HEADER}' "
            f"columns, expected exactly one", row=1,
        )

    columns: Dict[Tuple[str, SeriesKind], int] = {}
    ignored: List[str] = []
    for i, header in enumerate(headers):
        if i == iteration_cols[0]:
            continue
        kind, name = _classify_header(header)
        if kind is None:
            ignored.append(header)
            continue
        if not name:
            raise MalformedInput(
                "Column has an empty variable name", row=1, column=header,
            )
        if (name, kind) in columns:
            raise MalformedInput(
                f"Duplicate {kind.label} column for variable '{name}'",
                row=1, column=header,
            )
        columns[(name, kind)] = i

    if ignored:
        shown = ", ".join(repr(h) for h in ignored[:5])
        if len(ignored) > 5:
            shown += f" ... and {len(ignored) - 5} more"
        message = f"Ignoring {len(ignored)} unrecognised column(s): {shown}"
        logger.warning(message)
        warnings.warn(message, stacklevel=3)

    if not columns:
        raise MalformedInput(
            f"Header has no usable '{ERROR_PREFIX}<name>' or "
            f"'{VALUE_PREFIX}<name>' columns", row=1,
        )
    return iteration_cols[0], columns


# ── Row parsing / dataset assembly ───────────────────────────────────────

def parse_calibration_rows(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    *,
    source: str = "",
    line_numbers: Optional[Sequence[int]] = None,
    progress: Optional[ProgressCallback] = None,
    decimal_comma: bool = False,
) -> CalibrationDataset:
    """Build a ``CalibrationDataset`` from an already tokenised table.

    Parameters
    ----------
    headers : sequence of str
        Header row.
    rows : sequence of sequence of str
        Data rows, one per iteration, each with ``len(headers)`` cells.
    source : str
        Label stored on the dataset (usually the file path).
    line_numbers : sequence of int, optional
        Source line number of each row, used in error messages.  Defaults
        to consecutive lines starting after the header.
    progress : callable, optional
        Called with the number of rows parsed so far, every
        ``LOAD_PROGRESS_STEP`` rows.
    decimal_comma : bool
        Accept ``"3,14"`` style cells.  Only safe when the cells were not
        split on commas.

    Returns
    -------
    CalibrationDataset

    Raises
    ------
    MalformedInput
        If the header or any row is invalid.  Nothing is returned in that
        case; the load is all-or-nothing.
    """
    headers = [h.strip() for h in headers]
    iteration_col, columns = _infer_schema(headers)
    n_cols = len(headers)

    if not rows:
        raise MalformedInput("No records found in file")

    iterations: List[int] = []
    non_finite = 0
    cells: Dict[Tuple[str, SeriesKind], List[Optional[float]]] = {
        key: [] for key in columns
    }

    for offset, row in enumerate(rows):
        line_no = line_numbers[offset] if line_numbers else offset + 2
        if len(row) != n_cols:
            raise MalformedInput(
                f"Row has {len(row)} cells but the header has {n_cols}",
                row=line_no,
            )

        raw_iter = row[iteration_col].strip()
        if not raw_iter:
            raise MalformedInput(
                "Missing iteration index", row=line_no,
                column=headers[iteration_col],
            )
        try:
            iteration = _parse_iteration(raw_iter, decimal_comma)
        except ValueError:
            raise MalformedInput(
                f"Iteration index {raw_iter!r} is not an integer",
                row=line_no, column=headers[iteration_col],
            ) from None
        if iteration < 0:
            raise MalformedInput(
                f"Iteration index {iteration} is negative",
                row=line_no, column=headers[iteration_col],
            )
        if iterations and iteration <= iterations[-1]:
            raise MalformedInput(
                f"Iteration {iteration} does not increase after "
                f"{iterations[-1]}",
                row=line_no, column=headers[iteration_col],
            )
        iterations.append(iteration)

        for key, col in columns.items():
            cell = row[col].strip()
            if not cell:
                cells[key].append(None)
                continue
            try:
                value = _locale_float(cell, decimal_comma)
            except ValueError:
                raise MalformedInput(
                    f"Non-numeric value {cell!r}",
                    row=line_no, column=headers[col],
                ) from None
            # NaN / inf cells count as missing data
            if not math.isfinite(value):
                non_finite += 1
                value = None
            cells[key].append(value)

        parsed = offset + 1
        if parsed % LOAD_PROGRESS_STEP == 0:
            logger.debug("Loaded %d records...", parsed)
            if progress is not None:
                progress(parsed)

    if non_finite:
        logger.info("Treated %d non-finite cell(s) as missing", non_finite)

    # Group the columns by variable name (header order preserved)
    by_name: Dict[str, Dict[SeriesKind, Tuple[Optional[float], ...]]] = {}
    for (name, kind), values in cells.items():
        by_name.setdefault(name, {})[kind] = tuple(values)

    variables = {
        name: VariableSeries(
            name=name,
            error=series.get(SeriesKind.ERROR),
            value=series.get(SeriesKind.VALUE),
        )
        for name, series in by_name.items()
    }
    logger.info(
        "Finished loading %d records, %d variables%s",
        len(iterations), len(variables), f" from {source}" if source else "",
    )
    return CalibrationDataset(
        iterations=tuple(iterations),
        variables=variables,
        source=source,
    )


def load_calibration_csv(
    filepath: str,
    progress: Optional[ProgressCallback] = None,
) -> CalibrationDataset:
    """Load a calibration report CSV file.

    Blank lines and ``#`` comment lines are skipped.

    Raises
    ------
    MissingResource
        If *filepath* does not exist.
    MalformedInput
        If the file content is invalid.
    """
    if not os.path.isfile(filepath):
        raise MissingResource(f"Input file not found: {filepath}", filepath)

    file_size = os.path.getsize(filepath)
    if file_size > LARGE_FILE_BYTES:
        message = (
            f"File is very large ({file_size / (1024 * 1024):.0f} MB); "
            f"loading may take a while."
        )
        logger.warning(message)
        warnings.warn(message, stacklevel=2)

    logger.info("Starting to load file: %s", filepath)

    with open(filepath, 'rb') as fh:
        raw = fh.read()
    try:
        text = raw.decode('utf-8-sig')
    except UnicodeDecodeError as exc:
        raise MalformedInput(
            f"File is not valid UTF-8 text (byte 0x{exc.object[exc.start]:02x})",
            row=exc.object.count(b'\n', 0, exc.start) + 1,
        ) from None

    delimiter = _detect_delimiter(text)
    records = list(_iter_records(io.StringIO(text, newline=''), delimiter))
    if not records:
        raise MalformedInput(
            f"File '{os.path.basename(filepath)}' is empty"
        )

    _, headers = records[0]
    return parse_calibration_rows(
        headers, [cells for _, cells in records[1:]],
        source=filepath,
        line_numbers=[line_no for line_no, _ in records[1:]],
        progress=progress,
        decimal_comma=delimiter != ',',
    )
