"""
Variable filtering and ranking for the Calibration Report Visualizer.

``select_variables`` turns free-text filter terms and a cap into the
ordered list of variables to plot:

1. Candidates: every name containing ANY term as a case-insensitive
   substring (all names when there are no terms).
2. Ranking: variables with error data first, by descending absolute
   final error; then variables with only value data, by descending
   absolute final value; ties broken by name.
3. Truncation to ``max_vars``.

A term matching nothing is a valid empty result, not an error.
"""

from typing import Iterable, List, Sequence, Tuple

from .constants import DEFAULT_MAX_VARS
from .data_model import CalibrationDataset, SeriesKind
from .errors import InvalidArgument


def parse_filter_terms(text: str) -> List[str]:
    """Split comma-separated filter text into trimmed, non-empty terms."""
    if not text:
        return []
    return [t.strip() for t in text.split(',') if t.strip()]


def _normalise_terms(filter_terms: Iterable[str]) -> List[str]:
    return [t.strip().lower() for t in filter_terms if t and t.strip()]


def matching_variables(
    dataset: CalibrationDataset,
    filter_terms: Sequence[str],
) -> List[str]:
    """Names matching any of *filter_terms*, in canonical (sorted) order."""
    terms = _normalise_terms(filter_terms)
    names = dataset.sorted_names()
    if not terms:
        return names
    return [n for n in names if any(t in n.lower() for t in terms)]


def _rank_key(dataset: CalibrationDataset, name: str) -> Tuple[int, float, str]:
    """Sort key: (tier, -magnitude, name).

    Tier 0 has a present error value; tier 1 only value data;
    tier 2 no present data at all.
    """
    var = dataset.series(name)
    final_error = var.last_present(SeriesKind.ERROR)
    if final_error is not None:
        return (0, -abs(final_error), name)
    final_value = var.last_present(SeriesKind.VALUE)
    if final_value is not None:
        return (1, -abs(final_value), name)
    return (2, 0.0, name)


def rank_variables(dataset: CalibrationDataset, names: Iterable[str]) -> List[str]:
    """Order *names* by final-iteration magnitude (see module docstring)."""
    return sorted(names, key=lambda n: _rank_key(dataset, n))


def select_variables(
    dataset: CalibrationDataset,
    filter_terms: Sequence[str] = (),
    max_vars: int = DEFAULT_MAX_VARS,
) -> List[str]:
    """Select and rank variables for plotting.

    Parameters
    ----------
    dataset : CalibrationDataset
    filter_terms : sequence of str
        Case-insensitive substrings, OR-combined.  Whitespace is trimmed
        and empty terms are ignored.
    max_vars : int
        Maximum number of names returned (must be >= 1).

    Returns
    -------
    list of str
        Ranked names, at most *max_vars* long; usable directly as the
        default selection.

    Raises
    ------
    InvalidArgument
        If ``max_vars <= 0``.
    """
    if max_vars <= 0:
        raise InvalidArgument(f"max-vars must be at least 1, got {max_vars}")
    candidates = matching_variables(dataset, filter_terms)
    return rank_variables(dataset, candidates)[:max_vars]
