"""
Convergence summary statistics for the Calibration Report Visualizer.

``summarize`` is a pure function of the dataset: iteration and variable
counts, each variable's final absolute error, the top-N ranking, and the
total absolute error at the first and last iteration together with the
improvement percentage.  Absent cells are skipped, never counted as 0.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .constants import DEFAULT_TOP_N
from .data_model import CalibrationDataset, SeriesKind
from .errors import InvalidArgument


@dataclass(frozen=True)
class SummaryResult:
    """Aggregate convergence statistics.

    Parameters
    ----------
    iteration_count : int
    variable_count : int
        Variables with at least one present value in either series.
    final_errors : dict
        ``{name: abs(last present error) or None}`` for every variable.
    top_errors : list of (str, float)
        Largest final absolute errors, descending, ties by name.
    total_error_first, total_error_last : float
        Sum of ``abs(error)`` over present entries at the first / last
        iteration.
    improvement_pct : float
        ``(first - last) / first * 100``; ``0.0`` when both totals are
        zero and ``NaN`` when only the first is zero.
    """
    iteration_count: int
    variable_count: int
    final_errors: Dict[str, Optional[float]]
    top_errors: List[Tuple[str, float]]
    total_error_first: float
    total_error_last: float
    improvement_pct: float

    @property
    def improvement_defined(self) -> bool:
        return not math.isnan(self.improvement_pct)


def total_error_at(dataset: CalibrationDataset, index: int) -> float:
    """Sum of ``abs(error)`` over variables present at position *index*."""
    total = 0.0
    for var in dataset.variables.values():
        if var.error is None:
            continue
        value = var.error[index]
        if value is not None:
            total += abs(value)
    return total


def total_error_by_iteration(dataset: CalibrationDataset) -> List[float]:
    """Total absolute error for every iteration, in dataset order."""
    return [total_error_at(dataset, i) for i in range(dataset.n_iterations)]


def improvement_percentage(first: float, last: float) -> float:
    """Relative reduction of total error from *first* to *last*, in %."""
    if first == 0:
        return 0.0 if last == 0 else math.nan
    return (first - last) / first * 100.0


def summarize(dataset: CalibrationDataset, top_n: int = DEFAULT_TOP_N) -> SummaryResult:
    """Compute the ``SummaryResult`` of *dataset*.

    Raises
    ------
    InvalidArgument
        If ``top_n <= 0``.
    """
    if top_n <= 0:
        raise InvalidArgument(f"top-N must be at least 1, got {top_n}")

    final_errors: Dict[str, Optional[float]] = {}
    variable_count = 0
    for name in dataset.sorted_names():
        var = dataset.series(name)
        if var.has_present(SeriesKind.ERROR) or var.has_present(SeriesKind.VALUE):
            variable_count += 1
        last = var.last_present(SeriesKind.ERROR)
        final_errors[name] = abs(last) if last is not None else None

    ranked = sorted(
        ((name, err) for name, err in final_errors.items() if err is not None),
        key=lambda item: (-item[1], item[0]),
    )

    if dataset.n_iterations:
        first = total_error_at(dataset, 0)
        last = total_error_at(dataset, dataset.n_iterations - 1)
    else:
        first = last = 0.0

    return SummaryResult(
        iteration_count=dataset.n_iterations,
        variable_count=variable_count,
        final_errors=final_errors,
        top_errors=ranked[:top_n],
        total_error_first=first,
        total_error_last=last,
        improvement_pct=improvement_percentage(first, last),
    )


def format_summary(result: SummaryResult) -> str:
    """Render *result* as console text."""
    lines = [
        "Calibration Summary",
        "=" * 40,
        f"Iterations:            {result.iteration_count}",
        f"Variables:             {result.variable_count}",
        f"Total |error| (first): {result.total_error_first:.6g}",
        f"Total |error| (last):  {result.total_error_last:.6g}",
    ]
    if result.improvement_defined:
        lines.append(f"Improvement:           {result.improvement_pct:.2f}%")
    else:
        lines.append("Improvement:           undefined (initial total error is 0)")

    lines.append("")
    lines.append(f"Top {len(result.top_errors)} variables by final |error|:")
    if not result.top_errors:
        lines.append("  (no error data)")
    width = max((len(name) for name, _ in result.top_errors), default=0)
    for rank, (name, err) in enumerate(result.top_errors, start=1):
        lines.append(f"  {rank:>3}. {name:<{width}}  {err:.6g}")
    return "\n".join(lines)
