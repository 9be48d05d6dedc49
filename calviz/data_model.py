"""
Data model for the Calibration Report Visualizer.

Immutable dataclasses representing a parsed calibration report.  The
dataset is constructed once by ``csv_parser`` and never mutated; the
filter, summary and plotting layers receive it read-only.  Reloading a
file builds a brand-new dataset.

Missing cells are modelled as ``None`` (not ``NaN`` and never ``0``).
A variable lacking a whole series (e.g. error-only) stores ``None`` in
place of that series.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Tuple

SeriesValues = Tuple[Optional[float], ...]


class SeriesKind(str, Enum):
    """Which of a variable's two series is meant."""
    ERROR = "error"
    VALUE = "value"

    @property
    def label(self) -> str:
        return "Error" if self is SeriesKind.ERROR else "Value"


@dataclass(frozen=True)
class VariableSeries:
    """Error and value series of one calibration variable.

    Parameters
    ----------
    name : str
        Variable identity: the column header with its ``Error:`` /
        ``Value:`` prefix stripped.
    error : tuple or None
        Per-iteration deviation from target, ``None`` entries for blank
        cells.  ``None`` if the file has no ``Error:<name>`` column.
    value : tuple or None
        Per-iteration parameter value, same conventions as *error*.
    """
    name: str
    error: Optional[SeriesValues] = None
    value: Optional[SeriesValues] = None

    def get(self, kind: SeriesKind) -> Optional[SeriesValues]:
        return self.error if kind is SeriesKind.ERROR else self.value

    def has_present(self, kind: SeriesKind) -> bool:
        """``True`` when the series exists and holds at least one number."""
        values = self.get(kind)
        return values is not None and any(v is not None for v in values)

    def last_present(self, kind: SeriesKind) -> Optional[float]:
        """Last non-absent entry of the series, or ``None``."""
        values = self.get(kind)
        if values is None:
            return None
        for v in reversed(values):
            if v is not None:
                return v
        return None


@dataclass(frozen=True, eq=False)
class CalibrationDataset:
    """Complete parsed calibration report.

    Parameters
    ----------
    iterations : tuple of int
        Iteration indices in file order (non-negative, strictly
        increasing).
    variables : mapping
        ``{name: VariableSeries}``; every present series has exactly
        ``len(iterations)`` entries.
    source : str
        Path (or label) the data was loaded from.
    """
    iterations: Tuple[int, ...]
    variables: Mapping[str, VariableSeries] = field(default_factory=dict)
    source: str = ""

    def __post_init__(self):
        n = len(self.iterations)
        for name, var in self.variables.items():
            for kind in SeriesKind:
                values = var.get(kind)
                if values is not None and len(values) != n:
                    raise ValueError(
                        f"{kind.label} series of '{name}' has {len(values)} "
                        f"entries, expected {n}"
                    )
        # Freeze the mapping so the dataset stays read-only
        object.__setattr__(
            self, 'variables', MappingProxyType(dict(self.variables))
        )

    @property
    def n_iterations(self) -> int:
        return len(self.iterations)

    @property
    def variable_names(self) -> FrozenSet[str]:
        return frozenset(self.variables)

    def sorted_names(self):
        """Variable names in canonical (lexicographic) order."""
        return sorted(self.variables)

    def series(self, name: str) -> VariableSeries:
        """Return the series pair of *name*; ``KeyError`` if unknown."""
        try:
            return self.variables[name]
        except KeyError:
            raise KeyError(f"Unknown variable: {name!r}") from None

    def has_error(self, name: str) -> bool:
        return name in self.variables and self.variables[name].error is not None

    def has_value(self, name: str) -> bool:
        return name in self.variables and self.variables[name].value is not None

    def __contains__(self, name) -> bool:
        return name in self.variables
