"""
Exception types for the Calibration Report Visualizer.

Each error derives from the built-in type callers would naturally catch
(``ValueError`` for bad data / arguments, ``FileNotFoundError`` for
missing resources), so code written against plain Python exceptions keeps
working.
"""

from typing import Optional


class CalvizError(Exception):
    """Base class for all errors raised by ``calviz``."""


class MalformedInput(CalvizError, ValueError):
    """Header or row structure is invalid, or a numeric cell is not a number.

    Parameters
    ----------
    message : str
        Human-readable description.
    row : int, optional
        1-based line number in the source file (header is line 1).
    column : str, optional
        Header text of the offending column.
    """

    def __init__(self, message: str, *, row: Optional[int] = None,
                 column: Optional[str] = None):
        self.row = row
        self.column = column
        location = []
        if row is not None:
            location.append(f"line {row}")
        if column is not None:
            location.append(f"column '{column}'")
        if location:
            message = f"{message} ({', '.join(location)})"
        super().__init__(message)


class InvalidArgument(CalvizError, ValueError):
    """An operation argument is out of range (e.g. ``max_vars <= 0``)."""


class EmptySelection(CalvizError):
    """Export attempted while no variable is plotted in the pane."""


class MissingResource(CalvizError, FileNotFoundError):
    """Input file or rendering backend is unavailable."""

    def __init__(self, message: str, resource: str = ""):
        self.resource = resource
        super().__init__(message)

    def __str__(self):
        return self.args[0] if self.args else ""
