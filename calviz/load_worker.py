"""
Background CSV loading for the GUI.

Parsing a large calibration report can take seconds, so the main window
hands the file to a ``DatasetLoadWorker`` and keeps the event loop
responsive.  Every worker carries the ticket issued by
``ViewState.begin_load``; the window passes it back to
``complete_load`` / ``fail_load`` so results of a cancelled or superseded
load are discarded.
"""

import logging
import threading

from PySide6.QtCore import QThread, Signal

from .csv_parser import load_calibration_csv
from .errors import CalvizError

logger = logging.getLogger(__name__)


class LoadAborted(CalvizError):
    """Raised inside the worker when ``abort()`` was requested."""


class DatasetLoadWorker(QThread):
    """
    Parse one calibration CSV off the GUI thread.

    Signals
    -------
    progress_updated : Signal(int, int)
        ``(ticket, rows_parsed)``, emitted every few hundred rows.
    finished_result : Signal(int, object)
        ``(ticket, CalibrationDataset)`` on success.
    error_occurred : Signal(int, str)
        ``(ticket, message)`` when the file cannot be loaded.
    """

    progress_updated = Signal(int, int)
    finished_result = Signal(int, object)
    error_occurred = Signal(int, str)

    def __init__(self, filepath: str, ticket: int, parent=None):
        super().__init__(parent)
        self._filepath = filepath
        self._ticket = ticket
        self._abort_event = threading.Event()

    @property
    def ticket(self) -> int:
        return self._ticket

    @property
    def filepath(self) -> str:
        return self._filepath

    def abort(self):
        """Request early termination (checked at each progress step)."""
        self._abort_event.set()

    def _on_progress(self, rows: int):
        if self._abort_event.is_set():
            raise LoadAborted(f"Load of {self._filepath} aborted")
        self.progress_updated.emit(self._ticket, rows)

    def run(self):  # noqa: D401 – Qt override
        try:
            dataset = load_calibration_csv(self._filepath, progress=self._on_progress)
        except LoadAborted:
            logger.debug("Load %d aborted", self._ticket)
            return
        except (CalvizError, OSError) as exc:
            self.error_occurred.emit(self._ticket, str(exc))
            return
        except Exception as exc:
            logger.exception("Unexpected failure loading %s", self._filepath)
            self.error_occurred.emit(self._ticket, f"{type(exc).__name__}: {exc}")
            return
        if self._abort_event.is_set():
            return
        self.finished_result.emit(self._ticket, dataset)
