"""
Entry point for the Calibration Report Visualizer.

Usage:
    python -m calviz                      # launch the GUI
    python -m calviz summary --input report.csv
    python -m calviz error-convergence --input report.csv --max-vars 10

Any command-line arguments select the batch CLI (see ``calviz.cli``);
without arguments the GUI is started.
"""

import sys
import os
import traceback


def _check_dependencies():
    """Verify required packages are installed."""
    missing = []
    try:
        import PySide6  # noqa: F401
    except ImportError:
        missing.append("PySide6")
    try:
        import matplotlib  # noqa: F401
    except ImportError:
        missing.append("matplotlib")
    try:
        import numpy  # noqa: F401
    except ImportError:
        missing.append("numpy")

    if missing:
        print(
            f"Missing required packages: {', '.join(missing)}\n"
            f"Install with: pip install {' '.join(missing)}",
            file=sys.stderr,
        )
        sys.exit(1)


def _exception_hook(exc_type, exc_value, exc_tb):
    """Global exception handler to prevent silent crashes."""
    msg = ''.join(traceback.format_exception(exc_type, exc_value, exc_tb))
    print(f"Unhandled exception:\n{msg}", file=sys.stderr)

    from PySide6.QtWidgets import QMessageBox, QApplication
    app = QApplication.instance()
    if app is not None:
        QMessageBox.critical(
            None, "Unhandled Error",
            f"An unexpected error occurred:\n\n"
            f"{exc_type.__name__}: {exc_value}\n\n"
            f"See console for full traceback.",
        )


def run_gui():
    """Launch the Calibration Report Visualizer GUI."""
    _check_dependencies()

    # Set exception hook before anything else
    sys.excepthook = _exception_hook

    # Configure matplotlib backend before importing Qt widgets
    os.environ.setdefault("QT_API", "pyside6")
    import logging
    import matplotlib
    matplotlib.use('QtAgg')

    from PySide6.QtWidgets import QApplication
    from PySide6.QtGui import QFont, QFontDatabase

    from .constants import FONT_FAMILIES
    from .gui_main import VisualizerMainWindow
    from .view_state import ViewState

    logging.basicConfig(level=logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    app = QApplication(sys.argv)
    app.setStyle("Fusion")

    font = QFont()
    for family in FONT_FAMILIES:
        if QFontDatabase.hasFamily(family):
            font.setFamily(family)
            break
    font.setPointSize(10)
    app.setFont(font)

    # Window applies the stylesheet for the configured theme
    window = VisualizerMainWindow(ViewState())
    window.show()

    return app.exec()


def main(argv=None):
    """Dispatch to the CLI when arguments are given, else start the GUI."""
    argv = sys.argv[1:] if argv is None else list(argv)
    if argv:
        from .cli import main as cli_main
        sys.exit(cli_main(argv))
    sys.exit(run_gui())


if __name__ == "__main__":
    main()
