"""
Calibration Report Visualizer v1.0.0

Interactive explorer for calibration convergence reports.  Loads a CSV
with one ``Iteration`` column plus ``Error:<name>`` / ``Value:<name>``
columns per calibrated variable, and plots absolute error and value
against iteration for a filtered, ranked selection of variables.

A command-line mode produces the same plots as PNG files, a final-error
histogram, and a console convergence summary.
"""

APP_NAME = "Calibration Report Visualizer"
APP_VERSION = "1.0.0"
APP_DATE = "2026-10-17"
__version__ = APP_VERSION
