"""
Command-line interface for the Calibration Report Visualizer.

Usage::

    calviz summary            --input report.csv
    calviz error-convergence  --input report.csv [--filter T] [--max-vars N]
    calviz value-evolution    --input report.csv [--filter T] [--max-vars N]
    calviz error-distribution --input report.csv [--output DIR]

Plots are written to ``--output`` (default ``output``) as
``error_convergence.png``, ``value_evolution.png`` and
``error_distribution.png``; ``summary`` prints to stdout only.

For compatibility with the older calibration scripts, the plot commands
accept one optional trailing positional argument: a purely numeric value
is taken as ``--max-vars``, anything else as the filter text.

Exit status: 0 on success, 1 on data / argument / resource errors,
2 on usage errors.
"""

import argparse
import importlib
import logging
import sys
from typing import Optional, Sequence

from . import APP_NAME, APP_VERSION
from .config import Theme, get_config
from .constants import (
    DEFAULT_OUTPUT_DIR, ERROR_CONVERGENCE_PNG, VALUE_EVOLUTION_PNG,
    ERROR_DISTRIBUTION_PNG,
)
from .errors import CalvizError, EmptySelection, InvalidArgument, MissingResource

logger = logging.getLogger(__name__)

PLOT_COMMANDS = {
    'error-convergence': ERROR_CONVERGENCE_PNG,
    'value-evolution': VALUE_EVOLUTION_PNG,
}


def _check_dependencies() -> None:
    """Verify the rendering stack is importable."""
    missing = []
    for module in ("matplotlib", "numpy"):
        try:
            importlib.import_module(module)
        except ImportError:
            missing.append(module)
    if missing:
        raise MissingResource(
            f"Missing required packages: {', '.join(missing)}. "
            f"Install with: pip install {' '.join(missing)}",
            ", ".join(missing),
        )


def _int_arg(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {text!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="calviz",
        description=f"{APP_NAME}: explore calibration convergence reports.",
    )
    parser.add_argument(
        '--version', action='version', version=f"%(prog)s {APP_VERSION}",
    )
    parser.add_argument(
        '-v', '--verbose', action='count', default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )
    sub = parser.add_subparsers(dest='command', metavar='COMMAND')
    sub.required = True

    def add_common(p):
        p.add_argument('--input', required=True, metavar='PATH',
                       help="Calibration report CSV file")
        p.add_argument('--output', default=DEFAULT_OUTPUT_DIR, metavar='DIR',
                       help="Output directory (default: %(default)s)")

    p_summary = sub.add_parser('summary', help="Print convergence statistics")
    add_common(p_summary)
    p_summary.add_argument('--top', type=_int_arg, default=None,
                           metavar='N', help="Number of ranked variables")

    for command, artifact in PLOT_COMMANDS.items():
        p = sub.add_parser(command, help=f"Plot selected variables to {artifact}")
        add_common(p)
        p.add_argument('--filter', default='', metavar='TERMS',
                       help="Comma-separated case-insensitive name filters")
        p.add_argument('--max-vars', type=_int_arg, default=None,
                       metavar='N', help="Maximum number of variables")
        p.add_argument('--theme', choices=[t.value for t in Theme],
                       default=Theme.LIGHT.value)
        p.add_argument('extra', nargs='?', default=None,
                       help=argparse.SUPPRESS)

    p_dist = sub.add_parser('error-distribution',
                            help=f"Histogram of final errors to {ERROR_DISTRIBUTION_PNG}")
    add_common(p_dist)
    p_dist.add_argument('--theme', choices=[t.value for t in Theme],
                        default=Theme.LIGHT.value)
    return parser


def resolve_selection_args(args) -> None:
    """Fold the legacy trailing positional into ``filter`` / ``max_vars``."""
    extra = getattr(args, 'extra', None)
    if extra is None:
        return
    text = extra.strip()
    if text.lstrip('+-').isdigit():
        if args.max_vars is not None:
            raise InvalidArgument(
                f"max-vars given twice ({args.max_vars} and {text})"
            )
        args.max_vars = int(text)
    else:
        args.filter = f"{args.filter},{text}" if args.filter else text
    args.extra = None


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


# ── Commands ─────────────────────────────────────────────────────────────

def _load(path: str):
    from .csv_parser import load_calibration_csv
    return load_calibration_csv(path)


def cmd_summary(args, config) -> int:
    from .summary import format_summary, summarize

    dataset = _load(args.input)
    top_n = args.top if args.top is not None else config.top_n
    result = summarize(dataset, top_n=top_n)
    print(format_summary(result))
    return 0


def cmd_plot(args, config) -> int:
    from .chart_lines import render_line_chart
    from .colors import ColorAssignment
    from .data_model import SeriesKind
    from .export import export_figures, themed_export_figure
    from .filter_engine import parse_filter_terms, select_variables
    from .plot_data import build_plot_data

    resolve_selection_args(args)
    max_vars = args.max_vars if args.max_vars is not None else config.max_vars
    terms = parse_filter_terms(args.filter)
    # Validate arguments before the (possibly slow) load
    if max_vars <= 0:
        raise InvalidArgument(f"max-vars must be at least 1, got {max_vars}")

    dataset = _load(args.input)
    selection = select_variables(dataset, terms, max_vars)
    kind = SeriesKind.ERROR if args.command == 'error-convergence' else SeriesKind.VALUE
    plot_data = build_plot_data(
        dataset, selection, ColorAssignment.for_dataset(dataset), kind,
    )
    if not plot_data.series:
        raise EmptySelection(
            f"No variables with {kind.label.lower()} data match the filter "
            f"{args.filter!r}; nothing to plot"
        )

    theme = Theme(args.theme)
    fig = themed_export_figure(theme, config.export_resolution, config.export_dpi)
    render_line_chart(fig, plot_data, theme=theme)
    paths = export_figures(
        {PLOT_COMMANDS[args.command]: fig}, args.output, dpi=config.export_dpi,
    )
    print(f"Plotted {len(plot_data.series)} variable(s) to {paths[0]}")
    return 0


def cmd_error_distribution(args, config) -> int:
    from .chart_distribution import render_error_distribution
    from .export import export_figures, themed_export_figure

    dataset = _load(args.input)
    theme = Theme(args.theme)
    fig = themed_export_figure(theme, config.export_resolution, config.export_dpi)
    render_error_distribution(fig, dataset, theme=theme)
    paths = export_figures(
        {ERROR_DISTRIBUTION_PNG: fig}, args.output, dpi=config.export_dpi,
    )
    print(f"Wrote {paths[0]}")
    return 0


_COMMANDS = {
    'summary': cmd_summary,
    'error-convergence': cmd_plot,
    'value-evolution': cmd_plot,
    'error-distribution': cmd_error_distribution,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one command; returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        _check_dependencies()
        config = get_config()
        return _COMMANDS[args.command](args, config)
    except CalvizError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

