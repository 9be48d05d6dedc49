"""
Example data generator for the Calibration Report Visualizer.

Creates one synthetic calibration report with realistic convergence
behaviour for testing and demonstration.  Variables are grouped into a
few parameter families; errors decay exponentially towards a small noise
floor while values settle on a target.  A handful of variables carry
only an error or only a value column, and ~5% of cells are left blank
to exercise gap handling.
"""

import math
import os
import random

from .constants import ERROR_PREFIX, ITERATION_HEADER, VALUE_PREFIX

# Parameter families: (name stem, typical value, value spread)
_FAMILIES = [
    ('thermal_conductivity', 45.0, 8.0),
    ('heat_transfer_coeff', 120.0, 30.0),
    ('inlet_pressure', 2.5, 0.4),
    ('wall_temperature', 350.0, 25.0),
    ('friction_factor', 0.02, 0.005),
    ('mass_flow_rate', 1.8, 0.3),
]

_BLANK_FRACTION = 0.05


def _variable_names(n_variables: int):
    names = []
    for i in range(n_variables):
        stem = _FAMILIES[i % len(_FAMILIES)][0]
        names.append(f"{stem}_{i // len(_FAMILIES) + 1:02d}")
    return names


def generate_example_csv(
    path: str,
    n_variables: int = 30,
    n_iterations: int = 40,
    seed: int = 42,
) -> str:
    """Write an example calibration report to *path*.

    Parameters
    ----------
    path : str
        Output CSV path; parent directories are created.
    n_variables : int
        Number of calibrated variables.
    n_iterations : int
        Number of iteration rows (iterations are numbered from 0).
    seed : int
        Seed for reproducible output.

    Returns
    -------
    str
        *path*
    """
    if n_variables < 1 or n_iterations < 1:
        raise ValueError("n_variables and n_iterations must be at least 1")

    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)

    # Reproducible randomness
    rng = random.Random(seed)
    names = _variable_names(n_variables)

    # ── Per-variable convergence parameters ──────────────────────────
    columns = []      # (header, [value_or_None per iteration])
    for i, name in enumerate(names):
        _, typical, spread = _FAMILIES[i % len(_FAMILIES)]
        target = rng.gauss(typical, spread)
        initial_error = abs(rng.gauss(0.0, spread)) + spread * 0.1
        rate = rng.uniform(0.05, 0.3)
        floor = initial_error * rng.uniform(1e-4, 1e-2)
        sign = rng.choice((-1.0, 1.0))

        errors = []
        values = []
        for it in range(n_iterations):
            err = sign * (initial_error * math.exp(-rate * it)
                          + rng.gauss(0.0, floor))
            errors.append(round(err, 8))
            values.append(round(target + err, 8))

        # Every seventh variable is error-only, every eleventh value-only
        if i % 11 != 10:
            columns.append((f"{ERROR_PREFIX}{name}", errors))
        if i % 7 != 6:
            columns.append((f"{VALUE_PREFIX}{name}", values))

    # Blank out scattered cells, never the first row
    for _, cells in columns:
        for it in range(1, n_iterations):
            if rng.random() < _BLANK_FRACTION:
                cells[it] = None

    # ── Write CSV ────────────────────────────────────────────────────
    with open(path, 'w', encoding='utf-8', newline='') as fh:
        fh.write(','.join([ITERATION_HEADER] + [h for h, _ in columns]) + '\n')
        for it in range(n_iterations):
            row_parts = [str(it)]
            for _, cells in columns:
                val = cells[it]
                row_parts.append('' if val is None else repr(val))
            fh.write(','.join(row_parts) + '\n')

    return path


if __name__ == '__main__':
    # Quick test: generate to a temporary directory and print summary
    import tempfile
    out_path = os.path.join(
        tempfile.gettempdir(), 'calviz_example', 'calibration_report.csv'
    )
    generate_example_csv(out_path)
    print(f"  {out_path} ({os.path.getsize(out_path):,} bytes)")
