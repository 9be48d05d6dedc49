"""Shared fixtures: headless matplotlib, isolated config, small datasets."""

import matplotlib
matplotlib.use("Agg")

import pytest

from calviz import config as config_module
from calviz.config import AppConfig
from calviz.data_model import CalibrationDataset, VariableSeries


@pytest.fixture(autouse=True)
def isolated_config():
    """Small export size and no environment overrides for every test."""
    previous = config_module._CONFIG
    config_module.set_config(AppConfig(export_resolution=(400, 300), export_dpi=100))
    yield config_module.get_config()
    config_module._CONFIG = previous


@pytest.fixture
def scenario_dataset():
    """Iterations 0..2; ``A`` converges 0.5 → 0.05, ``B`` has values only."""
    return CalibrationDataset(
        iterations=(0, 1, 2),
        variables={
            "A": VariableSeries("A", error=(0.5, 0.2, 0.05), value=(1.0, 1.2, 1.25)),
            "B": VariableSeries("B", value=(3.0, None, 2.0)),
        },
        source="scenario",
    )


SCENARIO_CSV = (
    "Iteration,Error:A,Value:A,Value:B\n"
    "0,0.5,1.0,3.0\n"
    "1,0.2,1.2,\n"
    "2,0.05,1.25,2.0\n"
)


@pytest.fixture
def write_csv(tmp_path):
    """Factory writing *text* to a CSV file under ``tmp_path``."""
    def _write(text, name="report.csv", encoding="utf-8"):
        path = tmp_path / name
        path.write_text(text, encoding=encoding)
        return str(path)
    return _write


@pytest.fixture
def scenario_csv(write_csv):
    return write_csv(SCENARIO_CSV)
