import pytest

from calviz.config import AppConfig, Theme, load_config, with_overrides
from calviz.constants import DEFAULT_MAX_VARS, DEFAULT_TOP_N, EXPORT_RESOLUTION
from calviz.errors import InvalidArgument


def test_defaults_without_environment():
    config = load_config({})
    assert config.theme is Theme.DARK
    assert config.max_vars == DEFAULT_MAX_VARS
    assert config.top_n == DEFAULT_TOP_N
    assert config.export_resolution == EXPORT_RESOLUTION


def test_environment_overrides():
    config = load_config({
        "CALVIZ_THEME": " Light ",
        "CALVIZ_MAX_VARS": "8",
        "CALVIZ_TOP_N": "3",
        "CALVIZ_EXPORT_WIDTH": "800",
        "CALVIZ_EXPORT_HEIGHT": "600",
        "CALVIZ_EXPORT_DPI": "200",
    })
    assert config == AppConfig(Theme.LIGHT, 8, 3, (800, 600), 200)


@pytest.mark.parametrize("env", [
    {"CALVIZ_THEME": "blue"},
    {"CALVIZ_MAX_VARS": "lots"},
    {"CALVIZ_MAX_VARS": "0"},
    {"CALVIZ_TOP_N": "-1"},
    {"CALVIZ_EXPORT_WIDTH": "0"},
])
def test_invalid_environment_rejected(env):
    with pytest.raises(InvalidArgument):
        load_config(env)


def test_with_overrides_validates():
    config = AppConfig()
    assert with_overrides(config, max_vars=3).max_vars == 3
    with pytest.raises(InvalidArgument):
        with_overrides(config, top_n=0)


def test_theme_toggle():
    assert Theme.DARK.toggled() is Theme.LIGHT
    assert Theme.LIGHT.toggled() is Theme.DARK
