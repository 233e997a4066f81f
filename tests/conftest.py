"""
Shared fixtures for the tt tests.

Every test runs with its own data directory (TT_DIR) and log directory,
so nothing touches the real ~/.tt.
"""

import pytest
import toml

from timetracker import config as config_module
from timetracker.output import setup_logging


@pytest.fixture(autouse=True)
def tt_dir(tmp_path, monkeypatch):
    """Point TT_DIR and the platform log directory at a temporary directory."""
    data_dir = tmp_path / "tt"
    monkeypatch.setenv("TT_DIR", str(data_dir))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    return data_dir


@pytest.fixture(autouse=True)
def reset_config():
    """Reset the global config and logging to default after each test.

    This prevents test pollution where one test's config changes
    affect subsequent tests.
    """
    yield

    config_module.config.clear()
    config_module.config.update(toml.loads(config_module.default_config))
    setup_logging(log_file=None)
