import logging
from pathlib import Path

import toml

from .paths import get_configfile_name

logger = logging.getLogger(__name__)

default_config = """
# Bare ticket numbers logged as activity ("tt 234") are expanded to
# "<prefix>-234" when a prefix is set, e.g.
# prefix = "PROJ"

[report]
# one of: status, short, long, tickets, table, activity, ticket, worktime
format = "long"
# activities below this duration (HH:MM) are distributed to the others,
# e.g. cutoff = "00:15"
# also distribute the "_" activities in the weekly table
all = false

[logging]
level = "DEBUG"
console_level = "ERROR"
""".strip()


def _merge(base: dict, override: dict) -> dict:
    """Recursively merge override into a copy of base."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config_toml(config_path: Path, default: str = default_config) -> dict:
    """
    Load the config file on top of the default config.

    A missing file gives the defaults. A file that cannot be parsed is
    reported and ignored.
    """
    config = toml.loads(default)
    try:
        user_config = toml.load(config_path)
    except FileNotFoundError:
        return config
    except (OSError, toml.TomlDecodeError) as err:
        logger.warning(f"Cannot read config file {config_path}, ignoring: {err}")
        return config
    return _merge(config, user_config)


config = load_config_toml(get_configfile_name())


def load_custom_config(config_path):
    """Load config from a custom file path."""
    global config
    if config_path:
        config_path = Path(config_path)
        if config_path.exists():
            new_config = load_config_toml(config_path)
        else:
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        new_config = load_config_toml(get_configfile_name())
    # update in place, other modules hold a reference to this dict
    config.clear()
    config.update(new_config)
    return config


class PrefixResolver:
    """
    Expands an activity that is just a bare ticket number into a ticket ID.

    >>> PrefixResolver("JIRAPROJECT").resolve("234")
    'JIRAPROJECT-234'
    >>> PrefixResolver(None).resolve("234")
    '234'
    """

    def __init__(self, prefix: str | None = None) -> None:
        self.prefix = prefix or None

    @classmethod
    def from_config(cls, cfg: dict | None = None) -> "PrefixResolver":
        cfg = config if cfg is None else cfg
        return cls(cfg.get("prefix"))

    def resolve(self, activity: str) -> str:
        if self.prefix and activity[:1].isdigit():
            return f"{self.prefix}-{activity}"
        return activity
