from __future__ import annotations

import os
from pathlib import Path

from cachetools.func import lru_cache  # type: ignore

from src.app.runtime.config.config_data import ConfigData
from src.app.runtime.config.config_loader import load_config


@lru_cache(maxsize=1)
def get_config() -> ConfigData:
    """Load the application configuration once per process.

    Uses the file named by DEPLOYLOG_CONFIG, falling back to config.yaml,
    and to built-in defaults when neither exists.
    """
    path = Path(os.getenv("DEPLOYLOG_CONFIG", "config.yaml"))
    if not path.exists():
        return ConfigData()
    return load_config(path)
