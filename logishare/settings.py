"""ConfigManager — environment profiles and the ``config.json`` template."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from logishare.config import (
    DEFAULT_MACOS_APP_DIR,
    DEFAULT_PACKAGE_EXTENSION,
    DEFAULT_XDG_APP_DIR,
    HASH_CHUNK_SIZE,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"


def default_app_dir() -> Path:
    """Platform app-data directory used when ``LOGISHARE_APP_DIR`` is unset."""
    if sys.platform == "darwin":
        return DEFAULT_MACOS_APP_DIR
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / "logishare"
    return DEFAULT_XDG_APP_DIR


# All known configuration keys with defaults
_CONFIG_KEYS: dict[str, dict[str, Any]] = {
    "LOGISHARE_ENV": {"default": "development", "description": "Environment profile"},
    "LOGISHARE_APP_DIR": {"default": "", "description": "Root of working/versions/checkouts"},
    "LOGISHARE_PACKAGE_EXT": {"default": DEFAULT_PACKAGE_EXTENSION, "description": "Accepted package extension"},
    "LOGISHARE_LOG_LEVEL": {"default": "INFO", "description": "Logging level"},
    "LOGISHARE_HASH_CHUNK": {"default": str(HASH_CHUNK_SIZE), "description": "Hash read size in bytes"},
}

_PROFILES: dict[str, dict[str, str]] = {
    "development": {
        "LOGISHARE_ENV": "development",
        "LOGISHARE_LOG_LEVEL": "DEBUG",
    },
    "production": {
        "LOGISHARE_ENV": "production",
        "LOGISHARE_LOG_LEVEL": "WARNING",
    },
    "testing": {
        "LOGISHARE_ENV": "testing",
        "LOGISHARE_LOG_LEVEL": "DEBUG",
        "LOGISHARE_HASH_CHUNK": "4096",
    },
}


class ConfigManager:
    """Manage LogiShare configuration across environments."""

    def generate_config_template(self, app_dir: str | Path) -> Path:
        """Write ``config.json`` with every key at its default.

        Returns the path to the generated file.
        """
        root = Path(app_dir)
        root.mkdir(parents=True, exist_ok=True)
        path = root / CONFIG_FILENAME
        data = {key: info["default"] for key, info in _CONFIG_KEYS.items()}
        data["LOGISHARE_APP_DIR"] = str(root)
        path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        return path

    def load_config(self, app_dir: str | Path | None = None) -> dict[str, str]:
        """Load merged config: defaults -> profile -> config.json -> env vars.

        An explicit *app_dir* wins over everything for ``LOGISHARE_APP_DIR``.

        Returns a flat dict of configuration values.
        """
        config: dict[str, str] = {}

        # 1. Defaults
        for key, info in _CONFIG_KEYS.items():
            config[key] = str(info["default"])
        config["LOGISHARE_APP_DIR"] = str(default_app_dir())

        # 2. Profile overrides
        env_name = os.environ.get("LOGISHARE_ENV", config["LOGISHARE_ENV"])
        config.update(_PROFILES.get(env_name, {}))

        root = Path(
            app_dir
            or os.environ.get("LOGISHARE_APP_DIR")
            or config["LOGISHARE_APP_DIR"]
        )

        # 3. <app_dir>/config.json
        config_json = root / CONFIG_FILENAME
        if config_json.is_file():
            try:
                data = json.loads(config_json.read_text(encoding="utf-8"))
                for k, v in data.items():
                    config[k] = str(v)
            except (json.JSONDecodeError, OSError):
                logger.debug("Could not read config.json", exc_info=True)

        # 4. Environment variables override the file
        for key in _CONFIG_KEYS:
            env_val = os.environ.get(key)
            if env_val is not None:
                config[key] = env_val

        if app_dir is not None:
            config["LOGISHARE_APP_DIR"] = str(app_dir)
        elif not config["LOGISHARE_APP_DIR"]:
            config["LOGISHARE_APP_DIR"] = str(root)

        return config
