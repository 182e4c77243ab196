"""Where report-parse looks for its configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

CONFIG_DIR_ENV = "REPORTCLI_CONFIG_DIR"
CONFIG_FILE_ENV = "REPORTCLI_CONFIG_PATH"

DEFAULT_CONFIG_DIR = "~/.reportcli"
DEFAULT_CONFIG_FILE = "config.yaml"


def resolve_path(path: str | Path) -> Path:
    """Expand ``~`` and ``$VARS`` in ``path``."""
    return Path(os.path.expandvars(str(path))).expanduser()


def get_config_dir(create: bool = False, env: Mapping[str, str] | None = None) -> Path:
    """Return ``$REPORTCLI_CONFIG_DIR``, or ``~/.reportcli`` when unset."""
    env = os.environ if env is None else env
    directory = resolve_path(env.get(CONFIG_DIR_ENV) or DEFAULT_CONFIG_DIR)
    if create:
        directory.mkdir(parents=True, exist_ok=True)
    return directory


def default_config_path(create_parents: bool = False, env: Mapping[str, str] | None = None) -> Path:
    """Return the config file; ``$REPORTCLI_CONFIG_PATH`` wins over the config directory."""
    env = os.environ if env is None else env
    explicit = env.get(CONFIG_FILE_ENV)
    path = resolve_path(explicit) if explicit else get_config_dir(env=env) / DEFAULT_CONFIG_FILE
    if create_parents:
        path.parent.mkdir(parents=True, exist_ok=True)
    return path
