from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

from .command import run_cmd

logger = logging.getLogger(__name__)


def _env(config_path: Path) -> Dict[str, str]:
    return {"GIT_CONFIG_GLOBAL": str(config_path)}


def get_global(config_path: Path, key: str) -> str:
    # `git config --get` exits 1 when the key is unset.
    r = run_cmd(["git", "config", "--global", key], check=False, env=_env(config_path))
    return r.stdout.strip() if r.ok else ""


def set_global(config_path: Path, key: str, value: str) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    run_cmd(["git", "config", "--global", key, value], env=_env(config_path))
