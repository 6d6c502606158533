from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..lib.env import paths_for
from ..lib.git import get_global, set_global
from ..lib.manifests import manifest_for

logger = logging.getLogger(__name__)


def _ask(cfg: Dict[str, Any], key: str, label: str) -> str:
    value = str(cfg.get(key) or "").strip()
    if not value:
        value = input(f"Enter your {label}: ").strip()
    if not value:
        raise RuntimeError(f"{label} is required")
    return value


class ConfigureGitStep:
    step_id = "50_configure_git"
    description = "Configure git identity in the XDG git config"

    def _config_path(self, state: Dict[str, Any]) -> Path:
        git = manifest_for(state).get("git") or {}
        return paths_for(state).expand(str(git.get("config_path") or "{xdg_config_home}/git/config"))

    def probe(self, state: Dict[str, Any]) -> bool:
        return not get_global(self._config_path(state), "user.name")

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        config_path = self._config_path(state)
        settings = (manifest_for(state).get("git") or {}).get("settings") or {}

        logger.info("Let's configure Git.")
        name = _ask(cfg, "git_name", "Git Name")
        email = _ask(cfg, "git_email", "Git Email")

        set_global(config_path, "user.name", name)
        set_global(config_path, "user.email", email)
        for key, value in settings.items():
            set_global(config_path, str(key), str(value))

        logger.info("Git configured at %s", config_path)
        return state

    def verify(self, state: Dict[str, Any]) -> bool:
        return not self.probe(state)
