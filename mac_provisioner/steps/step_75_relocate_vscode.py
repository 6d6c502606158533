from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Any, Dict, Tuple

from ..lib.command import run_cmd
from ..lib.env import paths_for
from ..lib.files import is_link_to, replace_with_symlink
from ..lib.manifests import manifest_for

logger = logging.getLogger(__name__)


class RelocateVSCodeStep:
    step_id = "75_relocate_vscode"
    description = "Move VS Code user settings under the XDG config directory"

    def _dirs(self, state: Dict[str, Any]) -> Tuple[Path, Path, str]:
        paths = paths_for(state)
        vs = manifest_for(state).get("vscode") or {}
        app_support = paths.expand(str(vs.get("app_support_dir") or "{home}/Library/Application Support/Code"))
        xdg_user = paths.expand(str(vs.get("xdg_user_dir") or "{xdg_config_home}/Code/User"))
        return app_support, xdg_user, str(vs.get("process_name") or "Visual Studio Code")

    def probe(self, state: Dict[str, Any]) -> bool:
        app_support, xdg_user, _ = self._dirs(state)
        if not app_support.is_dir():
            logger.info("VS Code support directory not present; nothing to relocate")
            return False
        return not is_link_to(app_support / "User", xdg_user)

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        app_support, xdg_user, process_name = self._dirs(state)
        user_dir = app_support / "User"

        # Not running is fine.
        run_cmd(["pkill", "-f", process_name], check=False)

        xdg_user.mkdir(parents=True, exist_ok=True)
        settings = user_dir / "settings.json"
        if settings.is_file() and not user_dir.is_symlink():
            os.replace(settings, xdg_user / "settings.json")
            logger.info("Moved %s -> %s", settings, xdg_user)

        if user_dir.is_dir() and not user_dir.is_symlink():
            shutil.rmtree(user_dir)
        replace_with_symlink(user_dir, xdg_user)
        logger.info("VS Code linked to %s", xdg_user)
        return state

    def verify(self, state: Dict[str, Any]) -> bool:
        return not self.probe(state)
