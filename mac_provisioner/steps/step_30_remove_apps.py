from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

from ..lib.command import CommandError, run_cmd
from ..lib.manifests import manifest_for, string_list
from ..state_store import add_warning

logger = logging.getLogger(__name__)


class RemoveAppsStep:
    step_id = "30_remove_apps"
    description = "Remove bundled applications"

    def _present(self, state: Dict[str, Any]) -> List[str]:
        present = []
        for app in string_list(manifest_for(state), "remove_apps"):
            if Path(app).is_dir():
                present.append(app)
            else:
                logger.info("%s not found", app)
        return present

    def probe(self, state: Dict[str, Any]) -> bool:
        return bool(self._present(state))

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        removed: List[str] = []
        for app in self._present(state):
            logger.info("Removing %s...", app)
            try:
                run_cmd(["rm", "-rf", app], sudo=True)
            except CommandError as e:
                add_warning(state, self.step_id, app=app, error=str(e))
                continue
            removed.append(app)
            logger.info("Removed %s", app)
        state.setdefault("execution", {}).setdefault("decisions", {})["removed_apps"] = removed
        return state
