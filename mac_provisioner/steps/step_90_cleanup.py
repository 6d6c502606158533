from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.brew import DEFAULT_PREFIX, brew_cleanup, brew_path
from ..lib.command import run_cmd, which
from ..lib.manifests import manifest_for
from ..state_store import add_warning

logger = logging.getLogger(__name__)


class CleanupStep:
    step_id = "90_cleanup"
    description = "Upgrade App Store apps and clean the Homebrew cache"

    def probe(self, state: Dict[str, Any]) -> bool:
        return True

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        prefix = str((manifest_for(state).get("homebrew") or {}).get("prefix") or DEFAULT_PREFIX)

        mas = which("mas", f"{prefix}/bin")
        if mas:
            r = run_cmd([mas, "upgrade"], check=False)
            if not r.ok:
                add_warning(state, self.step_id, command="mas upgrade", error=r.stderr.strip())
        else:
            add_warning(state, self.step_id, command="mas upgrade", error="mas not installed")

        brew = brew_path(prefix)
        if brew:
            brew_cleanup(brew)
        else:
            add_warning(state, self.step_id, command="brew cleanup", error="brew not installed")

        logger.info("Cleanup finished")
        return state
