from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple

from ..lib.brew import DEFAULT_PREFIX, brew_install_each, brew_path, brew_update, missing
from ..lib.manifests import manifest_for, string_list
from ..state_store import add_warning

logger = logging.getLogger(__name__)

# (manifest key, installs as cask)
GROUPS: Tuple[Tuple[str, bool], ...] = (
    ("formulae", False),
    ("casks", True),
    ("fonts", True),
)


class InstallPackagesStep:
    step_id = "60_install_packages"
    description = "Install command line tools, applications and fonts"

    def _brew(self, state: Dict[str, Any]) -> str | None:
        prefix = str((manifest_for(state).get("homebrew") or {}).get("prefix") or DEFAULT_PREFIX)
        return brew_path(prefix)

    def _missing(self, state: Dict[str, Any]) -> Dict[str, List[str]]:
        manifest = manifest_for(state)
        brew = self._brew(state)
        return {
            group: missing(brew, string_list(manifest, "packages", group), cask=cask)
            for group, cask in GROUPS
        }

    def probe(self, state: Dict[str, Any]) -> bool:
        todo = self._missing(state)
        for group, names in todo.items():
            if names:
                logger.info("Missing %s: %s", group, ", ".join(names))
        return any(todo.values())

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        brew = self._brew(state)
        if not brew:
            raise RuntimeError("brew not found; run 40_install_homebrew first")

        update = brew_update(brew)
        if not update.ok:
            # Stale formulae still install.
            error = update.stderr.strip() or f"exit {update.returncode}"
            add_warning(state, self.step_id, command="brew update", error=error)
        todo = self._missing(state)
        failed: Dict[str, str] = {}
        for group, cask in GROUPS:
            if not todo[group]:
                continue
            logger.info("Installing %s: %s", group, ", ".join(todo[group]))
            failed.update(brew_install_each(brew, todo[group], cask=cask))

        for name, error in failed.items():
            add_warning(state, self.step_id, package=name, error=error)

        state.setdefault("execution", {}).setdefault("plan", {})["packages"] = {
            "requested": todo,
            "failed": sorted(failed),
        }
        logger.info("Packages installed (failed=%d)", len(failed))
        return state
