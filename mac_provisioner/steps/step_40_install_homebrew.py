from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.brew import DEFAULT_PREFIX, INSTALL_SCRIPT_URL, brew_path, install_homebrew
from ..lib.manifests import manifest_for

logger = logging.getLogger(__name__)


class InstallHomebrewStep:
    step_id = "40_install_homebrew"
    description = "Install the Homebrew package manager"

    def _settings(self, state: Dict[str, Any]) -> Dict[str, str]:
        hb = manifest_for(state).get("homebrew") or {}
        return {
            "prefix": str(hb.get("prefix") or DEFAULT_PREFIX),
            "script_url": str(hb.get("install_script") or INSTALL_SCRIPT_URL),
        }

    def probe(self, state: Dict[str, Any]) -> bool:
        brew = brew_path(self._settings(state)["prefix"])
        if brew:
            logger.info("Homebrew is already installed (%s)", brew)
        return brew is None

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        s = self._settings(state)
        brew = install_homebrew(prefix=s["prefix"], script_url=s["script_url"])
        state.setdefault("execution", {}).setdefault("decisions", {})["brew"] = brew
        return state

    def verify(self, state: Dict[str, Any]) -> bool:
        return brew_path(self._settings(state)["prefix"]) is not None
