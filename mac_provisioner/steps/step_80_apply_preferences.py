from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.defaults import describe, divergent, restart_processes, write_default
from ..lib.manifests import manifest_for, preferences, string_list

logger = logging.getLogger(__name__)


class ApplyPreferencesStep:
    """Re-assert the whole preference table on every run.

    probe() only reports which keys drifted; the action always writes every
    key, and verify() reads them all back.
    """

    step_id = "80_apply_preferences"
    description = "Write system preference keys and restart affected services"

    def probe(self, state: Dict[str, Any]) -> bool:
        drifted = divergent(preferences(manifest_for(state)))
        if drifted:
            logger.info("Preferences differing from table: %s", ", ".join(p.label for p in drifted))
        else:
            logger.info("All preferences already match; re-asserting anyway")
        return True

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        manifest = manifest_for(state)
        prefs = preferences(manifest)
        for pref in prefs:
            write_default(pref)

        logger.info("Restarting System Services...")
        restart_processes(string_list(manifest, "restart_processes"))

        state.setdefault("execution", {}).setdefault("decisions", {})["preferences"] = [describe(p) for p in prefs]
        logger.info("Wrote %d preference keys", len(prefs))
        return state

    def verify(self, state: Dict[str, Any]) -> bool:
        drifted = divergent(preferences(manifest_for(state)))
        for p in drifted:
            logger.error("Preference did not stick: %s", p.label)
        return not drifted
