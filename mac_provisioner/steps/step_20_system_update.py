from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.command import run_cmd

logger = logging.getLogger(__name__)

UP_TO_DATE_MARKER = "No new software available"


class SystemUpdateStep:
    step_id = "20_system_update"
    description = "Install pending macOS software updates"

    def probe(self, state: Dict[str, Any]) -> bool:
        r = run_cmd(["softwareupdate", "-l"], check=False)
        # softwareupdate prints the marker on stderr.
        output = f"{r.stdout}\n{r.stderr}"
        if r.ok and UP_TO_DATE_MARKER in output:
            return False
        return True

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        run_cmd(["softwareupdate", "-i", "-a", "--agree-to-license"], sudo=True)
        logger.info("macOS updates installed")
        return state
