from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

from ..lib.env import paths_for
from ..lib.files import ensure_dir
from ..lib.manifests import manifest_for, string_list

logger = logging.getLogger(__name__)


class CreateDirectoriesStep:
    step_id = "10_create_directories"
    description = "Create ~/Developer and the XDG config directory"

    def _wanted(self, state: Dict[str, Any]) -> List[Path]:
        paths = paths_for(state)
        return [paths.expand(d) for d in string_list(manifest_for(state), "directories")]

    def probe(self, state: Dict[str, Any]) -> bool:
        return any(not p.is_dir() for p in self._wanted(state))

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        created = [str(p) for p in self._wanted(state) if ensure_dir(p)]
        state.setdefault("execution", {}).setdefault("decisions", {})["created_directories"] = created
        return state

    def verify(self, state: Dict[str, Any]) -> bool:
        return not self.probe(state)
