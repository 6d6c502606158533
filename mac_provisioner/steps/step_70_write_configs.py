from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

from ..lib.env import Paths, paths_for
from ..lib.files import backup_file, is_link_to, needs_backup, needs_write, replace_with_symlink, write_file
from ..lib.manifests import ConfigFile, config_files, manifest_for, read_template

logger = logging.getLogger(__name__)


def _resolved(paths: Paths, cf: ConfigFile) -> Tuple[Path, Path | None, Path | None]:
    dest = paths.expand(cf.path)
    link = paths.expand(cf.link) if cf.link else None
    backup = paths.expand(cf.backup) if cf.backup else None
    return dest, link, backup


class WriteConfigsStep:
    step_id = "70_write_configs"
    description = "Generate shell, prompt and terminal config files"

    def _pending(self, state: Dict[str, Any]) -> List[ConfigFile]:
        paths = paths_for(state)
        pending: List[ConfigFile] = []
        for cf in config_files(manifest_for(state)):
            dest, link, backup = _resolved(paths, cf)
            if (
                needs_write(dest, read_template(cf.template), mode=cf.mode)
                or (link is not None and not is_link_to(link, dest))
                or (backup is not None and needs_backup(backup))
            ):
                pending.append(cf)
        return pending

    def probe(self, state: Dict[str, Any]) -> bool:
        return bool(self._pending(state))

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        paths = paths_for(state)
        written: List[str] = []
        for cf in self._pending(state):
            dest, link, backup = _resolved(paths, cf)
            contents = read_template(cf.template)

            if backup is not None and needs_backup(backup):
                backup_file(backup)
            if needs_write(dest, contents, mode=cf.mode):
                logger.info("Creating %s...", dest)
                write_file(dest, contents)
                written.append(str(dest))
            else:
                logger.info("%s already exists", dest)
            if link is not None and not is_link_to(link, dest):
                replace_with_symlink(link, dest)

        state.setdefault("execution", {}).setdefault("decisions", {})["written_configs"] = written
        return state

    def verify(self, state: Dict[str, Any]) -> bool:
        return not self.probe(state)
