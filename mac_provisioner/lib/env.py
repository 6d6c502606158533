from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class Paths:
    home: Path
    xdg_config_home: Path

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> "Paths":
        home = Path(str(cfg.get("home") or Path.home())).expanduser()
        xdg = cfg.get("xdg_config_home") or (home / ".config")
        return cls(home=home, xdg_config_home=Path(str(xdg)).expanduser())

    def variables(self) -> Dict[str, str]:
        return {"home": str(self.home), "xdg_config_home": str(self.xdg_config_home)}

    def expand(self, template: str) -> Path:
        """Resolve a manifest path such as '{xdg_config_home}/git/config'."""
        return Path(template.format(**self.variables())).expanduser()


def paths_for(state: Dict[str, Any]) -> Paths:
    return Paths.from_config(state.get("config") or {})


def export_xdg_config_home(paths: Paths) -> None:
    os.environ["XDG_CONFIG_HOME"] = str(paths.xdg_config_home)
