from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

PREFERENCE_TYPES = {"bool", "int", "float", "string"}
CONFIG_FILE_MODES = {"create", "overwrite"}


def _package_root() -> Path:
    # mac_provisioner/lib/manifests.py -> mac_provisioner
    return Path(__file__).resolve().parents[1]


@dataclass(frozen=True)
class Preference:
    domain: str
    key: str
    type: str
    value: Any
    sudo: bool = False
    current_host: bool = False

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Preference":
        for field in ("domain", "key", "type", "value"):
            if field not in raw:
                raise ValueError(f"Preference entry missing '{field}': {raw}")
        typ = str(raw["type"])
        if typ not in PREFERENCE_TYPES:
            raise ValueError(f"Unsupported preference type {typ!r} for {raw['domain']} {raw['key']}")
        return cls(
            domain=str(raw["domain"]),
            key=str(raw["key"]),
            type=typ,
            value=raw["value"],
            sudo=bool(raw.get("sudo", False)),
            current_host=bool(raw.get("current_host", False)),
        )

    @property
    def label(self) -> str:
        return f"{self.domain} {self.key}"


@dataclass(frozen=True)
class ConfigFile:
    path: str
    template: str
    mode: str = "create"
    link: Optional[str] = None
    backup: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ConfigFile":
        if not raw.get("path") or not raw.get("template"):
            raise ValueError(f"Config file entry needs 'path' and 'template': {raw}")
        mode = str(raw.get("mode", "create"))
        if mode not in CONFIG_FILE_MODES:
            raise ValueError(f"Config file mode must be one of {sorted(CONFIG_FILE_MODES)}: {raw}")
        return cls(
            path=str(raw["path"]),
            template=str(raw["template"]),
            mode=mode,
            link=raw.get("link"),
            backup=raw.get("backup"),
        )


def load_yaml(path: Path) -> Dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {path}")
    return data


def load_manifest(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the provisioning manifest (packages, apps, preferences, config files).

    Defaults to the manifest shipped with the package.
    """

    p = Path(path) if path else _package_root() / "manifests" / "provision.yaml"
    return load_yaml(p)


def string_list(manifest: Dict[str, Any], *keys: str) -> List[str]:
    """Fetch a nested list of strings, e.g. string_list(m, 'packages', 'casks')."""

    node: Any = manifest
    for k in keys:
        node = (node or {}).get(k) if isinstance(node, dict) else None
    if node is None:
        return []
    if not isinstance(node, list):
        raise ValueError(f"Manifest {'.'.join(keys)} must be a list")
    return [str(v).strip() for v in node if str(v).strip()]


def preferences(manifest: Dict[str, Any]) -> List[Preference]:
    raw = manifest.get("preferences") or []
    if not isinstance(raw, list):
        raise ValueError("Manifest preferences must be a list")
    return [Preference.from_dict(r) for r in raw]


def config_files(manifest: Dict[str, Any]) -> List[ConfigFile]:
    raw = manifest.get("config_files") or []
    if not isinstance(raw, list):
        raise ValueError("Manifest config_files must be a list")
    return [ConfigFile.from_dict(r) for r in raw]


def read_template(name: str) -> str:
    return (_package_root() / "templates" / name).read_text(encoding="utf-8")


def manifest_for(state: Dict[str, Any]) -> Dict[str, Any]:
    cfg = state.get("config") or {}
    return load_manifest(cfg.get("manifest"))
