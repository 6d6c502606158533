from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from .command import run_cmd
from .manifests import Preference

logger = logging.getLogger(__name__)


def _base_argv(pref: Preference) -> list[str]:
    argv = ["defaults"]
    if pref.current_host:
        argv.append("-currentHost")
    return argv


def _type_flag(pref: Preference) -> list[str]:
    if pref.type == "bool":
        return ["-bool", "true" if pref.value else "false"]
    if pref.type == "int":
        return ["-int", str(int(pref.value))]
    if pref.type == "float":
        return ["-float", str(float(pref.value))]
    return ["-string", str(pref.value)]


def read_default(pref: Preference) -> Optional[str]:
    """Current raw value as printed by `defaults read`, or None when unset."""

    # Reads never need sudo; the root-owned domains are world-readable.
    r = run_cmd([*_base_argv(pref), "read", pref.domain, pref.key], check=False)
    if not r.ok:
        return None
    return r.stdout.strip()


def write_default(pref: Preference) -> None:
    run_cmd([*_base_argv(pref), "write", pref.domain, pref.key, *_type_flag(pref)], sudo=pref.sudo)


def matches(pref: Preference, raw: Optional[str]) -> bool:
    """Compare `defaults read` output against the desired typed value."""

    if raw is None:
        return False
    if pref.type == "bool":
        return raw.lower() in {"1", "true", "yes"} if pref.value else raw.lower() in {"0", "false", "no"}
    if pref.type == "int":
        try:
            return int(raw) == int(pref.value)
        except ValueError:
            return False
    if pref.type == "float":
        try:
            return float(raw) == float(pref.value)
        except ValueError:
            return False
    return raw == str(pref.value)


def divergent(prefs: Sequence[Preference]) -> List[Preference]:
    return [p for p in prefs if not matches(p, read_default(p))]


def restart_processes(names: Sequence[str]) -> None:
    # Processes may not be running (e.g. cfprefsd between sessions).
    for name in names:
        run_cmd(["killall", name], check=False)


def describe(pref: Preference) -> dict[str, Any]:
    return {"domain": pref.domain, "key": pref.key, "value": pref.value}
