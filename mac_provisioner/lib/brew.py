from __future__ import annotations

import logging
import os
from typing import Dict, List, Sequence

from .command import CmdResult, CommandError, prepend_path, run_cmd, which

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "/opt/homebrew"
INSTALL_SCRIPT_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"


def brew_path(prefix: str = DEFAULT_PREFIX) -> str | None:
    return which("brew", os.path.join(prefix, "bin"))


def install_homebrew(*, prefix: str = DEFAULT_PREFIX, script_url: str = INSTALL_SCRIPT_URL) -> str:
    """Download and run the official installer, then put brew on PATH."""

    script = run_cmd(["curl", "-fsSL", script_url]).stdout
    if not script.strip():
        raise RuntimeError(f"Homebrew installer download was empty: {script_url}")
    run_cmd(["/bin/bash", "-c", script], env={"NONINTERACTIVE": "1"})

    prepend_path(os.path.join(prefix, "bin"))
    brew = brew_path(prefix)
    if not brew:
        raise RuntimeError(f"Homebrew installer finished but brew was not found under {prefix}/bin")
    logger.info("Homebrew installed at %s", brew)
    return brew


def brew_update(brew: str) -> CmdResult:
    return run_cmd([brew, "update"], check=False)


def installed(brew: str, *, cask: bool) -> set[str]:
    kind = "--cask" if cask else "--formula"
    r = run_cmd([brew, "list", kind, "-1"], check=False)
    if not r.ok:
        return set()
    return {line.strip() for line in r.stdout.splitlines() if line.strip()}


def missing(brew: str | None, names: Sequence[str], *, cask: bool) -> List[str]:
    if not brew:
        return list(names)
    have = installed(brew, cask=cask)
    # Taps install as "user/tap/name" but list as "name".
    return [n for n in names if n.rsplit("/", 1)[-1] not in have]


def brew_install_each(brew: str, names: Sequence[str], *, cask: bool) -> Dict[str, str]:
    """Install items one at a time; a failing item does not stop the rest.

    Returns {name: error} for the items that failed.
    """

    failures: Dict[str, str] = {}
    for name in names:
        argv = [brew, "install"]
        if cask:
            argv.append("--cask")
        argv.append(name)
        try:
            run_cmd(argv)
        except CommandError as e:
            logger.warning("brew install %s failed (rc=%s): %s", name, e.returncode, (e.stderr or "").strip())
            failures[name] = (e.stderr or "").strip() or f"exit {e.returncode}"
    return failures


def brew_cleanup(brew: str) -> None:
    run_cmd([brew, "cleanup"])
