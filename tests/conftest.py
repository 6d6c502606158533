from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Tuple

import pytest
import yaml

from mac_provisioner.lib import command
from mac_provisioner.lib.manifests import load_manifest
from mac_provisioner.logging_utils import reset_logging
from mac_provisioner.state_store import ensure_defaults

Handler = Callable[[List[str]], Tuple[int, str, str]]


class FakeDefaults:
    """In-memory stand-in for the `defaults` preference store."""

    def __init__(self) -> None:
        self.store: Dict[Tuple[bool, str, str], str] = {}
        self.ignore_writes = False

    def set(self, domain: str, key: str, raw: str, *, current_host: bool = False) -> None:
        self.store[(current_host, domain, key)] = raw

    def get(self, domain: str, key: str, *, current_host: bool = False) -> Optional[str]:
        return self.store.get((current_host, domain, key))

    def __call__(self, cmd: List[str]) -> Tuple[int, str, str]:
        i = 1
        current_host = False
        if cmd[i] == "-currentHost":
            current_host = True
            i += 1
        verb, domain, key = cmd[i], cmd[i + 1], cmd[i + 2]
        if verb == "read":
            raw = self.get(domain, key, current_host=current_host)
            if raw is None:
                return 1, "", f"The domain/default pair of ({domain}, {key}) does not exist\n"
            return 0, raw + "\n", ""
        if verb == "write":
            flag, value = cmd[i + 3], cmd[i + 4]
            if flag == "-bool":
                value = "1" if value == "true" else "0"
            if not self.ignore_writes:
                self.set(domain, key, value, current_host=current_host)
            return 0, "", ""
        return 1, "", f"unsupported defaults verb {verb}"


class FakeBrew:
    def __init__(self) -> None:
        self.formulae: Set[str] = set()
        self.casks: Set[str] = set()
        self.broken: Set[str] = set()
        self.installs: List[str] = []

    def __call__(self, cmd: List[str]) -> Tuple[int, str, str]:
        sub = cmd[1:]
        if sub[:1] == ["list"]:
            names = self.casks if "--cask" in sub else self.formulae
            return 0, "".join(f"{n}\n" for n in sorted(names)), ""
        if sub[:1] == ["install"]:
            cask = "--cask" in sub
            name = sub[-1]
            self.installs.append(name)
            if name in self.broken:
                return 1, "", f"Error: No available formula with the name \"{name}\"."
            (self.casks if cask else self.formulae).add(name)
            return 0, "", ""
        return 0, "", ""


class FakeGit:
    def __init__(self) -> None:
        self.config: Dict[str, str] = {}

    def __call__(self, cmd: List[str]) -> Tuple[int, str, str]:
        # git config --global key [value]
        args = cmd[3:]
        if len(args) == 1:
            value = self.config.get(args[0])
            return (0, value + "\n", "") if value is not None else (1, "", "")
        self.config[args[0]] = args[1]
        return 0, "", ""


class FakeRunner:
    """Replaces subprocess.run for everything mac_provisioner executes."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.envs: List[Optional[dict]] = []
        self.handlers: List[Tuple[Tuple[str, ...], Handler]] = []
        self.bins: Dict[str, str] = {}
        self.defaults = FakeDefaults()
        self.git = FakeGit()
        self.on("defaults", handler=self.defaults)
        self.on("git", "config", handler=self.git)

    def on(
        self,
        *prefix: str,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        handler: Optional[Handler] = None,
    ) -> None:
        if handler is None:
            handler = lambda _cmd: (returncode, stdout, stderr)  # noqa: E731
        self.handlers.append((tuple(prefix), handler))

    @staticmethod
    def _strip_sudo(argv: List[str]) -> List[str]:
        return argv[1:] if argv[:1] == ["sudo"] and len(argv) > 1 and not argv[1].startswith("-") else argv

    def __call__(self, argv, **kwargs) -> subprocess.CompletedProcess:
        argv = list(argv)
        self.calls.append(argv)
        self.envs.append(kwargs.get("env"))
        cmd = self._strip_sudo(argv)
        for prefix, handler in reversed(self.handlers):
            if tuple(cmd[: len(prefix)]) == prefix:
                rc, out, err = handler(cmd)
                return subprocess.CompletedProcess(argv, rc, out, err)
        return subprocess.CompletedProcess(argv, 0, "", "")

    def which(self, name: str, *args, **kwargs) -> Optional[str]:
        return self.bins.get(name)

    def ran(self, *prefix: str) -> bool:
        return any(tuple(c[: len(prefix)]) == prefix for c in self.calls)

    def count(self, *prefix: str) -> int:
        return sum(1 for c in self.calls if tuple(c[: len(prefix)]) == prefix)


BREW = "/usr/local/fake/bin/brew"


@pytest.fixture
def runner(monkeypatch) -> FakeRunner:
    fake = FakeRunner()
    monkeypatch.setattr(command.subprocess, "run", fake)
    monkeypatch.setattr(command.shutil, "which", fake.which)
    return fake


@pytest.fixture
def brew(runner) -> FakeBrew:
    fake = FakeBrew()
    runner.bins["brew"] = BREW
    runner.on(BREW, handler=fake)
    return fake


@pytest.fixture
def home(tmp_path) -> Path:
    h = tmp_path / "home"
    h.mkdir()
    return h


@pytest.fixture
def manifest_path(tmp_path) -> Path:
    """Shipped manifest with machine-wide paths redirected under tmp_path."""

    manifest = load_manifest()
    apps = tmp_path / "Applications"
    manifest["remove_apps"] = [str(apps / Path(a).name) for a in manifest["remove_apps"]]
    manifest["homebrew"]["prefix"] = str(tmp_path / "homebrew")
    p = tmp_path / "provision.yaml"
    p.write_text(yaml.safe_dump(manifest, sort_keys=False), encoding="utf-8")
    return p


@pytest.fixture
def state(home, manifest_path) -> dict:
    return ensure_defaults(
        {
            "config": {
                "home": str(home),
                "manifest": str(manifest_path),
                "git_name": "Ada Lovelace",
                "git_email": "ada@example.com",
            }
        }
    )


@pytest.fixture(autouse=True)
def _isolate_process_env(monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", "/nonexistent/xdg")
    monkeypatch.setenv("PATH", "/usr/bin:/bin")
    yield
    reset_logging()
