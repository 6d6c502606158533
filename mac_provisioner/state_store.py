from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def load_state(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}

    text = p.read_text(encoding="utf-8")
    if _detect_format(p) in {"yaml", "yml"}:
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")

    return data


def save_state(path: str, state: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) in {"yaml", "yml"}:
        p.write_text(yaml.safe_dump(state, sort_keys=False) + "\n", encoding="utf-8")
    else:
        p.write_text(json.dumps(state, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys with sane defaults (without overriding user values)."""

    state.setdefault("version", "1.0")
    state.setdefault("config", {})
    state.setdefault("execution", {})

    cfg = state["config"]
    # None means "resolve at run time" (Path.home(), $HOME/.config).
    cfg.setdefault("home", None)
    cfg.setdefault("xdg_config_home", None)
    # Alternative manifest; None uses the one shipped with the package.
    cfg.setdefault("manifest", None)
    cfg.setdefault("dry_run", False)
    # Pre-seeded git identity skips the interactive prompt.
    cfg.setdefault("git_name", None)
    cfg.setdefault("git_email", None)

    exe = state["execution"]
    exe.setdefault("current_step", None)
    exe.setdefault("results", {})
    exe.setdefault("runs", [])
    exe.setdefault("errors", [])
    exe.setdefault("warnings", [])

    return state


def record_step_result(state: Dict[str, Any], result: Dict[str, Any]) -> None:
    exe = state.setdefault("execution", {})
    exe.setdefault("results", {})[result["step_id"]] = result
    if result.get("error"):
        exe.setdefault("errors", []).append({"step": result["step_id"], "error": result["error"]})


def add_warning(state: Dict[str, Any], step_id: str, **details: Any) -> None:
    state.setdefault("execution", {}).setdefault("warnings", []).append({"step": step_id, **details})


def begin_run(state: Dict[str, Any]) -> Dict[str, Any]:
    run = {"started_at": time.strftime("%Y-%m-%dT%H:%M:%S%z"), "finished_at": None, "summary": {}}
    exe = state.setdefault("execution", {})
    exe.setdefault("runs", []).append(run)
    # Results and per-run diagnostics describe the latest run only.
    exe["results"] = {}
    exe["errors"] = []
    exe["warnings"] = []
    return run


def finish_run(run: Dict[str, Any], summary: Dict[str, Any]) -> None:
    run["finished_at"] = time.strftime("%Y-%m-%dT%H:%M:%S%z")
    run["summary"] = summary
