from __future__ import annotations

import argparse
import contextlib
import getpass
import logging
import os
import platform
from typing import Mapping, Optional

from .lib.command import run_cmd
from .lib.env import export_xdg_config_home, paths_for
from .lib.sudo import SudoKeepAlive
from .lib.terminal import PreflightError, check_terminal
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import PipelineResult, run_pipeline
from .state_store import begin_run, ensure_defaults, finish_run, load_state, save_state
from .steps import (
    ApplyPreferencesStep,
    CleanupStep,
    ConfigureGitStep,
    CreateDirectoriesStep,
    InstallHomebrewStep,
    InstallPackagesStep,
    RelocateVSCodeStep,
    RemoveAppsStep,
    SystemUpdateStep,
    WriteConfigsStep,
)

logger = logging.getLogger(__name__)


DEFAULT_STATE_PATH = "~/.local/state/mac-provisioner/state.json"

EXIT_OK = 0
EXIT_STEP_FAILED = 1
EXIT_PREFLIGHT = 2


def build_steps():
    return [
        CreateDirectoriesStep(),
        SystemUpdateStep(),
        RemoveAppsStep(),
        InstallHomebrewStep(),
        ConfigureGitStep(),
        InstallPackagesStep(),
        WriteConfigsStep(),
        RelocateVSCodeStep(),
        ApplyPreferencesStep(),
        CleanupStep(),
    ]


def _computer_name() -> str:
    r = run_cmd(["scutil", "--get", "ComputerName"], check=False)
    return r.stdout.strip() if r.ok and r.stdout.strip() else platform.node()


def _log_summary(result: PipelineResult) -> None:
    marks = {"ok": "✔", "skipped": "-", "planned": "?", "failed": "✖"}
    for r in result.results:
        line = f"{marks.get(r.status, ' ')} {r.step_id:<24} {r.status}"
        if r.error:
            line += f" ({r.error.splitlines()[0]})"
        logger.info(line)
    if result.ok:
        logger.info("Installation Complete! All tasks finished.")
    else:
        logger.error("Finished with failed steps: %s", ", ".join(result.failed_steps))


def run(
    *,
    state_path: str = DEFAULT_STATE_PATH,
    log_path: str = DEFAULT_LOG_PATH,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
    dry_run: bool = False,
    fail_fast: bool = False,
    verbose: bool = False,
    environ: Optional[Mapping[str, str]] = None,
) -> PipelineResult:
    """Provision this machine, persisting the outcome of every step."""

    state_path = os.path.expanduser(state_path)
    actual_log_path = configure_logging(log_path=log_path, level=logging.DEBUG if verbose else logging.INFO)
    logger.info("--- Installation Log Started ---")

    check_terminal(environ)

    state = ensure_defaults(load_state(state_path))
    cfg = state["config"]
    dry_run = dry_run or bool(cfg.get("dry_run", False))
    state["execution"].setdefault("paths", {})["log_path_requested"] = log_path
    state["execution"]["paths"]["log_path_actual"] = actual_log_path

    paths = paths_for(state)
    export_xdg_config_home(paths)
    logger.info(".:: Macbook Installation and Configuration ::.")
    logger.info("Host: %s | User: %s | dry_run=%s", _computer_name(), getpass.getuser(), dry_run)

    current = begin_run(state)
    keep_alive = contextlib.nullcontext() if dry_run else SudoKeepAlive()
    try:
        with keep_alive:
            result = run_pipeline(
                state=state,
                steps=build_steps(),
                start_at=start_at,
                stop_after=stop_after,
                force=force,
                dry_run=dry_run,
                fail_fast=fail_fast,
            )
        finish_run(current, result.summary())
        _log_summary(result)
        return result
    except Exception as e:
        logger.exception("Provisioning failed")
        state["execution"].setdefault("errors", []).append(
            {"step": state["execution"].get("current_step"), "error": str(e)}
        )
        raise
    finally:
        save_state(state_path, state)
        logger.info("--- Installation Log Ended ---")


def main(argv: Optional[list[str]] = None) -> int:
    step_ids = [s.step_id for s in build_steps()]

    p = argparse.ArgumentParser(prog="mac-provisioner")
    p.add_argument("--state", default=DEFAULT_STATE_PATH, help="Path to provisioning state (json|yaml)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to the append-only installation log")
    p.add_argument("--start-at", default=None, choices=step_ids, metavar="STEP_ID", help="Start at step_id (e.g. 60_install_packages)")
    p.add_argument("--stop-after", default=None, choices=step_ids, metavar="STEP_ID", help="Stop after step_id")
    p.add_argument("--force", action="store_true", help="Run actions even when the probe finds nothing to do")
    p.add_argument("--dry-run", action="store_true", help="Probe only; report which steps would run")
    p.add_argument("--fail-fast", action="store_true", help="Stop at the first failed step")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug-level logging")
    p.add_argument("--list-steps", action="store_true", help="Print step ids and exit")

    args = p.parse_args(argv)

    if args.list_steps:
        for step in build_steps():
            print(f"{step.step_id:<24} {step.description}")
        return EXIT_OK

    try:
        result = run(
            state_path=args.state,
            log_path=args.log,
            start_at=args.start_at,
            stop_after=args.stop_after,
            force=bool(args.force),
            dry_run=bool(args.dry_run),
            fail_fast=bool(args.fail_fast),
            verbose=bool(args.verbose),
        )
    except PreflightError as e:
        logger.error("%s", e)
        return EXIT_PREFLIGHT
    return EXIT_OK if result.ok else EXIT_STEP_FAILED


if __name__ == "__main__":
    raise SystemExit(main())
