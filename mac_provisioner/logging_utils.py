from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

DEFAULT_LOG_PATH = "installation_log.log"


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging.

    Everything the run does (decisions, commands and their output)
    is appended to a single log file.

    Notes:
    - If the requested path cannot be opened we fall back to a file in the
      current working directory, while continuing to *report* the intended
      path in state/logs.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_mac_provisioner_configured", False):
        return getattr(logger, "_mac_provisioner_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    except OSError:
        fallback = str(Path.cwd() / Path(DEFAULT_LOG_PATH).name)
        file_handler = logging.FileHandler(fallback, mode="a", encoding="utf-8")
        chosen_path = fallback
    file_handler.setFormatter(fmt)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_mac_provisioner_configured", True)
    setattr(logger, "_mac_provisioner_handlers", handlers)
    setattr(logger, "_mac_provisioner_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path


def reset_logging() -> None:
    """Drop handlers installed by configure_logging() (tests, repeated runs)."""

    logger = logging.getLogger()
    if not getattr(logger, "_mac_provisioner_configured", False):
        return
    for h in getattr(logger, "_mac_provisioner_handlers", []):
        logger.removeHandler(h)
        h.close()
    setattr(logger, "_mac_provisioner_configured", False)
