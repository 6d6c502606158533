from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

REQUIRED_TERMINAL = "Apple_Terminal"


class PreflightError(RuntimeError):
    pass


def check_terminal(environ: Optional[Mapping[str, str]] = None) -> None:
    """Abort unless running inside the stock macOS Terminal app."""

    env = os.environ if environ is None else environ
    term = env.get("TERM_PROGRAM")
    if term != REQUIRED_TERMINAL:
        raise PreflightError(
            f"Wrong terminal detected (TERM_PROGRAM={term!r}); "
            f"run this from the default Apple Terminal app."
        )
    logger.info("Terminal check passed (%s)", term)
