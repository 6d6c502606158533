from __future__ import annotations

import logging
import os
import shutil
import time
from pathlib import Path

logger = logging.getLogger(__name__)


def ensure_dir(path: Path) -> bool:
    """Create a directory if absent. Returns True when it was created."""

    if path.is_dir():
        logger.info("%s already exists", path)
        return False
    path.mkdir(parents=True, exist_ok=True)
    logger.info("Created %s", path)
    return True


def needs_write(path: Path, contents: str, *, mode: str) -> bool:
    if not path.exists():
        return True
    if mode == "create":
        return False
    return path.read_text(encoding="utf-8") != contents


def write_file(path: Path, contents: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")
    logger.info("Wrote %s", path)


def is_link_to(link: Path, target: Path) -> bool:
    return link.is_symlink() and Path(os.readlink(link)) == target


def replace_with_symlink(link: Path, target: Path) -> None:
    if link.is_symlink() or link.is_file():
        link.unlink()
    elif link.is_dir():
        shutil.rmtree(link)
    link.parent.mkdir(parents=True, exist_ok=True)
    link.symlink_to(target)
    logger.info("Linked %s -> %s", link, target)


def needs_backup(path: Path) -> bool:
    return path.is_file() and not path.is_symlink()


def backup_file(path: Path) -> Path:
    dest = path.with_name(f"{path.name}.backup.{int(time.time())}")
    path.rename(dest)
    logger.info("Backed up %s -> %s", path, dest)
    return dest
