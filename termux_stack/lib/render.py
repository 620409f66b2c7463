from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, PackageLoader, StrictUndefined

logger = logging.getLogger(__name__)

_env: Optional[Environment] = None


def get_environment() -> Environment:
    global _env
    if _env is None:
        _env = Environment(
            loader=PackageLoader("termux_stack", "templates"),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )
    return _env


def render_template(name: str, **context: Any) -> str:
    return get_environment().get_template(name).render(**context)


def write_file(
    path: str | Path,
    contents: str,
    *,
    mode: Optional[int] = None,
    dry_run: bool = False,
) -> Path:
    p = Path(path)
    if dry_run:
        logger.info("Would write %s", str(p))
        return p
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(contents, encoding="utf-8")
    if mode is not None:
        p.chmod(mode)
    logger.info("Wrote %s", str(p))
    return p


def render_to(
    name: str,
    path: str | Path,
    *,
    mode: Optional[int] = None,
    dry_run: bool = False,
    **context: Any,
) -> Path:
    return write_file(path, render_template(name, **context), mode=mode, dry_run=dry_run)


def backup_once(path: str | Path, *, suffix: str = ".backup", dry_run: bool = False) -> Optional[Path]:
    """Copy ``path`` aside the first time we are about to overwrite it.

    An existing backup is never replaced, so re-runs keep the distribution's
    original file rather than our own generated one.
    """

    src = Path(path)
    dst = src.with_name(src.name + suffix)
    if not src.exists() or dst.exists():
        return None
    if dry_run:
        logger.info("Would back up %s -> %s", str(src), str(dst))
        return dst
    shutil.copy2(src, dst)
    logger.info("Backed up %s -> %s", str(src), str(dst))
    return dst
