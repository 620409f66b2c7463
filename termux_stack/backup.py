from __future__ import annotations

import logging
import os
import tarfile
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .settings import MANAGEMENT_SCRIPTS, StackConfig

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "termux_server_backup_"


def backup_sources(cfg: StackConfig) -> List[Path]:
    sources = [cfg.www_dir]
    sources += [cfg.home / name for name in MANAGEMENT_SCRIPTS if name != "backup_server.sh"]
    sources += [cfg.ssh_dir, cfg.nginx_conf_path, cfg.sshd_config_path]
    return sources


def _arcname(cfg: StackConfig, path: Path) -> str:
    try:
        return str(Path("home") / path.relative_to(cfg.home))
    except ValueError:
        return str(path).lstrip("/")


def create_backup(cfg: StackConfig, *, now: Optional[datetime] = None) -> Path:
    """Write a tar.gz of the web root, scripts, SSH material and server configs.

    Sources that do not exist are skipped. The archive is built under a
    ``.partial`` name and renamed only once complete.
    """

    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    cfg.backups_dir.mkdir(parents=True, exist_ok=True)
    out = cfg.backups_dir / f"{BACKUP_PREFIX}{stamp}.tar.gz"
    partial = out.with_name(out.name + ".partial")

    try:
        with tarfile.open(partial, "w:gz") as tar:
            for src in backup_sources(cfg):
                if not src.exists():
                    logger.debug("Backup source missing, skipped: %s", src)
                    continue
                tar.add(str(src), arcname=_arcname(cfg, src))
        os.replace(partial, out)
    except BaseException:
        partial.unlink(missing_ok=True)
        logger.error("Backup failed; removed incomplete %s", partial.name)
        raise

    logger.info("Backup created: %s (%d bytes)", out, out.stat().st_size)
    return out


def rotate_backups(backups_dir: Path, *, keep: int = 5) -> List[Path]:
    """Delete all but the newest ``keep`` backups; returns the removed paths."""

    # Names embed a sortable timestamp.
    archives = sorted(backups_dir.glob(f"{BACKUP_PREFIX}*.tar.gz"), reverse=True)
    removed = archives[keep:]
    for p in removed:
        p.unlink()
        logger.info("Removed old backup %s", p.name)
    return removed
