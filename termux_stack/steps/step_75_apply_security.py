from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..lib.render import render_to
from ..settings import StackConfig

logger = logging.getLogger(__name__)


def _chmod(path: Path, mode: int, *, dry_run: bool) -> None:
    if not path.exists():
        return
    if dry_run:
        logger.info("Would chmod %o %s", mode, str(path))
        return
    path.chmod(mode)


class ApplySecurityStep:
    step_id = "75_apply_security"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = StackConfig.from_state(state)
        dry_run = cfg.dry_run

        _chmod(cfg.ssh_dir, 0o700, dry_run=dry_run)
        if cfg.ssh_dir.is_dir():
            for p in cfg.ssh_dir.iterdir():
                if p.is_file():
                    _chmod(p, 0o600, dry_run=dry_run)
        _chmod(cfg.html_dir, 0o755, dry_run=dry_run)
        _chmod(cfg.python_dir, 0o755, dry_run=dry_run)
        _chmod(cfg.key_path, 0o600, dry_run=dry_run)

        render_to("htaccess.j2", cfg.html_dir / ".htaccess", dry_run=dry_run)
        logger.info("Security configurations applied")
        return state
