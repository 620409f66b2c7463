from __future__ import annotations

import logging
import sys
from typing import Any, Dict

from ..lib.env import PATHS
from ..lib.render import render_to
from ..settings import StackConfig
from ..state_store import recorded_state_path

logger = logging.getLogger(__name__)


class SetupAutostartStep:
    step_id = "80_setup_autostart"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = StackConfig.from_state(state)

        render_to(
            "scripts/start-server.j2",
            cfg.boot_script_path,
            mode=0o755,
            dry_run=cfg.dry_run,
            delay=cfg.autostart_delay,
            home=str(cfg.home),
            python=sys.executable,
            state_path=recorded_state_path(state, PATHS.state_default),
            autostart_log=str(cfg.log_file("autostart.log")),
        )
        render_to(
            "scripts/setup_autostart.sh.j2",
            cfg.home / "setup_autostart.sh",
            mode=0o755,
            dry_run=cfg.dry_run,
            boot_script=str(cfg.boot_script_path),
        )
        logger.info("Auto-start configured (Termux:Boot script %s)", str(cfg.boot_script_path))
        return state
