from __future__ import annotations

import logging
import sys
from typing import Any, Dict

from ..lib.env import PATHS
from ..lib.render import render_to
from ..settings import MANAGEMENT_SCRIPTS, StackConfig
from ..state_store import record_decision, recorded_state_path

logger = logging.getLogger(__name__)

_DESCRIPTIONS = {
    "start": "start nginx, the Flask app and sshd",
    "stop": "stop all servers",
    "restart": "stop, wait, start",
    "status": "server status report",
    "backup": "archive web root, scripts and configs",
    "network": "port forwarding helper",
    "update": "upgrade packages and restart",
    "service": "service-manager style start|stop|restart|status",
}


class WriteScriptsStep:
    step_id = "70_write_scripts"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = StackConfig.from_state(state)
        state_path = recorded_state_path(state, PATHS.state_default)

        written: list[str] = []
        for name, command in MANAGEMENT_SCRIPTS.items():
            render_to(
                "scripts/wrapper.sh.j2",
                cfg.home / name,
                mode=0o755,
                dry_run=cfg.dry_run,
                python=sys.executable,
                state_path=state_path,
                command=command,
                description=_DESCRIPTIONS[command],
            )
            written.append(name)

        record_decision(state, "scripts", written)
        logger.info("Management scripts created: %s", ", ".join(written))
        return state
