from __future__ import annotations

import logging
from typing import Any, Dict

import psutil

from ..settings import StackConfig
from ..state_store import record_decision

logger = logging.getLogger(__name__)

INITIAL_LOGS = ("nginx_access.log", "nginx_error.log", "flask.log", "autostart.log")


class FinalizeStep:
    step_id = "85_finalize"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = StackConfig.from_state(state)

        for name in INITIAL_LOGS:
            p = cfg.log_file(name)
            if cfg.dry_run:
                logger.info("Would touch %s", str(p))
                continue
            p.parent.mkdir(parents=True, exist_ok=True)
            p.touch(exist_ok=True)

        record_decision(state, "psutil_version", psutil.__version__)
        logger.info("Installation finalized")
        return state
