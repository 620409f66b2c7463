from __future__ import annotations

import logging
from typing import Any, Dict

from ..services import FAILED, build_services, start_all
from ..settings import StackConfig
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class LaunchStep:
    """Start the stack right away when the user asked for it.

    Runs on every install, completed or not; ``start`` is itself idempotent.
    """

    step_id = "90_launch"
    always_run = True

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = StackConfig.from_state(state)

        if not cfg.start_now:
            logger.info("Servers not started. Run ./start_servers.sh when ready")
            return state

        results = start_all(cfg, build_services(cfg, dry_run=cfg.dry_run))
        record_decision(state, "launch", results)
        if FAILED in results.values():
            logger.warning("Some servers failed to start: %s", results)
        for label, url in cfg.urls().items():
            logger.info("%s: %s", label, url)
        return state
