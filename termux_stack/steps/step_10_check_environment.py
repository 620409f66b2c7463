from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.env import is_termux, require_termux
from ..settings import StackConfig
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class CheckEnvironmentStep:
    step_id = "10_check_environment"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = StackConfig.from_state(state)

        if cfg.require_termux:
            require_termux()
            logger.info("Termux environment detected")
        else:
            logger.info("Termux check disabled (termux=%s)", is_termux())

        record_decision(state, "home", str(cfg.home))
        record_decision(state, "prefix", str(cfg.prefix))
        return state
