from __future__ import annotations

import logging
from typing import Any, Dict

from ..settings import StackConfig

logger = logging.getLogger(__name__)


class CreateDirectoriesStep:
    step_id = "30_create_directories"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = StackConfig.from_state(state)
        for d in cfg.directories:
            if cfg.dry_run:
                logger.info("Would create %s", str(d))
                continue
            d.mkdir(parents=True, exist_ok=True)
        logger.info("Directory structure created under %s", str(cfg.home))
        return state
