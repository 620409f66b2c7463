from __future__ import annotations

import logging
import sys
from typing import Any, Dict

from ..lib.env import PATHS
from ..lib.render import render_to
from ..settings import StackConfig
from ..state_store import recorded_state_path

logger = logging.getLogger(__name__)


class CreateWebAppStep:
    step_id = "45_create_web_app"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = StackConfig.from_state(state)
        render_to(
            "app.py.j2",
            cfg.app_path,
            mode=0o755,
            dry_run=cfg.dry_run,
            python=sys.executable,
            state_path=recorded_state_path(state, PATHS.state_default),
            **cfg.template_context(),
        )
        logger.info("Python Flask application created at %s", str(cfg.app_path))
        return state
