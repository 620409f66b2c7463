from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.render import render_to
from ..settings import StackConfig

logger = logging.getLogger(__name__)


class CreateHtmlStep:
    step_id = "50_create_html"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = StackConfig.from_state(state)
        render_to(
            "index.html.j2",
            cfg.html_dir / "index.html",
            dry_run=cfg.dry_run,
            **cfg.template_context(),
        )
        return state
