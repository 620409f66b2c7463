from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.render import backup_once, render_to
from ..settings import StackConfig

logger = logging.getLogger(__name__)


class ConfigureNginxStep:
    step_id = "40_configure_nginx"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = StackConfig.from_state(state)
        conf = cfg.nginx_conf_path

        backup_once(conf, dry_run=cfg.dry_run)
        render_to("nginx.conf.j2", conf, dry_run=cfg.dry_run, **cfg.template_context())

        logger.info(
            "Nginx configured (http=%s https=%s proxy /api/ -> %s)",
            cfg.http_port,
            cfg.https_port,
            cfg.app_port,
        )
        return state
