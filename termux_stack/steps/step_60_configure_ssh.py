from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.command import run_cmd
from ..lib.render import render_to
from ..settings import StackConfig
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class ConfigureSshStep:
    step_id = "60_configure_ssh"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = StackConfig.from_state(state)
        key = cfg.ssh_key_path

        if key.exists():
            logger.info("SSH key present, keeping %s", str(key))
        else:
            run_cmd(
                ["ssh-keygen", "-t", "rsa", "-b", "4096", "-f", str(key), "-N", ""],
                dry_run=cfg.dry_run,
            )

        render_to("sshd_config.j2", cfg.sshd_config_path, dry_run=cfg.dry_run, **cfg.template_context())

        record_decision(state, "ssh_port", cfg.ssh_port)
        logger.info("SSH server configured on port %s", cfg.ssh_port)
        return state
