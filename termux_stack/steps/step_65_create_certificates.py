from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.certs import certificate_window, create_self_signed
from ..lib.command import CommandError
from ..settings import StackConfig
from ..state_store import record_decision, record_warning

logger = logging.getLogger(__name__)


class CreateCertificatesStep:
    step_id = "65_create_certificates"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = StackConfig.from_state(state)
        created = create_self_signed(
            cfg.cert_path,
            cfg.key_path,
            days=cfg.cert_days,
            subject=cfg.cert_subject,
            dry_run=cfg.dry_run,
        )
        decision: Dict[str, Any] = {"path": str(cfg.cert_path), "days": cfg.cert_days, "created": created}

        if not cfg.dry_run:
            try:
                window = certificate_window(cfg.cert_path)
            except (CommandError, ValueError) as e:
                logger.warning("Could not read certificate validity: %s", e)
                record_warning(state, {"certificate": str(cfg.cert_path), "reason": "unreadable"})
            else:
                decision["not_before"] = window.not_before.isoformat()
                decision["not_after"] = window.not_after.isoformat()
                decision["days"] = window.days
                logger.info("Certificate valid %s -> %s", decision["not_before"], decision["not_after"])

        record_decision(state, "certificate", decision)
        return state
