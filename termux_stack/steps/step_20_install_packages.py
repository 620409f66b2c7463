from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.manifests import load_package_groups
from ..lib.pkg import install_group, pkg_update, pkg_upgrade
from ..settings import StackConfig
from ..state_store import record_decision, record_warning

logger = logging.getLogger(__name__)


def _progress(current: int, total: int, task: str) -> None:
    logger.info("[%d/%d] (%d%%) %s", current, total, current * 100 // total, task)


class InstallPackagesStep:
    step_id = "20_install_packages"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = StackConfig.from_state(state)
        dry_run = cfg.dry_run

        groups = load_package_groups()
        # update + upgrade + one slot per group + the closing line
        total = len(groups) + 3

        _progress(1, total, "Updating package lists...")
        pkg_update(dry_run=dry_run)
        _progress(2, total, "Upgrading existing packages...")
        pkg_upgrade(dry_run=dry_run)

        installed: list[str] = []
        failed: list[str] = []
        for i, group in enumerate(groups, start=3):
            _progress(i, total, group.task)
            if install_group(group, dry_run=dry_run):
                installed.append(group.group_id)
            else:
                failed.append(group.group_id)
                record_warning(
                    state,
                    {"package_group": group.group_id, "reason": "install_failed", "packages": group.packages},
                )

        _progress(total, total, "Package installation completed!")
        record_decision(state, "package_groups", {"installed": installed, "failed": failed})
        if failed:
            logger.warning("Optional package groups failed: %s", ", ".join(failed))
        else:
            logger.info("All packages installed successfully")
        return state
