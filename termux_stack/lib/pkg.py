from __future__ import annotations

import logging
import sys
from typing import Sequence

from .command import CommandError, run_cmd
from .manifests import PackageGroup

logger = logging.getLogger(__name__)


def pkg_update(*, dry_run: bool = False) -> None:
    run_cmd(["pkg", "update", "-y"], dry_run=dry_run)


def pkg_upgrade(*, dry_run: bool = False) -> None:
    run_cmd(["pkg", "upgrade", "-y"], dry_run=dry_run)


def pkg_install(packages: Sequence[str], *, dry_run: bool = False) -> None:
    if not packages:
        return
    run_cmd(["pkg", "install", "-y", *packages], dry_run=dry_run)


def pip_install(packages: Sequence[str], *, upgrade: bool = False, dry_run: bool = False) -> None:
    """Install into the interpreter running the installer (python -m pip)."""
    if not packages:
        return
    argv = [sys.executable, "-m", "pip", "install"]
    if upgrade:
        argv.append("--upgrade")
    run_cmd([*argv, *packages], dry_run=dry_run)


def upgrade_pip(*, dry_run: bool = False) -> bool:
    """Best-effort ``pip install --upgrade pip``; a refusal only warns."""
    try:
        pip_install(["pip"], upgrade=True, dry_run=dry_run)
    except CommandError as e:
        logger.warning("pip self-upgrade failed (rc=%s); keeping the installed pip", e.returncode)
        return False
    return True


def install_group(group: PackageGroup, *, upgrade: bool = False, dry_run: bool = False) -> bool:
    """Install one manifest group.

    Returns True on success. A failing required group raises CommandError;
    a failing optional group is logged and reported as False.
    """

    if group.manager == "pip" and group.upgrade_pip:
        upgrade_pip(dry_run=dry_run)

    try:
        if group.manager == "pip":
            pip_install(group.packages, upgrade=upgrade, dry_run=dry_run)
        else:
            pkg_install(group.packages, dry_run=dry_run)
    except CommandError as e:
        if group.required:
            logger.error("Required package group %s failed", group.group_id)
            raise
        logger.warning(
            "Optional package group %s failed (rc=%s); continuing", group.group_id, e.returncode
        )
        return False
    return True
