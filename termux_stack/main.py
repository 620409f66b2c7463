from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Callable, Dict, Optional

import yaml

from .lib.env import PATHS
from .logging_utils import configure_logging
from .pipeline import run_pipeline
from .settings import MANAGEMENT_SCRIPTS, StackConfig
from .state_store import ensure_defaults, load_state, save_state
from .steps import (
    ApplySecurityStep,
    CheckEnvironmentStep,
    ConfigureNginxStep,
    ConfigureSshStep,
    CreateCertificatesStep,
    CreateDirectoriesStep,
    CreateHtmlStep,
    CreateWebAppStep,
    FinalizeStep,
    InstallPackagesStep,
    LaunchStep,
    SetupAutostartStep,
    WriteScriptsStep,
)

logger = logging.getLogger(__name__)

DEFAULT_STATE_PATH = PATHS.state_default
DEFAULT_LOG_PATH = PATHS.log_default

BANNER = """\
==========================================================
  Termux Server Setup
  Nginx (HTTP/HTTPS) + Python Flask + SSH on your Android
==========================================================
This installer will install and configure:
  - Nginx web server (HTTP/HTTPS)
  - Python Flask application server
  - SSH server for remote access
  - SSL certificates for security
  - Management and monitoring tools
  - Auto-start configuration
"""


def build_steps():
    return [
        CheckEnvironmentStep(),
        InstallPackagesStep(),
        CreateDirectoriesStep(),
        ConfigureNginxStep(),
        CreateWebAppStep(),
        CreateHtmlStep(),
        ConfigureSshStep(),
        CreateCertificatesStep(),
        WriteScriptsStep(),
        ApplySecurityStep(),
        SetupAutostartStep(),
        FinalizeStep(),
        LaunchStep(),
    ]


def run(
    *,
    state_path: str = DEFAULT_STATE_PATH,
    log_path: str = DEFAULT_LOG_PATH,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Run the installer pipeline, persisting state for resume.

    ``overrides`` are merged into ``state["config"]`` before any step runs.
    """

    actual_log_path = configure_logging(log_path=log_path)

    state = load_state(state_path)
    state.setdefault("config", {}).update(overrides or {})
    state = ensure_defaults(state)

    paths = state.setdefault("execution", {}).setdefault("paths", {})
    paths["state_path"] = state_path
    paths["log_path_requested"] = log_path
    paths["log_path_actual"] = actual_log_path

    try:
        result = run_pipeline(
            state=state,
            steps=build_steps(),
            start_at=start_at,
            stop_after=stop_after,
            force=force,
        )
        state = result.state
        summary = state.setdefault("execution", {}).setdefault("summary", {})
        summary["ran_steps"] = result.ran_steps
        summary["skipped_steps"] = result.skipped_steps
        return state
    except Exception as e:
        logger.exception("Installer failed")
        state.setdefault("execution", {}).setdefault("errors", []).append(
            {
                "step": (state.get("execution") or {}).get("current_step"),
                "error": str(e),
            }
        )
        raise
    finally:
        save_state(state_path, state)


def confirm(prompt: str, *, default: bool, input_fn: Callable[[str], str] = input) -> bool:
    try:
        reply = input_fn(prompt).strip().lower()
    except EOFError:
        return default
    if not reply:
        return default
    return reply in {"y", "yes"}


def print_summary(state: Dict[str, Any]) -> None:
    cfg = StackConfig.from_state(state)
    urls = cfg.urls()
    lines = [
        "",
        "INSTALLATION COMPLETED",
        "",
        "Quick Start Commands:",
        *[f"  ./{name:<22} {cmd}" for name, cmd in MANAGEMENT_SCRIPTS.items()],
        "",
        "Access URLs (after starting servers):",
        f"  Dashboard: {urls['dashboard']}",
        f"  Flask App: {urls['flask']}",
        f"  HTTPS:     {urls['https']}",
        f"  SSH:       {urls['ssh']}",
        "",
        "Important Directories:",
        f"  {cfg.html_dir}/   - Static web files",
        f"  {cfg.python_dir}/ - Python applications",
        f"  {cfg.logs_dir}/   - Server logs",
        f"  {cfg.ssl_dir}/    - SSL certificates",
        "",
        "Security Reminders:",
        "  - Change default passwords (run 'passwd')",
        "  - Monitor access logs",
        "  - Keep packages updated (./update_server.sh)",
    ]
    warnings = (state.get("execution") or {}).get("warnings") or []
    if warnings:
        lines += ["", f"Completed with {len(warnings)} warning(s); see the installer log."]
    print("\n".join(lines))


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="termux-stack-install")
    p.add_argument("--state", default=DEFAULT_STATE_PATH, help="Path to installer state (json|yaml)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to installer log")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 40_configure_nginx)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    p.add_argument("--force", action="store_true", help="Re-run steps even if marked completed")
    p.add_argument("--dry-run", action="store_true", help="Log commands and writes without executing them")
    p.add_argument("-y", "--yes", action="store_true", help="Do not prompt; install and start servers")
    p.add_argument("--no-start", action="store_true", help="Do not start servers after installing")
    p.add_argument(
        "--skip-termux-check",
        action="store_true",
        help="Allow running outside Termux (testing on a regular Linux host)",
    )

    args = p.parse_args(argv)

    if not args.yes:
        print(BANNER)
        if not confirm("Do you want to continue? (y/N): ", default=False):
            print("Installation cancelled.")
            return 0

    overrides: Dict[str, Any] = {}
    if args.dry_run:
        overrides["dry_run"] = True
    if args.skip_termux_check:
        overrides["require_termux"] = False
    if args.no_start:
        overrides["start_now"] = False
    elif args.yes:
        overrides["start_now"] = True
    else:
        overrides["start_now"] = confirm("Start servers when installation completes? (Y/n): ", default=True)

    try:
        state = run(
            state_path=args.state,
            log_path=args.log,
            start_at=args.start_at,
            stop_after=args.stop_after,
            force=args.force,
            overrides=overrides,
        )
    except KeyboardInterrupt:
        print("\n[ERROR] Installation interrupted!", file=sys.stderr)
        return 1
    except (RuntimeError, OSError, ValueError, yaml.YAMLError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    print_summary(state)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
