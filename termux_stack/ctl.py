"""Lifecycle commands behind the generated ~/*.sh wrappers.

Every command is safe to repeat: ``start`` skips services that are already
running and ``stop`` only reports services that are already down.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional

import yaml

from .backup import create_backup, rotate_backups
from .lib.command import CommandError
from .lib.env import PATHS
from .lib.manifests import load_package_groups
from .lib.net import PUBLIC_IP_HINT, default_gateway, route_ip
from .lib.pkg import install_group, pkg_update, pkg_upgrade
from .lib.procs import listening_ports
from .logging_utils import configure_logging
from .monitor import collect_report, format_report
from .services import (
    ALREADY_RUNNING,
    FAILED,
    NOT_RUNNING,
    STARTED,
    STOPPED,
    Service,
    build_services,
    start_all,
    stop_all,
)
from .settings import StackConfig
from .state_store import ensure_defaults, load_state

logger = logging.getLogger(__name__)

_START_MESSAGES = {
    STARTED: "started",
    ALREADY_RUNNING: "is already running",
    FAILED: "FAILED to start (see log)",
}
_STOP_MESSAGES = {
    STOPPED: "stopped",
    NOT_RUNNING: "was not running",
    FAILED: "FAILED to stop (see log)",
}

Sleeper = Callable[[float], None]


def load_config(state_path: str) -> StackConfig:
    return StackConfig.from_state(ensure_defaults(load_state(state_path)))


def do_start(cfg: StackConfig, services: List[Service], *, sleep: Sleeper = time.sleep) -> int:
    print("Starting Termux Server Stack...")
    results = start_all(cfg, services)
    for svc in services:
        ports = "/".join(str(p) for p in svc.ports)
        print(f"  {svc.label} {_START_MESSAGES[results[svc.name]]} (port {ports})")

    sleep(cfg.settle_seconds)

    urls = cfg.urls()
    print("")
    print(f"Server Dashboard: {urls['dashboard']}")
    print(f"Flask App: {urls['flask']}")
    print(f"HTTPS: {urls['https']}")
    print(f"SSH: {urls['ssh']}")
    print("")
    print("Listening ports:")
    for port, up in listening_ports(cfg.ports.values()).items():
        print(f"  {port}: {'listening' if up else 'not listening'}")
    print("Processes:")
    for svc in services:
        for m in svc.processes():
            print(f"  {m.pid} {m.cmdline or m.name}")
    return 1 if FAILED in results.values() else 0


def do_stop(cfg: StackConfig, services: List[Service]) -> int:
    print("Stopping Termux Server Stack...")
    results = stop_all(cfg, services)
    for svc in services:
        print(f"  {svc.label} {_STOP_MESSAGES[results[svc.name]]}")
    return 1 if FAILED in results.values() else 0


def do_restart(cfg: StackConfig, services: List[Service], *, sleep: Sleeper = time.sleep) -> int:
    print("Restarting Termux Server Stack...")
    rc = do_stop(cfg, services)
    sleep(cfg.restart_delay)
    return do_start(cfg, services, sleep=sleep) or rc


def do_status(cfg: StackConfig, services: List[Service], *, as_json: bool = False) -> int:
    report = collect_report(cfg, services=services)
    if as_json:
        print(json.dumps(report, indent=2, sort_keys=True))
    else:
        print("\n".join(format_report(report, cfg)))
    return 0


def do_backup(cfg: StackConfig) -> int:
    print("Creating server backup...")
    out = create_backup(cfg)
    print(f"Backup created: {out}")
    print(f"Size: {out.stat().st_size} bytes")
    removed = rotate_backups(cfg.backups_dir, keep=cfg.backup_keep)
    if removed:
        print(f"Removed {len(removed)} old backup(s)")
    return 0


def network_lines(cfg: StackConfig, ip: Optional[str], gateway: Optional[str]) -> List[str]:
    ports = ", ".join(str(p) for p in cfg.ports.values())
    lines = [
        "Network Configuration Helper",
        "===============================",
        "Current Network Status:",
        f"  Local IP: {ip or 'Unknown'}",
        f"  Gateway: {gateway or 'Unknown'}",
        f"  Active Ports: {ports}",
        "",
        "To access your server externally:",
        f"1. Note your local IP: {ip or 'Unknown'}",
        f"2. Access your router (usually http://{gateway or '<gateway>'})",
        "3. Find 'Port Forwarding' or 'NAT' settings",
        f"4. Forward these ports to {ip or 'this device'}:",
    ]
    lines += [f"   - {port} ({name.upper()})" for name, port in cfg.ports.items()]
    lines += [
        "5. Use your public IP to access from internet",
        "",
        "Finding your public IP:",
        PUBLIC_IP_HINT,
        "",
        "Security Notes:",
        "  - Change default passwords",
        "  - Use strong SSH keys",
        "  - Consider VPN for external access",
        "  - Monitor access logs regularly",
    ]
    return lines


def do_network(cfg: StackConfig) -> int:
    print("\n".join(network_lines(cfg, route_ip(), default_gateway())))
    return 0


def do_update(
    cfg: StackConfig,
    services: List[Service],
    *,
    dry_run: bool = False,
    sleep: Sleeper = time.sleep,
) -> int:
    print("Updating Termux Server...")
    do_stop(cfg, services)
    try:
        pkg_update(dry_run=dry_run)
        pkg_upgrade(dry_run=dry_run)
        for group in load_package_groups():
            if group.manager == "pip":
                install_group(group, upgrade=True, dry_run=dry_run)
    except CommandError as e:
        logger.error("Update failed: %s", e)
        print(f"Update failed: {e}", file=sys.stderr)
        do_start(cfg, services, sleep=sleep)
        return 1
    rc = do_start(cfg, services, sleep=sleep)
    print("Update completed!")
    return rc


def do_service(
    cfg: StackConfig,
    services: List[Service],
    action: str,
    *,
    sleep: Sleeper = time.sleep,
) -> int:
    """Service-manager style front end with a marker file in $HOME."""

    marker = cfg.service_pid_file
    running = any(svc.is_running() for svc in services)

    if action == "start":
        if marker.exists() and running:
            print("Service already running")
            return 1
        rc = do_start(cfg, services, sleep=sleep)
        if rc != 0 and not any(svc.is_running() for svc in services):
            print("Service failed to start")
            return rc
        marker.write_text(json.dumps({"started": datetime.now().isoformat()}) + "\n", encoding="utf-8")
        return rc
    if action == "stop":
        if not marker.exists():
            print("Service not running")
            return 0
        rc = do_stop(cfg, services)
        marker.unlink()
        return rc
    if action == "restart":
        do_service(cfg, services, "stop", sleep=sleep)
        sleep(cfg.restart_delay)
        return do_service(cfg, services, "start", sleep=sleep)
    if action == "status":
        if marker.exists() and running:
            print("termux-server is running")
            return do_status(cfg, services)
        print("termux-server is not running")
        return 0
    raise ValueError(f"Unknown service action: {action}")


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="termux-stack")
    p.add_argument("--state", default=PATHS.state_default, help="Path to installer state (json|yaml)")
    p.add_argument("--dry-run", action="store_true", help="Log commands without executing them")
    p.add_argument("-v", "--verbose", action="store_true", help="Echo log records to the console")

    sub = p.add_subparsers(dest="command", required=True)
    sub.add_parser("start", help="Start nginx, the Flask app and sshd")
    sub.add_parser("stop", help="Stop all servers")
    sub.add_parser("restart", help="Stop, wait, start")
    sp_status = sub.add_parser("status", help="Server status report")
    sp_status.add_argument("--json", action="store_true", help="Print the raw report as JSON")
    sub.add_parser("backup", help="Archive web root, scripts and configs")
    sub.add_parser("network", help="Port forwarding helper")
    sub.add_parser("update", help="Upgrade packages and restart")
    sp_service = sub.add_parser("service", help="Service-manager style control")
    sp_service.add_argument("action", choices=["start", "stop", "restart", "status"])

    args = p.parse_args(argv)

    try:
        cfg = load_config(args.state)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"[ERROR] Cannot read state {args.state}: {e}", file=sys.stderr)
        return 1
    configure_logging(log_path=str(cfg.log_file("termux-stack.log")), also_console=bool(args.verbose))
    services = build_services(cfg, dry_run=bool(args.dry_run))

    try:
        if args.command == "start":
            return do_start(cfg, services)
        if args.command == "stop":
            return do_stop(cfg, services)
        if args.command == "restart":
            return do_restart(cfg, services)
        if args.command == "status":
            return do_status(cfg, services, as_json=bool(args.json))
        if args.command == "backup":
            return do_backup(cfg)
        if args.command == "network":
            return do_network(cfg)
        if args.command == "update":
            return do_update(cfg, services, dry_run=bool(args.dry_run))
        return do_service(cfg, services, args.action)
    except (RuntimeError, OSError, ValueError) as e:
        logger.exception("%s failed", args.command)
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
