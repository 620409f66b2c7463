from __future__ import annotations

import logging
import socket
from collections import deque
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import psutil

from .lib.certs import certificate_window
from .lib.command import CommandError
from .lib.net import route_ip
from .lib.procs import listening_ports
from .lib.sysinfo import resource_usage, uptime
from .services import Service, build_services, service_status
from .settings import StackConfig

logger = logging.getLogger(__name__)

RECENT_LOGS = (("Nginx Access", "nginx_access.log"), ("Flask Logs", "flask.log"))


def human_bytes(n: float) -> str:
    for unit in ("B", "K", "M", "G", "T"):
        if abs(n) < 1024 or unit == "T":
            return f"{n:.0f}{unit}" if unit == "B" else f"{n:.1f}{unit}"
        n /= 1024
    return f"{n:.1f}T"


def tail(path: Path, lines: int = 3) -> Optional[List[str]]:
    """Last ``lines`` lines of ``path``, or None if the file does not exist."""
    if not path.exists():
        return None
    with path.open("r", encoding="utf-8", errors="replace") as f:
        return [ln.rstrip("\n") for ln in deque(f, maxlen=lines)]


def certificate_status(cfg: StackConfig) -> Optional[Dict[str, Any]]:
    """Validity window of the TLS certificate, or None when it is absent."""
    if not cfg.cert_path.exists():
        return None
    try:
        window = certificate_window(cfg.cert_path)
    except (CommandError, ValueError) as e:
        logger.debug("Certificate unreadable: %s", e)
        return {"path": str(cfg.cert_path), "error": str(e)}
    return {
        "path": str(cfg.cert_path),
        "not_before": window.not_before.isoformat(),
        "not_after": window.not_after.isoformat(),
        "days": window.days,
    }


def _host_section(cfg: StackConfig) -> Dict[str, Any]:
    host: Dict[str, Any] = {"hostname": socket.gethostname()}
    try:
        mem = psutil.virtual_memory()
        disk = psutil.disk_usage(str(cfg.home))
        host["uptime"] = uptime()
        host["memory"] = f"{human_bytes(mem.used)}/{human_bytes(mem.total)}"
        host["disk"] = f"{human_bytes(disk.used)}/{human_bytes(disk.total)} ({disk.percent:.0f}%)"
    except (OSError, psutil.Error) as e:
        logger.debug("Host metrics unavailable: %s", e)
        host.setdefault("uptime", "N/A")
        host.setdefault("memory", "N/A")
        host.setdefault("disk", "N/A")
    return host


def collect_report(
    cfg: StackConfig,
    *,
    services: Optional[List[Service]] = None,
    interval: float = 1.0,
) -> Dict[str, Any]:
    services = services if services is not None else build_services(cfg)

    try:
        resources: Optional[Dict[str, float]] = resource_usage(str(cfg.home), interval=interval)
    except (OSError, psutil.Error) as e:
        logger.debug("Resource usage unavailable: %s", e)
        resources = None

    logs: Dict[str, Optional[List[str]]] = {}
    for label, name in RECENT_LOGS:
        logs[label] = tail(cfg.log_file(name))

    return {
        "generated": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        "host": _host_section(cfg),
        "ip": route_ip(),
        "ports": {str(p): up for p, up in listening_ports(cfg.ports.values()).items()},
        "services": service_status(cfg, services),
        "certificate": certificate_status(cfg),
        "resources": resources,
        "logs": logs,
        "urls": cfg.urls(),
    }


def format_report(report: Dict[str, Any], cfg: StackConfig) -> List[str]:
    host = report["host"]
    out = [
        "Termux Server Status Report",
        "=================================",
        f"Generated: {report['generated']}",
        "",
        "System Information:",
        f"  Hostname: {host.get('hostname')}",
        f"  Uptime: {host.get('uptime')}",
        f"  Memory: {host.get('memory')}",
        f"  Disk: {host.get('disk')}",
        "",
        "Network Status:",
        f"  IP Address: {report.get('ip') or 'N/A'}",
        "  Open Ports:",
    ]
    names = {str(v): k for k, v in cfg.ports.items()}
    for port, up in report["ports"].items():
        out.append(f"    {'LISTEN' if up else 'closed'} {port} ({names.get(port, '?')})")

    out += ["", "Running Services:"]
    for name, pids in report["services"].items():
        state = f"Running (PID: {' '.join(str(p) for p in pids)})" if pids else "Stopped"
        out.append(f"  {name}: {state}")

    cert = report.get("certificate")
    if cert is None:
        out.append("  SSL Certificate: not created")
    elif "error" in cert:
        out.append(f"  SSL Certificate: unreadable ({cert['path']})")
    else:
        out.append(f"  SSL Certificate: valid until {cert['not_after']} ({cert['days']} days)")

    out += ["", "Resource Usage:"]
    res = report.get("resources")
    if res:
        out.append(f"  CPU: {res['cpu_usage']:.1f}%")
        out.append(f"  RAM: {res['memory_usage']:.1f}%")
        out.append(f"  Disk: {res['disk_usage']:.1f}%")
    else:
        out.append("  Resource usage unavailable on this device")

    out += ["", "Recent Logs:"]
    for label, lines in report["logs"].items():
        if lines is None:
            out.append(f"  {label}: No logs yet")
            continue
        out.append(f"  {label} (last {len(lines)}):")
        out.extend(f"    {ln}" for ln in lines)

    urls = report["urls"]
    out += [
        "",
        "Access URLs:",
        f"  Main Site: {urls['dashboard']}",
        f"  Flask App: {urls['flask']}",
        f"  HTTPS: {urls['https']}",
        f"  SSH: {urls['ssh']}",
        "",
        "Tip: Add port forwarding on your router to access externally!",
    ]
    return out
