from __future__ import annotations

import logging
import platform
import socket
import sys
from datetime import datetime
from typing import Any, Dict

import psutil

logger = logging.getLogger(__name__)


def local_ip() -> str:
    try:
        return socket.gethostbyname(socket.gethostname())
    except OSError:
        return "127.0.0.1"


def uptime() -> str:
    boot = datetime.fromtimestamp(psutil.boot_time())
    return str(datetime.now() - boot).split(".")[0]


def resource_usage(path: str = "/", *, interval: float = 1.0) -> Dict[str, float]:
    return {
        "cpu_usage": round(psutil.cpu_percent(interval=interval), 1),
        "memory_usage": round(psutil.virtual_memory().percent, 1),
        "disk_usage": round(psutil.disk_usage(path).percent, 1),
    }


def system_info(*, interval: float = 1.0) -> Dict[str, Any]:
    """Host facts for the dashboard.

    Android restricts /proc for apps, so any psutil failure degrades to
    placeholder values instead of failing the request.
    """

    info: Dict[str, Any] = {
        "python_version": sys.version.split()[0],
        "platform": sys.platform,
        "machine": platform.machine(),
        "hostname": socket.gethostname() or "localhost",
        "server_time": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        "local_ip": local_ip(),
    }
    try:
        info["uptime"] = uptime()
        info.update(resource_usage(interval=interval))
    except (OSError, psutil.Error) as e:
        logger.debug("System metrics unavailable: %s", e)
        info.update({"uptime": "Unknown", "cpu_usage": 0, "memory_usage": 0, "disk_usage": 0})
    return info
