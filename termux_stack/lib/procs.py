from __future__ import annotations

import logging
import os
import re
import socket
from dataclasses import dataclass
from typing import Dict, Iterable, List

import psutil

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcMatch:
    pid: int
    name: str
    cmdline: str


def find_processes(pattern: str, *, full: bool = False) -> List[ProcMatch]:
    """pgrep-style lookup.

    ``pattern`` is a regex searched in the process name, or in the joined
    command line when ``full`` is set (``pgrep -f``). The calling process is
    never reported.
    """

    regex = re.compile(pattern)
    me = os.getpid()
    out: List[ProcMatch] = []
    for proc in psutil.process_iter(["pid", "name", "cmdline"]):
        info = proc.info
        pid = info.get("pid")
        if pid == me:
            continue
        name = info.get("name") or ""
        cmdline = " ".join(info.get("cmdline") or [])
        target = cmdline if full else name
        if target and regex.search(target):
            out.append(ProcMatch(pid=int(pid), name=name, cmdline=cmdline))
    return out


def terminate(pids: Iterable[int], *, timeout: float = 5.0) -> List[int]:
    """SIGTERM the given pids, SIGKILL whatever survives ``timeout``.

    Returns the pids that were signalled. Processes that vanish in between are
    skipped.
    """

    procs: List[psutil.Process] = []
    for pid in pids:
        try:
            p = psutil.Process(pid)
            p.terminate()
            procs.append(p)
        except psutil.NoSuchProcess:
            continue

    _, alive = psutil.wait_procs(procs, timeout=timeout)
    for p in alive:
        logger.warning("pid %s ignored SIGTERM; killing", p.pid)
        try:
            p.kill()
        except psutil.NoSuchProcess:
            pass
    return [p.pid for p in procs]


def wait_gone(pids: Iterable[int], *, timeout: float = 5.0) -> List[int]:
    """Wait up to ``timeout`` for ``pids`` to exit; returns those still alive."""

    procs: List[psutil.Process] = []
    for pid in pids:
        try:
            procs.append(psutil.Process(pid))
        except psutil.NoSuchProcess:
            continue
    _, alive = psutil.wait_procs(procs, timeout=timeout)
    return [p.pid for p in alive]


def port_open(port: int, host: str = "127.0.0.1", *, timeout: float = 0.5) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.settimeout(timeout)
        return s.connect_ex((host, port)) == 0


def listening_ports(ports: Iterable[int]) -> Dict[int, bool]:
    """Which of ``ports`` have a listener.

    Uses the kernel socket table when readable; Android often denies that to
    apps, in which case each port is probed with a TCP connect.
    """

    wanted = list(ports)
    try:
        listening = {
            c.laddr.port
            for c in psutil.net_connections(kind="inet")
            if c.status == psutil.CONN_LISTEN and c.laddr
        }
        return {p: p in listening for p in wanted}
    except (psutil.AccessDenied, PermissionError):
        logger.debug("Socket table not readable; probing ports")
        return {p: port_open(p) for p in wanted}
