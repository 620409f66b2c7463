from __future__ import annotations

import logging
import subprocess
import sys
from typing import Dict, List, Optional, Sequence, Tuple

import psutil

from .lib.command import CommandError, run_cmd
from .lib.procs import ProcMatch, find_processes, terminate, wait_gone
from .settings import StackConfig

logger = logging.getLogger(__name__)

STARTED = "started"
ALREADY_RUNNING = "already_running"
STOPPED = "stopped"
NOT_RUNNING = "not_running"
FAILED = "failed"


class Service:
    """One supervised process, found by name or command-line pattern.

    There is no pid file: whether the service runs is decided by scanning the
    process table, the same way ``pgrep`` would.
    """

    name = ""
    label = ""
    pattern = ""
    full_match = False

    def __init__(self, cfg: StackConfig, *, dry_run: bool = False) -> None:
        self.cfg = cfg
        self.dry_run = dry_run

    @property
    def ports(self) -> Tuple[int, ...]:
        return ()

    def processes(self) -> List[ProcMatch]:
        return find_processes(self.pattern, full=self.full_match)

    def is_running(self) -> bool:
        return bool(self.processes())

    def start(self) -> str:
        if self.is_running():
            logger.warning("%s is already running", self.label)
            return ALREADY_RUNNING
        self._launch()
        logger.info("%s started on port(s) %s", self.label, ", ".join(str(p) for p in self.ports))
        return STARTED

    def stop(self) -> str:
        matches = self.processes()
        if not matches:
            logger.info("%s was not running", self.label)
            return NOT_RUNNING
        self._halt(matches)
        logger.info("%s stopped", self.label)
        return STOPPED

    def _launch(self) -> None:
        raise NotImplementedError

    def _halt(self, matches: Sequence[ProcMatch]) -> None:
        if self.dry_run:
            logger.info("Would terminate %s pids %s", self.label, [m.pid for m in matches])
            return
        terminate([m.pid for m in matches], timeout=self.cfg.stop_timeout)


class NginxService(Service):
    name = "nginx"
    label = "Nginx"
    pattern = "nginx"

    @property
    def ports(self) -> Tuple[int, ...]:
        return (self.cfg.http_port, self.cfg.https_port)

    def _launch(self) -> None:
        # Refuse to start on a broken config; nginx -t reports why.
        run_cmd(["nginx", "-t"], dry_run=self.dry_run)
        run_cmd(["nginx"], dry_run=self.dry_run)

    def _halt(self, matches: Sequence[ProcMatch]) -> None:
        """Graceful quit, then signals for whatever is left.

        Workers drain open connections after ``-s quit``; the call returns
        once every matched pid is gone so a following start sees a clean
        process table.
        """

        try:
            run_cmd(["nginx", "-s", "quit"], dry_run=self.dry_run)
        except CommandError as e:
            logger.warning("nginx -s quit failed (rc=%s); signalling processes", e.returncode)
            super()._halt(matches)
            return
        if self.dry_run:
            return

        alive = wait_gone([m.pid for m in matches], timeout=self.cfg.stop_timeout)
        if alive:
            logger.warning("nginx pids %s still running after quit; terminating", alive)
            terminate(alive, timeout=self.cfg.stop_timeout)


class FlaskService(Service):
    name = "flask"
    label = "Python Flask server"
    pattern = r"python.*app\.py"
    full_match = True

    @property
    def ports(self) -> Tuple[int, ...]:
        return (self.cfg.app_port,)

    def _launch(self) -> None:
        argv = [sys.executable, str(self.cfg.app_path)]
        log_path = self.cfg.log_file("flask.log")
        if self.dry_run:
            logger.info("Would spawn %s (log=%s)", " ".join(argv), str(log_path))
            return
        if not self.cfg.app_path.exists():
            raise FileNotFoundError(f"Application missing: {self.cfg.app_path}")
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(log_path, "a", encoding="utf-8") as log:
            subprocess.Popen(
                argv,
                cwd=str(self.cfg.python_dir),
                stdin=subprocess.DEVNULL,
                stdout=log,
                stderr=subprocess.STDOUT,
                start_new_session=True,
            )


class SshdService(Service):
    name = "sshd"
    label = "SSH server"
    pattern = "sshd"

    @property
    def ports(self) -> Tuple[int, ...]:
        return (self.cfg.ssh_port,)

    def _launch(self) -> None:
        run_cmd(["sshd"], dry_run=self.dry_run)


def build_services(cfg: StackConfig, *, dry_run: bool = False) -> List[Service]:
    return [
        NginxService(cfg, dry_run=dry_run),
        FlaskService(cfg, dry_run=dry_run),
        SshdService(cfg, dry_run=dry_run),
    ]


def start_all(cfg: StackConfig, services: Optional[Sequence[Service]] = None) -> Dict[str, str]:
    """Start every service that is not already up.

    A service that fails to start is logged and reported as ``failed``; the
    remaining services are still attempted.
    """

    results: Dict[str, str] = {}
    for svc in services if services is not None else build_services(cfg):
        try:
            results[svc.name] = svc.start()
        except (CommandError, OSError, psutil.Error) as e:
            logger.error("Failed to start %s: %s", svc.label, e)
            results[svc.name] = FAILED
    return results


def stop_all(cfg: StackConfig, services: Optional[Sequence[Service]] = None) -> Dict[str, str]:
    results: Dict[str, str] = {}
    for svc in services if services is not None else build_services(cfg):
        try:
            results[svc.name] = svc.stop()
        except (CommandError, OSError, psutil.Error) as e:
            logger.error("Failed to stop %s: %s", svc.label, e)
            results[svc.name] = FAILED
    return results


def service_status(cfg: StackConfig, services: Optional[Sequence[Service]] = None) -> Dict[str, List[int]]:
    """Service name -> running pids (empty when stopped)."""
    return {
        svc.name: [m.pid for m in svc.processes()]
        for svc in (services if services is not None else build_services(cfg))
    }
