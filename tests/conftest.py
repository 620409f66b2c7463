"""Pytest configuration and fixtures for termux-stack tests."""

from typing import List

import pytest

from termux_stack.lib.procs import ProcMatch
from termux_stack.services import ALREADY_RUNNING, NOT_RUNNING, STARTED, STOPPED, Service
from termux_stack.settings import StackConfig
from termux_stack.state_store import ensure_defaults


@pytest.fixture
def stack_state(tmp_path):
    """Fresh state pointing HOME and PREFIX into a temporary tree."""
    home = tmp_path / "home"
    prefix = tmp_path / "usr"
    home.mkdir()
    prefix.mkdir()
    state = ensure_defaults(
        {
            "config": {
                "home": str(home),
                "prefix": str(prefix),
                "require_termux": False,
                "settle_seconds": 0,
                "restart_delay": 0,
                "stop_timeout": 0.1,
            }
        }
    )
    state["execution"]["paths"] = {"state_path": str(tmp_path / "state.json")}
    return state


@pytest.fixture
def cfg(stack_state):
    return StackConfig.from_state(stack_state)


class FakeService(Service):
    """In-memory service: no processes are scanned or spawned."""

    def __init__(self, cfg, name, *, running=False, pids=(4242,)):
        super().__init__(cfg)
        self.name = name
        self.label = name.capitalize()
        self.running = running
        self.pids = list(pids)
        self.calls: List[str] = []

    def processes(self):
        if not self.running:
            return []
        return [ProcMatch(pid=p, name=self.name, cmdline=self.name) for p in self.pids]

    def _launch(self):
        self.calls.append("launch")
        self.running = True

    def _halt(self, matches):
        self.calls.append("halt")
        self.running = False


@pytest.fixture
def fake_services(cfg):
    return [FakeService(cfg, "nginx"), FakeService(cfg, "flask"), FakeService(cfg, "sshd")]
