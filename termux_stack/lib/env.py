from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

TERMUX_APP_DIR = "/data/data/com.termux"
TERMUX_PREFIX = "/data/data/com.termux/files/usr"


class EnvironmentCheckError(RuntimeError):
    pass


@dataclass(frozen=True)
class Paths:
    state_default: str = os.path.join("~", ".termux-stack", "state.json")
    log_default: str = os.path.join("~", "www", "logs", "termux-stack.log")


PATHS = Paths()


def default_home() -> str:
    return os.path.expanduser("~")


def default_prefix() -> str:
    """$PREFIX as exported by Termux, or the stock location when unset."""
    return os.environ.get("PREFIX") or TERMUX_PREFIX


def is_termux(app_dir: str = TERMUX_APP_DIR) -> bool:
    return Path(app_dir).is_dir()


def require_termux(app_dir: str = TERMUX_APP_DIR) -> None:
    if not is_termux(app_dir):
        raise EnvironmentCheckError(
            f"This installer must be run in Termux ({app_dir} not found)"
        )
