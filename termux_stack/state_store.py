from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml

from .lib.env import default_home, default_prefix

logger = logging.getLogger(__name__)

STATE_VERSION = "1"


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"yaml", "yml"}:
        return "yaml"
    # Default to JSON for unknown extensions.
    return "json"


def load_state(path: str) -> Dict[str, Any]:
    p = Path(os.path.expanduser(path))
    if not p.exists():
        return {}

    text = p.read_text(encoding="utf-8")
    if _detect_format(p) == "yaml":
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text) if text.strip() else {}

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")

    return data


def save_state(path: str, state: Dict[str, Any]) -> None:
    p = Path(os.path.expanduser(path))
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) == "yaml":
        p.write_text(yaml.safe_dump(state, sort_keys=False), encoding="utf-8")
    else:
        p.write_text(json.dumps(state, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    logger.debug("State saved to %s", p)


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys with sane defaults (without overriding user values)."""

    state.setdefault("version", STATE_VERSION)
    state.setdefault("config", {})
    state.setdefault("execution", {})

    cfg = state["config"]
    cfg.setdefault("home", default_home())
    cfg.setdefault("prefix", default_prefix())
    cfg.setdefault("require_termux", True)
    cfg.setdefault("dry_run", False)
    # None means "ask"; main.py resolves it from the prompt or --yes/--no-start.
    cfg.setdefault("start_now", None)

    cfg.setdefault("http_port", 8080)
    cfg.setdefault("https_port", 8443)
    cfg.setdefault("app_port", 5000)
    cfg.setdefault("ssh_port", 8022)
    cfg.setdefault("server_name", "localhost")
    cfg.setdefault("php_enabled", True)

    cfg.setdefault("cert_days", 365)
    cfg.setdefault("cert_subject", "/C=US/ST=Mobile/L=Termux/O=MobileServer/CN=localhost")

    cfg.setdefault("backup_keep", 5)
    cfg.setdefault("settle_seconds", 2.0)
    cfg.setdefault("restart_delay", 3.0)
    cfg.setdefault("stop_timeout", 5.0)
    cfg.setdefault("autostart_delay", 10)

    exe = state["execution"]
    exe.setdefault("current_step", None)
    exe.setdefault("completed_steps", [])
    exe.setdefault("errors", [])
    exe.setdefault("warnings", [])

    return state


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    exe = state.setdefault("execution", {})
    completed = exe.setdefault("completed_steps", [])
    if step_id not in completed:
        completed.append(step_id)


def is_step_completed(state: Dict[str, Any], step_id: str) -> bool:
    exe = state.get("execution") or {}
    completed = exe.get("completed_steps") or []
    return step_id in completed


def record_warning(state: Dict[str, Any], warning: Dict[str, Any]) -> None:
    state.setdefault("execution", {}).setdefault("warnings", []).append(warning)


def record_decision(state: Dict[str, Any], key: str, value: Any) -> None:
    state.setdefault("execution", {}).setdefault("decisions", {})[key] = value


def recorded_state_path(state: Dict[str, Any], default: str) -> str:
    """State path the installer was started with (baked into generated scripts)."""
    paths = (state.get("execution") or {}).get("paths") or {}
    return str(paths.get("state_path") or default)
