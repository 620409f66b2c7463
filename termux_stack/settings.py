from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from .lib.env import default_home, default_prefix


@dataclass(frozen=True)
class StackConfig:
    """Read-only view over ``state["config"]``.

    Every path the installer writes and the lifecycle commands later read is
    derived here, so both sides agree on the layout by construction.
    """

    raw: Dict[str, Any]

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "StackConfig":
        return cls(raw=dict(state.get("config") or {}))

    @property
    def home(self) -> Path:
        return Path(os.path.expanduser(str(self.raw.get("home") or default_home())))

    @property
    def prefix(self) -> Path:
        return Path(str(self.raw.get("prefix") or default_prefix()))

    @property
    def dry_run(self) -> bool:
        return bool(self.raw.get("dry_run", False))

    @property
    def require_termux(self) -> bool:
        return bool(self.raw.get("require_termux", True))

    @property
    def start_now(self) -> bool:
        """Unset (None) means the user was never asked; treated as no."""
        return bool(self.raw.get("start_now"))

    @property
    def server_name(self) -> str:
        return str(self.raw.get("server_name") or "localhost")

    @property
    def http_port(self) -> int:
        return int(self.raw.get("http_port") or 8080)

    @property
    def https_port(self) -> int:
        return int(self.raw.get("https_port") or 8443)

    @property
    def app_port(self) -> int:
        return int(self.raw.get("app_port") or 5000)

    @property
    def ssh_port(self) -> int:
        return int(self.raw.get("ssh_port") or 8022)

    @property
    def ports(self) -> Dict[str, int]:
        return {
            "http": self.http_port,
            "https": self.https_port,
            "flask": self.app_port,
            "ssh": self.ssh_port,
        }

    @property
    def php_enabled(self) -> bool:
        return bool(self.raw.get("php_enabled", True))

    @property
    def cert_days(self) -> int:
        return int(self.raw.get("cert_days") or 365)

    @property
    def cert_subject(self) -> str:
        return str(self.raw.get("cert_subject") or "/CN=localhost")

    @property
    def backup_keep(self) -> int:
        return int(self.raw.get("backup_keep") or 5)

    @property
    def settle_seconds(self) -> float:
        return float(self.raw.get("settle_seconds", 2.0))

    @property
    def restart_delay(self) -> float:
        return float(self.raw.get("restart_delay", 3.0))

    @property
    def stop_timeout(self) -> float:
        return float(self.raw.get("stop_timeout", 5.0))

    @property
    def autostart_delay(self) -> int:
        return int(self.raw.get("autostart_delay", 10))

    # Layout under $HOME

    @property
    def www_dir(self) -> Path:
        return self.home / "www"

    @property
    def html_dir(self) -> Path:
        return self.www_dir / "html"

    @property
    def python_dir(self) -> Path:
        return self.www_dir / "python"

    @property
    def logs_dir(self) -> Path:
        return self.www_dir / "logs"

    @property
    def ssl_dir(self) -> Path:
        return self.www_dir / "ssl"

    @property
    def ssh_dir(self) -> Path:
        return self.home / ".ssh"

    @property
    def scripts_dir(self) -> Path:
        return self.home / "scripts"

    @property
    def backups_dir(self) -> Path:
        return self.home / "backups"

    @property
    def directories(self) -> List[Path]:
        return [
            self.html_dir,
            self.python_dir,
            self.logs_dir,
            self.ssl_dir,
            self.ssh_dir,
            self.scripts_dir,
            self.backups_dir,
        ]

    @property
    def app_path(self) -> Path:
        return self.python_dir / "app.py"

    @property
    def cert_path(self) -> Path:
        return self.ssl_dir / "server.crt"

    @property
    def key_path(self) -> Path:
        return self.ssl_dir / "server.key"

    @property
    def ssh_key_path(self) -> Path:
        return self.ssh_dir / "termux_key"

    @property
    def service_pid_file(self) -> Path:
        return self.home / ".termux-server.pid"

    @property
    def boot_script_path(self) -> Path:
        return self.home / ".termux" / "boot" / "start-server"

    def log_file(self, name: str) -> Path:
        return self.logs_dir / name

    # Layout under $PREFIX

    @property
    def nginx_conf_path(self) -> Path:
        return self.prefix / "etc" / "nginx" / "nginx.conf"

    @property
    def nginx_pid_path(self) -> Path:
        return self.prefix / "var" / "run" / "nginx.pid"

    @property
    def sshd_config_path(self) -> Path:
        return self.prefix / "etc" / "ssh" / "sshd_config"

    @property
    def sftp_server_path(self) -> Path:
        return self.prefix / "libexec" / "sftp-server"

    def template_context(self) -> Dict[str, Any]:
        """Values shared by every installer template."""
        return {
            "home": str(self.home),
            "prefix": str(self.prefix),
            "server_name": self.server_name,
            "http_port": self.http_port,
            "https_port": self.https_port,
            "app_port": self.app_port,
            "ssh_port": self.ssh_port,
            "php_enabled": self.php_enabled,
            "html_dir": str(self.html_dir),
            "python_dir": str(self.python_dir),
            "logs_dir": str(self.logs_dir),
            "cert_path": str(self.cert_path),
            "key_path": str(self.key_path),
            "pid_path": str(self.nginx_pid_path),
            "sftp_server": str(self.sftp_server_path),
        }

    def urls(self) -> Dict[str, str]:
        return {
            "dashboard": f"http://localhost:{self.http_port}",
            "flask": f"http://localhost:{self.app_port}",
            "https": f"https://localhost:{self.https_port}",
            "ssh": f"ssh -p {self.ssh_port} $USER@localhost",
        }


# Wrapper scripts written to $HOME: file name -> lifecycle sub-command.
MANAGEMENT_SCRIPTS: Dict[str, str] = {
    "start_servers.sh": "start",
    "stop_servers.sh": "stop",
    "restart_servers.sh": "restart",
    "monitor_server.sh": "status",
    "backup_server.sh": "backup",
    "network_config.sh": "network",
    "update_server.sh": "update",
    "service_manager.sh": "service",
}
