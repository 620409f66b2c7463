"""Dashboard and JSON API served by the application process on port 5000.

nginx forwards ``/api/`` here, so the same endpoints answer on both the
application port and the web server port.
"""

from __future__ import annotations

import argparse
import logging
from datetime import datetime
from typing import Any, Dict, Optional

import psutil
from flask import Flask, jsonify, render_template, request

from .lib.env import PATHS
from .lib.sysinfo import local_ip, system_info
from .logging_utils import configure_logging
from .services import build_services
from .settings import StackConfig
from .state_store import ensure_defaults, load_state

logger = logging.getLogger(__name__)

ENDPOINTS = [
    ("GET", "/api/status", "Server status information"),
    ("GET", "/api/system", "Detailed system information"),
    ("GET", "/api/network", "Network configuration"),
    ("POST", "/api/test", "Test endpoint for POST requests"),
]


def _service_states(cfg: StackConfig) -> Dict[str, str]:
    states: Dict[str, str] = {}
    for svc in build_services(cfg):
        try:
            up = svc.is_running()
        except (OSError, psutil.Error):
            up = False
        key = "ssh" if svc.name == "sshd" else svc.name
        states[key] = "running" if up else "stopped"
    # This handler runs inside the application process.
    states["flask"] = "running"
    return states


def create_app(cfg: Optional[StackConfig] = None, *, metrics_interval: float = 1.0) -> Flask:
    cfg = cfg or StackConfig(raw=ensure_defaults({})["config"])

    app = Flask(__name__, template_folder="templates/web")
    app.config["STACK"] = cfg

    @app.route("/")
    def home():
        return render_template(
            "dashboard.html",
            ports=cfg.ports,
            endpoints=ENDPOINTS,
            **system_info(interval=metrics_interval),
        )

    @app.route("/dashboard")
    def dashboard():
        return home()

    @app.route("/api/status")
    def api_status():
        return jsonify(
            {
                "status": "online",
                "message": "Termux server is running",
                "timestamp": datetime.now().isoformat(),
                "services": _service_states(cfg),
            }
        )

    @app.route("/api/system")
    def api_system():
        return jsonify(system_info(interval=metrics_interval))

    @app.route("/api/network")
    def api_network():
        return jsonify(
            {
                "ports": cfg.ports,
                "protocols": ["HTTP", "HTTPS", "SSH"],
                "local_ip": local_ip(),
            }
        )

    @app.route("/api/test", methods=["GET", "POST"])
    def api_test():
        if request.method == "POST":
            data: Any = request.get_json(silent=True) or {}
            return jsonify(
                {
                    "method": "POST",
                    "received_data": data,
                    "message": "POST request processed successfully",
                }
            )
        return jsonify(
            {
                "method": "GET",
                "message": "Test endpoint is working",
                "timestamp": datetime.now().isoformat(),
            }
        )

    return app


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="termux-stack-webapp")
    p.add_argument("--state", default=PATHS.state_default, help="Path to installer state (json|yaml)")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=None, help="Defaults to config.app_port")
    args = p.parse_args(argv)

    cfg = StackConfig.from_state(ensure_defaults(load_state(args.state)))
    # stdout already goes to flask.log; keep a single copy of each line.
    configure_logging(log_path=str(cfg.log_file("termux-stack.log")), also_console=False)

    port = args.port or cfg.app_port
    logger.info("Starting Termux Flask server on %s:%s", args.host, port)
    create_app(cfg).run(host=args.host, port=port, debug=False, threaded=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
