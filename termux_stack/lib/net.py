from __future__ import annotations

import logging
from typing import Optional

from .command import run_cmd

logger = logging.getLogger(__name__)

PUBLIC_IP_HINT = (
    "curl -s https://ipinfo.io/ip 2>/dev/null || curl -s https://icanhazip.com 2>/dev/null "
    "|| echo 'Unable to determine'"
)


def parse_route_src(output: str) -> Optional[str]:
    """Source address from ``ip route get <addr>`` output."""
    tokens = output.split()
    for i, tok in enumerate(tokens[:-1]):
        if tok == "src":
            return tokens[i + 1]
    return None


def parse_default_gateway(output: str) -> Optional[str]:
    """Gateway from ``ip route`` output."""
    for line in output.splitlines():
        tokens = line.split()
        if tokens[:1] == ["default"] and "via" in tokens:
            idx = tokens.index("via")
            if idx + 1 < len(tokens):
                return tokens[idx + 1]
    return None


def route_ip() -> Optional[str]:
    """Best-effort address of the interface that routes to the internet."""
    r = run_cmd(["ip", "route", "get", "8.8.8.8"], check=False)
    return parse_route_src(r.stdout) if r.ok else None


def default_gateway() -> Optional[str]:
    r = run_cmd(["ip", "route"], check=False)
    return parse_default_gateway(r.stdout) if r.ok else None
