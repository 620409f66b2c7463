from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)

_OPENSSL_DATE_FMT = "%b %d %H:%M:%S %Y %Z"


@dataclass(frozen=True)
class CertWindow:
    not_before: datetime
    not_after: datetime

    @property
    def days(self) -> int:
        return (self.not_after - self.not_before).days


def create_self_signed(
    cert_path: Path,
    key_path: Path,
    *,
    days: int = 365,
    subject: str = "/CN=localhost",
    bits: int = 4096,
    dry_run: bool = False,
) -> bool:
    """Create an RSA key + self-signed certificate unless both already exist.

    Returns True when a new pair was generated.
    """

    if cert_path.exists() and key_path.exists():
        logger.info("Certificate present, keeping %s", str(cert_path))
        return False

    run_cmd(
        [
            "openssl",
            "req",
            "-x509",
            "-newkey",
            f"rsa:{bits}",
            "-keyout",
            str(key_path),
            "-out",
            str(cert_path),
            "-days",
            str(days),
            "-nodes",
            "-subj",
            subject,
        ],
        dry_run=dry_run,
    )
    if not dry_run:
        key_path.chmod(0o600)
        cert_path.chmod(0o644)
    logger.info("Created self-signed certificate %s (days=%s)", str(cert_path), days)
    return True


def parse_openssl_date(value: str) -> datetime:
    return datetime.strptime(value.strip(), _OPENSSL_DATE_FMT).replace(tzinfo=timezone.utc)


def parse_dates_output(output: str) -> CertWindow:
    """Parse ``openssl x509 -noout -startdate -enddate`` output."""
    fields = {}
    for line in output.splitlines():
        if "=" in line:
            k, v = line.split("=", 1)
            fields[k.strip()] = v
    try:
        return CertWindow(
            not_before=parse_openssl_date(fields["notBefore"]),
            not_after=parse_openssl_date(fields["notAfter"]),
        )
    except KeyError as e:
        raise ValueError(f"Unexpected openssl x509 output: {output!r}") from e


def certificate_window(cert_path: Path) -> CertWindow:
    r = run_cmd(["openssl", "x509", "-in", str(cert_path), "-noout", "-startdate", "-enddate"])
    return parse_dates_output(r.stdout)
