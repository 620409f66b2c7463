"""Self-signed certificate creation and validity inspection."""

import shutil
from unittest.mock import patch

import pytest

from termux_stack.lib.certs import certificate_window, create_self_signed, parse_dates_output
from termux_stack.lib.command import CmdResult

OPENSSL_DATES = "notBefore=Oct 19 09:40:00 2026 GMT\nnotAfter=Oct 19 09:40:00 2027 GMT\n"


def test_parse_validity_window():
    window = parse_dates_output(OPENSSL_DATES)
    assert window.days == 365
    assert window.not_before.year == 2026
    assert window.not_after.tzinfo is not None


def test_parse_single_digit_day():
    window = parse_dates_output("notBefore=Jan  2 00:00:00 2026 GMT\nnotAfter=Jan  2 00:00:00 2027 GMT")
    assert window.not_before.day == 2
    assert window.days == 365


def test_parse_rejects_garbage():
    with pytest.raises(ValueError):
        parse_dates_output("unable to load certificate")


def test_certificate_window_runs_openssl(tmp_path):
    result = CmdResult(argv=[], returncode=0, stdout=OPENSSL_DATES, stderr="")
    with patch("termux_stack.lib.certs.run_cmd", return_value=result) as m:
        window = certificate_window(tmp_path / "server.crt")
    assert m.call_args[0][0][:2] == ["openssl", "x509"]
    assert window.days == 365


def test_existing_pair_is_kept(tmp_path):
    crt, key = tmp_path / "server.crt", tmp_path / "server.key"
    crt.write_text("C")
    key.write_text("K")
    with patch("termux_stack.lib.certs.run_cmd") as m:
        assert create_self_signed(crt, key) is False
    m.assert_not_called()


def test_missing_key_regenerates_pair(tmp_path):
    crt, key = tmp_path / "server.crt", tmp_path / "server.key"
    crt.write_text("C")

    def fake(argv, **kwargs):
        key.write_text("K")
        return CmdResult(argv=argv, returncode=0, stdout="", stderr="")

    with patch("termux_stack.lib.certs.run_cmd", side_effect=fake) as m:
        assert create_self_signed(crt, key, days=30, subject="/CN=test") is True

    argv = m.call_args[0][0]
    assert argv[argv.index("-days") + 1] == "30"
    assert argv[argv.index("-subj") + 1] == "/CN=test"
    assert "-nodes" in argv
    assert crt.stat().st_mode & 0o777 == 0o644


@pytest.mark.skipif(shutil.which("openssl") is None, reason="openssl not installed")
def test_real_openssl_pair_has_configured_window(tmp_path):
    crt, key = tmp_path / "server.crt", tmp_path / "server.key"

    assert create_self_signed(crt, key, days=365, subject="/CN=localhost", bits=2048) is True

    assert certificate_window(crt).days == 365
    assert key.stat().st_mode & 0o777 == 0o600
