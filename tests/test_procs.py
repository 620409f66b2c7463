"""pgrep-style process scanning on top of psutil."""

import os
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import psutil

from termux_stack.lib import procs


def _proc(pid, name, cmdline):
    return SimpleNamespace(info={"pid": pid, "name": name, "cmdline": cmdline})


TABLE = [
    _proc(100, "nginx", ["nginx: master process nginx"]),
    _proc(101, "nginx", ["nginx: worker process"]),
    _proc(200, "python3", ["/usr/bin/python3", "/home/www/python/app.py"]),
    _proc(300, "sshd", ["sshd"]),
    _proc(400, "bash", None),
    _proc(os.getpid(), "python3", ["python3", "app.py"]),
]


def test_match_by_name():
    with patch("termux_stack.lib.procs.psutil.process_iter", return_value=TABLE):
        found = procs.find_processes("nginx")
    assert [p.pid for p in found] == [100, 101]


def test_match_full_command_line_skips_self():
    with patch("termux_stack.lib.procs.psutil.process_iter", return_value=TABLE):
        found = procs.find_processes(r"python.*app\.py", full=True)
    assert [p.pid for p in found] == [200]
    assert found[0].cmdline == "/usr/bin/python3 /home/www/python/app.py"


def test_no_match():
    with patch("termux_stack.lib.procs.psutil.process_iter", return_value=TABLE):
        assert procs.find_processes("redis") == []


def test_terminate_kills_survivors():
    p1, p2 = MagicMock(pid=1), MagicMock(pid=2)
    with patch("termux_stack.lib.procs.psutil.Process", side_effect=[p1, p2]), patch(
        "termux_stack.lib.procs.psutil.wait_procs", return_value=([p1], [p2])
    ):
        assert procs.terminate([1, 2], timeout=0.1) == [1, 2]
    p1.terminate.assert_called_once()
    p2.kill.assert_called_once()
    p1.kill.assert_not_called()


def test_terminate_skips_vanished_process():
    with patch("termux_stack.lib.procs.psutil.Process", side_effect=psutil.NoSuchProcess(5)), patch(
        "termux_stack.lib.procs.psutil.wait_procs", return_value=([], [])
    ):
        assert procs.terminate([5]) == []


def test_listening_ports_from_socket_table():
    conns = [
        SimpleNamespace(status=psutil.CONN_LISTEN, laddr=SimpleNamespace(port=8080)),
        SimpleNamespace(status=psutil.CONN_ESTABLISHED, laddr=SimpleNamespace(port=5000)),
    ]
    with patch("termux_stack.lib.procs.psutil.net_connections", return_value=conns):
        assert procs.listening_ports([8080, 5000]) == {8080: True, 5000: False}


def test_listening_ports_falls_back_to_connect():
    with patch(
        "termux_stack.lib.procs.psutil.net_connections", side_effect=psutil.AccessDenied()
    ), patch("termux_stack.lib.procs.port_open", side_effect=lambda p: p == 8022):
        assert procs.listening_ports([8022, 8443]) == {8022: True, 8443: False}


def test_wait_gone_reports_survivors():
    p1, p2 = MagicMock(pid=100), MagicMock(pid=101)
    with patch("termux_stack.lib.procs.psutil.Process", side_effect=[p1, p2]), patch(
        "termux_stack.lib.procs.psutil.wait_procs", return_value=([p1], [p2])
    ) as wait:
        assert procs.wait_gone([100, 101], timeout=0.5) == [101]
    wait.assert_called_once_with([p1, p2], timeout=0.5)


def test_wait_gone_ignores_exited_pids():
    with patch("termux_stack.lib.procs.psutil.Process", side_effect=psutil.NoSuchProcess(5)), patch(
        "termux_stack.lib.procs.psutil.wait_procs", return_value=([], [])
    ):
        assert procs.wait_gone([5]) == []
