"""Backups: archive contents and rotation."""

import tarfile
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from termux_stack.backup import create_backup, rotate_backups


def test_backup_contains_web_root_and_configs(cfg):
    cfg.html_dir.mkdir(parents=True)
    (cfg.html_dir / "index.html").write_text("<h1>hi</h1>")
    (cfg.home / "start_servers.sh").write_text("#!/bin/sh\n")
    cfg.nginx_conf_path.parent.mkdir(parents=True)
    cfg.nginx_conf_path.write_text("events {}\n")

    out = create_backup(cfg, now=datetime(2026, 10, 19, 9, 40, 0))

    assert out.name == "termux_server_backup_20261019_094000.tar.gz"
    with tarfile.open(out) as tar:
        names = tar.getnames()
    assert "home/www/html/index.html" in names
    assert "home/start_servers.sh" in names
    assert any(n.endswith("etc/nginx/nginx.conf") for n in names)


def test_backup_skips_missing_sources(cfg):
    out = create_backup(cfg)
    with tarfile.open(out) as tar:
        assert tar.getnames() == []


def test_rotation_keeps_newest(cfg):
    start = datetime(2026, 1, 1)
    for i in range(7):
        create_backup(cfg, now=start + timedelta(minutes=i))

    removed = rotate_backups(cfg.backups_dir, keep=5)

    remaining = sorted(p.name for p in cfg.backups_dir.iterdir())
    assert len(remaining) == 5
    assert [p.name for p in removed] == [
        "termux_server_backup_20260101_000100.tar.gz",
        "termux_server_backup_20260101_000000.tar.gz",
    ]
    assert remaining[-1] == "termux_server_backup_20260101_000600.tar.gz"


def test_failed_backup_leaves_no_archive(cfg):
    start = datetime(2026, 1, 1)
    for i in range(5):
        create_backup(cfg, now=start + timedelta(minutes=i))
    good = sorted(p.name for p in cfg.backups_dir.iterdir())

    cfg.html_dir.mkdir(parents=True)
    (cfg.home / "start_servers.sh").write_text("#!/bin/sh\n")
    real_add = tarfile.TarFile.add
    calls = []

    def flaky_add(self, *args, **kwargs):
        calls.append(args[0])
        if len(calls) == 2:
            raise PermissionError("permission denied")
        return real_add(self, *args, **kwargs)

    with patch.object(tarfile.TarFile, "add", flaky_add):
        with pytest.raises(PermissionError):
            create_backup(cfg, now=datetime(2026, 1, 2))

    assert sorted(p.name for p in cfg.backups_dir.iterdir()) == good
    assert rotate_backups(cfg.backups_dir, keep=5) == []
