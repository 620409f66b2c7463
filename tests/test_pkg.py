"""Package groups: required/optional policy and the pip self-upgrade."""

from unittest.mock import patch

import pytest

from termux_stack.lib.command import CmdResult, CommandError
from termux_stack.lib.manifests import PackageGroup, load_package_groups
from termux_stack.lib.pkg import install_group

PIP_GROUP = PackageGroup(
    group_id="python_packages",
    task="Installing Python packages...",
    manager="pip",
    required=True,
    packages=["flask", "psutil"],
    upgrade_pip=True,
)


def _ok(argv, **kwargs):
    return CmdResult(argv=list(argv), returncode=0, stdout="", stderr="")


def test_refused_pip_self_upgrade_does_not_abort():
    calls = []

    def fake(argv, **kwargs):
        calls.append(list(argv))
        if argv[-2:] == ["--upgrade", "pip"]:
            raise CommandError(argv, 1, "ERROR: Installing pip is forbidden")
        return _ok(argv)

    with patch("termux_stack.lib.pkg.run_cmd", side_effect=fake):
        assert install_group(PIP_GROUP) is True

    assert calls[-1][-2:] == ["flask", "psutil"]


def test_required_pip_group_failure_raises():
    def fake(argv, **kwargs):
        if "flask" in argv:
            raise CommandError(argv, 1, "no matching distribution")
        return _ok(argv)

    with patch("termux_stack.lib.pkg.run_cmd", side_effect=fake):
        with pytest.raises(CommandError):
            install_group(PIP_GROUP)


def test_manifest_keeps_frameworks_optional():
    groups = {g.group_id: g for g in load_package_groups()}

    runtime = groups["python_packages"]
    assert runtime.required
    assert {"flask", "jinja2", "pyyaml", "psutil"} <= set(runtime.packages)
    assert "fastapi" not in runtime.packages

    frameworks = groups["python_frameworks"]
    assert frameworks.manager == "pip"
    assert not frameworks.required
    assert "django" in frameworks.packages


def test_optional_framework_failure_returns_false():
    frameworks = next(g for g in load_package_groups() if g.group_id == "python_frameworks")
    with patch("termux_stack.lib.pkg.run_cmd", side_effect=CommandError(["pip"], 1, "pydantic-core needs Rust")):
        assert install_group(frameworks, upgrade=True) is False
