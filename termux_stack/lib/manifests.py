from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml


def _package_root() -> Path:
    # termux_stack/lib/manifests.py -> termux_stack
    return Path(__file__).resolve().parents[1]


def load_yaml_rel(rel_path: str) -> Dict[str, Any]:
    """Load a YAML file shipped inside the package (manifests/...)."""
    p = _package_root() / rel_path.lstrip("/")
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {p}")
    return data


@dataclass(frozen=True)
class PackageGroup:
    group_id: str
    task: str
    manager: str
    required: bool
    packages: List[str] = field(default_factory=list)
    upgrade_pip: bool = False

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "PackageGroup":
        manager = str(raw.get("manager") or "pkg")
        if manager not in {"pkg", "pip"}:
            raise ValueError(f"Unknown package manager {manager!r} in group {raw.get('id')}")
        pkgs = raw.get("packages") or []
        if not isinstance(pkgs, list):
            raise ValueError(f"Package group {raw.get('id')} packages must be a list")
        return cls(
            group_id=str(raw["id"]),
            task=str(raw.get("task") or f"Installing {raw['id']}..."),
            manager=manager,
            required=bool(raw.get("required", False)),
            packages=[str(p).strip() for p in pkgs if str(p).strip()],
            upgrade_pip=bool(raw.get("upgrade_pip", False)),
        )


def load_package_groups(rel_path: str = "manifests/packages.yaml") -> List[PackageGroup]:
    manifest = load_yaml_rel(rel_path)
    groups = manifest.get("package_groups") or []
    if not isinstance(groups, list):
        raise ValueError(f"{rel_path}: package_groups must be a list")
    return [PackageGroup.from_dict(g) for g in groups]
