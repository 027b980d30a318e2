"""
Package-manager queries.

Each manager knows the command that lists (or looks up) installed packages and how
to find a package plus its version in that output.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

ParseFn = Callable[[str, str], "tuple[bool, str | None]"]


@dataclass(frozen=True, slots=True)
class PackageManager:
    name: str
    label: str
    executable: str
    argv: Callable[[str], list[str]]
    parse: ParseFn
    # snap answers per-package; exit 1 means "not installed", not "query broken".
    exit_status_is_membership: bool = False
    # npm ls exits 1 on tree problems (extraneous, invalid, missing peers) but still lists.
    lists_on_error: bool = False


def _columns(line: str) -> list[str]:
    return line.replace("\t", " ").split()


def parse_snap(output: str, package: str) -> tuple[bool, str | None]:
    # Name  Version  Rev  Tracking  Publisher  Notes
    for line in output.splitlines():
        cols = _columns(line)
        if len(cols) >= 2 and cols[0] == package:
            return True, cols[1]
    return False, None


def parse_flatpak(output: str, package: str) -> tuple[bool, str | None]:
    for line in output.splitlines():
        cols = line.split("\t") if "\t" in line else _columns(line)
        if not cols or package not in cols[0]:
            continue
        version = cols[1].strip() if len(cols) > 1 and cols[1].strip() else None
        return True, version
    return False, None


_NPM_TREE_RE = re.compile(r"^[\s│├└─+`|\\-]*")


def parse_npm(output: str, package: str) -> tuple[bool, str | None]:
    for line in output.splitlines():
        item = _NPM_TREE_RE.sub("", line).strip()
        if not item:
            continue
        # Drop trailing markers: "extraneous", "invalid", linked "-> ./path".
        item = item.split()[0]
        # Scoped packages keep their leading "@".
        name, sep, version = item.rpartition("@")
        if not sep or not name:
            continue
        if name == package:
            return True, version or None
    return False, None


def _normalize_pypi(name: str) -> str:
    return re.sub(r"[-_.]+", "-", name).lower()


def parse_pip(output: str, package: str) -> tuple[bool, str | None]:
    want = _normalize_pypi(package)
    for line in output.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "==" in line:
            name, _, version = line.partition("==")
        elif " @ " in line:
            name, _, version = line.partition(" @ ")
            version = ""
        else:
            name, version = line, ""
        if _normalize_pypi(name.strip()) == want:
            return True, version.strip() or None
    return False, None


def parse_cargo(output: str, package: str) -> tuple[bool, str | None]:
    # "ripgrep v14.1.0:" at column 0, binaries indented below.
    for line in output.splitlines():
        if not line or line[0].isspace():
            continue
        cols = line.rstrip(":").split()
        if cols and cols[0] == package:
            version = cols[1] if len(cols) > 1 else ""
            return True, version.lstrip("v") or None
    return False, None


def parse_gem(output: str, package: str) -> tuple[bool, str | None]:
    for line in output.splitlines():
        name, sep, rest = line.strip().partition(" (")
        if not sep or name != package:
            continue
        inner = rest.rstrip(")").split(",")[0].strip()
        inner = inner.replace("default:", "").strip()
        return True, inner or None
    return False, None


def parse_brew(output: str, package: str) -> tuple[bool, str | None]:
    for line in output.splitlines():
        cols = _columns(line)
        if cols and cols[0] == package:
            return True, cols[-1] if len(cols) > 1 else None
    return False, None


MANAGERS: dict[str, PackageManager] = {
    m.name: m
    for m in (
        PackageManager(
            name="snap",
            label="Snap",
            executable="snap",
            argv=lambda pkg: ["snap", "list", pkg],
            parse=parse_snap,
            exit_status_is_membership=True,
        ),
        PackageManager(
            name="flatpak",
            label="Flatpak",
            executable="flatpak",
            argv=lambda pkg: ["flatpak", "list", "--app", "--columns=application,version"],
            parse=parse_flatpak,
        ),
        PackageManager(
            name="npm",
            label="npm",
            executable="npm",
            argv=lambda pkg: ["npm", "ls", "-g", "--depth=0"],
            parse=parse_npm,
            lists_on_error=True,
        ),
        PackageManager(
            name="pip",
            label="pip",
            executable="pip3",
            argv=lambda pkg: ["pip3", "list", "--format=freeze"],
            parse=parse_pip,
        ),
        PackageManager(
            name="cargo",
            label="Cargo",
            executable="cargo",
            argv=lambda pkg: ["cargo", "install", "--list"],
            parse=parse_cargo,
        ),
        PackageManager(
            name="gem",
            label="RubyGems",
            executable="gem",
            argv=lambda pkg: ["gem", "list", "--local"],
            parse=parse_gem,
        ),
        PackageManager(
            name="brew",
            label="Homebrew",
            executable="brew",
            argv=lambda pkg: ["brew", "list", "--versions"],
            parse=parse_brew,
        ),
    )
}


def get_manager(name: str) -> PackageManager:
    try:
        return MANAGERS[str(name).strip().lower()]
    except KeyError:
        raise KeyError(f"unknown package manager: {name}") from None
