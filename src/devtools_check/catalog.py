"""
Tool catalog loading.

The catalog is a YAML document grouping tool entries into categories. Each entry
names exactly one detection method (`command`, `path`, `package` + `manager`) or
an ordered `any:` list of alternatives.
"""

from __future__ import annotations

from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Iterable

import yaml

from devtools_check.checks.managers import MANAGERS
from devtools_check.checks.types import (
    DEFAULT_VERSION_ARGS,
    Category,
    CheckRequest,
    ToolEntry,
)
from devtools_check.utils.log import logger

CATALOG_VERSION = 1
DEFAULT_CATALOG = "default_catalog.yaml"
_METHOD_KEYS = ("command", "path", "package")


class CatalogError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class Catalog:
    title: str
    categories: tuple[Category, ...]
    install_hint: str | None = None
    source: str = ""

    def entries(self) -> list[ToolEntry]:
        return [t for c in self.categories for t in c.tools]

    def __len__(self) -> int:
        return sum(len(c.tools) for c in self.categories)


def _parse_version_args(raw: Any, *, where: str) -> tuple[str, ...]:
    if raw is None:
        return DEFAULT_VERSION_ARGS
    if isinstance(raw, str):
        return tuple(raw.split())
    if isinstance(raw, list) and all(isinstance(x, (str, int, float)) for x in raw):
        return tuple(str(x) for x in raw)
    raise CatalogError(f"{where}: version_args must be a string or list of strings")


def _parse_request(raw: Any, *, name: str, where: str) -> CheckRequest:
    if not isinstance(raw, dict):
        raise CatalogError(f"{where}: alternative must be a mapping")
    keys = [k for k in _METHOD_KEYS if k in raw]
    if len(keys) != 1:
        raise CatalogError(f"{where}: expected exactly one of {', '.join(_METHOD_KEYS)}")
    method = keys[0]
    ident = str(raw.get(method) or "").strip()
    if not ident:
        raise CatalogError(f"{where}: empty {method}")

    manager = None
    if method == "package":
        manager = str(raw.get("manager") or "").strip().lower()
        if not manager:
            raise CatalogError(f"{where}: package requires a manager")
        if manager not in MANAGERS:
            raise CatalogError(
                f"{where}: unknown manager {manager!r} (known: {', '.join(sorted(MANAGERS))})"
            )
    elif raw.get("manager"):
        raise CatalogError(f"{where}: manager is only valid with package")

    return CheckRequest(
        method=method,  # type: ignore[arg-type]
        identifier=ident,
        display_name=name,
        manager=manager,
        version_args=_parse_version_args(raw.get("version_args"), where=where),
    )


def _parse_tool(raw: Any, *, where: str) -> ToolEntry:
    if not isinstance(raw, dict):
        raise CatalogError(f"{where}: tool must be a mapping")
    name = str(raw.get("name") or "").strip()
    if not name:
        raise CatalogError(f"{where}: tool name is required")
    where = f"{where} ({name})"

    if "any" in raw:
        if any(k in raw for k in _METHOD_KEYS):
            raise CatalogError(f"{where}: use either any: or a single method, not both")
        alts = raw.get("any")
        if not isinstance(alts, list) or not alts:
            raise CatalogError(f"{where}: any: must be a non-empty list")
        reqs = tuple(
            _parse_request(a, name=name, where=f"{where} any[{i}]") for i, a in enumerate(alts)
        )
    else:
        reqs = (_parse_request(raw, name=name, where=where),)
    return ToolEntry(name=name, alternatives=reqs)


def _consolidate(categories: list[Category]) -> tuple[Category, ...]:
    """
    Drop entries that repeat an earlier entry's probes; reject a display name reused
    for different probes.
    """
    seen_sig: dict[tuple, str] = {}
    seen_name: dict[str, tuple[str, tuple]] = {}
    out: list[Category] = []
    for cat in categories:
        kept: list[ToolEntry] = []
        for tool in cat.tools:
            sig = tool.signature()
            key = tool.name.casefold()
            if key in seen_name and seen_name[key][1] != sig:
                raise CatalogError(
                    f"tool {tool.name!r} conflicts with {seen_name[key][0]!r}: "
                    "same name, different checks; rename one of them"
                )
            if sig in seen_sig:
                logger.warning(
                    "catalog_duplicate_dropped",
                    tool=tool.name,
                    category=cat.name,
                    kept=seen_sig[sig],
                )
                continue
            seen_sig[sig] = tool.name
            seen_name[key] = (tool.name, sig)
            kept.append(tool)
        out.append(Category(name=cat.name, tools=tuple(kept)))
    return tuple(out)


def parse_catalog(data: Any, *, source: str = "") -> Catalog:
    if not isinstance(data, dict):
        raise CatalogError("catalog must be a YAML mapping")
    ver = data.get("version", CATALOG_VERSION)
    # bool is an int subclass; `version: true` is not version 1.
    if isinstance(ver, bool) or not isinstance(ver, int) or ver != CATALOG_VERSION:
        raise CatalogError(f"Unsupported catalog version: {ver!r}")

    raw_cats = data.get("categories") or []
    if not isinstance(raw_cats, list):
        raise CatalogError("categories must be a list")

    categories: list[Category] = []
    for ci, rc in enumerate(raw_cats):
        if not isinstance(rc, dict):
            raise CatalogError(f"categories[{ci}] must be a mapping")
        cname = str(rc.get("name") or "").strip()
        if not cname:
            raise CatalogError(f"categories[{ci}]: name is required")
        raw_tools = rc.get("tools") or []
        if not isinstance(raw_tools, list):
            raise CatalogError(f"categories[{ci}] ({cname}): tools must be a list")
        tools = tuple(
            _parse_tool(rt, where=f"{cname}[{ti}]") for ti, rt in enumerate(raw_tools)
        )
        categories.append(Category(name=cname, tools=tools))

    hint = data.get("install_hint")
    return Catalog(
        title=str(data.get("title") or "development tools"),
        categories=_consolidate(categories),
        install_hint=str(hint).strip() if hint else None,
        source=source,
    )


def load_catalog(path: str | Path | None = None) -> Catalog:
    """
    Load a catalog file; with no path, the catalog bundled with the package.
    """
    if path is None:
        raw = (
            resources.files("devtools_check.data")
            .joinpath(DEFAULT_CATALOG)
            .read_text(encoding="utf-8")
        )
        source = f"builtin:{DEFAULT_CATALOG}"
    else:
        p = Path(path).expanduser()
        try:
            raw = p.read_text(encoding="utf-8")
        except OSError as ex:
            raise CatalogError(f"cannot read catalog {p}: {ex}") from ex
        source = str(p.resolve())

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as ex:
        raise CatalogError(f"invalid YAML in catalog {source}: {ex}") from ex
    return parse_catalog(data, source=source)


def select_categories(catalog: Catalog, names: Iterable[str]) -> Catalog:
    wanted = [str(n).strip() for n in names if str(n).strip()]
    if not wanted:
        return catalog
    by_key = {c.name.casefold(): c for c in catalog.categories}
    unknown = [n for n in wanted if n.casefold() not in by_key]
    if unknown:
        raise CatalogError(
            f"unknown categories: {', '.join(unknown)} "
            f"(available: {', '.join(c.name for c in catalog.categories)})"
        )
    keep = {n.casefold() for n in wanted}
    return Catalog(
        title=catalog.title,
        categories=tuple(c for c in catalog.categories if c.name.casefold() in keep),
        install_hint=catalog.install_hint,
        source=catalog.source,
    )
