from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

CheckMethod = Literal["command", "path", "package"]
CheckStatus = Literal["INSTALLED", "MISSING"]
Tier = Literal["all_installed", "majority_installed", "majority_missing"]

DEFAULT_VERSION_ARGS: tuple[str, ...] = ("--version",)
VERSION_UNKNOWN = "version unknown"


@dataclass(frozen=True, slots=True)
class CheckRequest:
    method: CheckMethod
    identifier: str
    display_name: str
    manager: str | None = None
    version_args: tuple[str, ...] = DEFAULT_VERSION_ARGS

    def describe(self) -> str:
        if self.method == "package":
            return f"{self.manager} {self.identifier}"
        return f"{self.method} {self.identifier}"


@dataclass(frozen=True, slots=True)
class CheckResult:
    request: CheckRequest
    status: CheckStatus
    detail: str | None = None
    tried: tuple[CheckRequest, ...] = ()

    @property
    def installed(self) -> bool:
        return self.status == "INSTALLED"

    @property
    def name(self) -> str:
        return self.request.display_name


@dataclass(frozen=True, slots=True)
class ToolEntry:
    """One logical tool; alternatives are tried in order until one is installed."""

    name: str
    alternatives: tuple[CheckRequest, ...]

    @property
    def chained(self) -> bool:
        return len(self.alternatives) > 1

    def signature(self) -> tuple[tuple[str, str, str | None], ...]:
        return tuple((r.method, r.identifier, r.manager) for r in self.alternatives)


@dataclass(frozen=True, slots=True)
class Category:
    name: str
    tools: tuple[ToolEntry, ...] = ()


@dataclass(frozen=True, slots=True)
class Summary:
    total: int
    installed: int
    missing: int

    def as_dict(self) -> dict[str, int]:
        return {"total": self.total, "installed": self.installed, "missing": self.missing}


@dataclass(frozen=True, slots=True)
class CheckRun:
    metadata: dict
    sections: list[tuple[Category, list[CheckResult]]] = field(default_factory=list)

    def results(self) -> list[CheckResult]:
        return [r for _, results in self.sections for r in results]

    def summary(self) -> Summary:
        from devtools_check.report import summarize

        return summarize(self.results())
