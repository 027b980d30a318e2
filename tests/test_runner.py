from __future__ import annotations

import threading
import time

from devtools_check.catalog import parse_catalog
from devtools_check.checks.checker import ToolAvailabilityChecker
from devtools_check.checks.types import CheckResult, ToolEntry
from devtools_check.runner import run_checks
from tests._helpers.host import patch_host


def _catalog(n_per_cat: int = 4):
    return parse_catalog(
        {
            "title": "runner test",
            "categories": [
                {
                    "name": f"Cat {c}",
                    "tools": [
                        {"name": f"tool-{c}-{i}", "command": f"tool-{c}-{i}"} for i in range(n_per_cat)
                    ],
                }
                for c in range(3)
            ],
        }
    )


def test_every_entry_yields_one_result(monkeypatch) -> None:
    host = patch_host(monkeypatch)
    for name in ("tool-0-1", "tool-1-3", "tool-2-0"):
        host.install(name, version_output=f"{name} 1.0")
    catalog = _catalog()

    run = run_checks(catalog, ToolAvailabilityChecker())
    assert [c.name for c, _ in run.sections] == ["Cat 0", "Cat 1", "Cat 2"]
    assert [r.name for r in run.results()] == [t.name for t in catalog.entries()]
    summary = run.summary()
    assert summary.total == len(catalog) == 12
    assert summary.installed == 3
    assert summary.missing == 9
    assert run.metadata["title"] == "runner test"
    assert "timestamp" in run.metadata


def test_idempotent(monkeypatch) -> None:
    host = patch_host(monkeypatch)
    host.install("tool-1-1", version_output="v1")
    catalog = _catalog()
    checker = ToolAvailabilityChecker()
    assert run_checks(catalog, checker).summary() == run_checks(catalog, checker).summary()


class _SlowChecker(ToolAvailabilityChecker):
    """Later entries finish first; tracks the peak number of concurrent probes."""

    def __init__(self) -> None:
        super().__init__()
        self.lock = threading.Lock()
        self.active = 0
        self.peak = 0

    def evaluate_tool(self, entry: ToolEntry) -> CheckResult:
        with self.lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            idx = int(entry.name.rsplit("-", 1)[1])
            time.sleep(0.02 * (4 - idx))
            return CheckResult(request=entry.alternatives[0], status="INSTALLED" if idx % 2 else "MISSING")
        finally:
            with self.lock:
                self.active -= 1


def test_parallel_keeps_catalog_order() -> None:
    catalog = _catalog()
    checker = _SlowChecker()
    run = run_checks(catalog, checker, jobs=4)
    assert [r.name for r in run.results()] == [t.name for t in catalog.entries()]
    assert run.summary().total == 12
    assert run.summary().installed == 6
    assert checker.peak > 1

    sequential = run_checks(catalog, _SlowChecker(), jobs=1)
    assert [r.status for r in sequential.results()] == [r.status for r in run.results()]


class _CrashingChecker(ToolAvailabilityChecker):
    def evaluate_tool(self, entry: ToolEntry) -> CheckResult:
        if entry.name == "tool-0-2":
            raise RuntimeError("probe exploded")
        return CheckResult(request=entry.alternatives[0], status="INSTALLED", detail="ok")


def test_crash_in_one_check_does_not_stop_the_run() -> None:
    run = run_checks(_catalog(), _CrashingChecker())
    statuses = {r.name: r.status for r in run.results()}
    assert statuses["tool-0-2"] == "MISSING"
    assert statuses["tool-0-3"] == "INSTALLED"
    assert run.summary().missing == 1
