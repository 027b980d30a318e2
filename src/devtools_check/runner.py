from __future__ import annotations

import platform
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from importlib import metadata
from typing import Any

from devtools_check.catalog import Catalog
from devtools_check.checks.checker import ToolAvailabilityChecker
from devtools_check.checks.types import CheckResult, CheckRun, ToolEntry
from devtools_check.utils.log import logger


def _build_metadata(catalog: Catalog) -> dict[str, Any]:
    ts = datetime.now(tz=timezone.utc).isoformat()
    try:
        app_version = metadata.version("devtools-check")
    except metadata.PackageNotFoundError:
        app_version = None
    return {
        "timestamp": ts,
        "app_version": app_version,
        "title": catalog.title,
        "catalog": catalog.source,
        "os": f"{platform.system()} {platform.release()}".strip(),
    }


def _evaluate_guarded(checker: ToolAvailabilityChecker, entry: ToolEntry) -> CheckResult:
    # One entry blowing up must not stop the others.
    try:
        return checker.evaluate_tool(entry)
    except Exception as ex:
        logger.warning(
            "devtools_check_crashed",
            tool=entry.name,
            error=f"{type(ex).__name__}: {ex}",
        )
        return CheckResult(
            request=entry.alternatives[0],
            status="MISSING",
            tried=entry.alternatives if entry.chained else (),
        )


def _evaluate_all(
    checker: ToolAvailabilityChecker, entries: list[ToolEntry], *, jobs: int
) -> list[CheckResult]:
    if jobs <= 1 or len(entries) <= 1:
        return [_evaluate_guarded(checker, e) for e in entries]

    # Results are slotted by index so output follows catalog order.
    results: list[CheckResult | None] = [None] * len(entries)
    with ThreadPoolExecutor(max_workers=min(jobs, len(entries))) as executor:
        future_to_idx = {
            executor.submit(_evaluate_guarded, checker, e): idx for idx, e in enumerate(entries)
        }
        for future in as_completed(future_to_idx):
            results[future_to_idx[future]] = future.result()
    return [r for r in results if r is not None]


def run_checks(
    catalog: Catalog,
    checker: ToolAvailabilityChecker | None = None,
    *,
    jobs: int = 1,
) -> CheckRun:
    checker = checker or ToolAvailabilityChecker()
    meta = _build_metadata(catalog)
    logger.info("devtools_run_start", tools=len(catalog), jobs=int(jobs), catalog=catalog.source)

    entries = catalog.entries()
    flat = _evaluate_all(checker, entries, jobs=int(jobs))
    for entry, res in zip(entries, flat):
        logger.debug(
            "devtools_check_done",
            tool=entry.name,
            status=res.status,
            probe=res.request.describe(),
            detail=res.detail,
        )

    sections = []
    pos = 0
    for category in catalog.categories:
        n = len(category.tools)
        sections.append((category, flat[pos : pos + n]))
        pos += n

    run = CheckRun(metadata=meta, sections=sections)
    logger.info("devtools_run_done", summary=run.summary().as_dict())
    return run
