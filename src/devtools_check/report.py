from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

from devtools_check.checks.types import CheckResult, CheckRun, Summary, Tier
from devtools_check.utils.io import atomic_write_text, write_json

PASS = "[PASS]"
FAIL = "[FAIL]"
WARN = "[WARN]"
INFO = "[INFO]"

_SEPARATOR = "=" * 50


def summarize(results: Iterable[CheckResult]) -> Summary:
    total = installed = 0
    for r in results:
        total += 1
        if r.installed:
            installed += 1
    return Summary(total=total, installed=installed, missing=total - installed)


def classify(summary: Summary) -> Tier:
    if summary.missing == 0:
        return "all_installed"
    # Strictly more than half: 5 of 10 is not a majority.
    if summary.installed * 2 > summary.total:
        return "majority_installed"
    return "majority_missing"


def verdict_line(summary: Summary) -> str:
    tier = classify(summary)
    if tier == "all_installed":
        return f"{PASS} All development tools are installed!"
    if tier == "majority_installed":
        return f"{WARN} Most development tools are installed ({summary.missing} missing)."
    return f"{FAIL} Most development tools are missing ({summary.missing} of {summary.total})."


def format_result_line(result: CheckResult) -> str:
    req = result.request
    name = result.name
    if result.installed:
        if req.method == "path":
            return f"{PASS} {name} is installed at {result.detail}"
        if req.method == "package":
            return f"{PASS} {name} is installed {result.detail}"
        return f"{PASS} {name} is installed: {result.detail}"

    if len(result.tried) > 1:
        return f"{FAIL} {name} not found (tried: {len(result.tried)} methods)"
    if req.method == "path":
        return f"{FAIL} {name} is not found at {req.identifier}"
    if req.method == "package":
        line = f"{FAIL} {name} is not installed via {req.manager}"
        if result.detail:
            line += f" ({result.detail})"
        return line
    return f"{FAIL} {name} is not installed"


def format_report_text(run: CheckRun, *, install_hint: str | None = None) -> str:
    title = str(run.metadata.get("title") or "development tools")
    lines: list[str] = [f"Checking {title} installation...", _SEPARATOR]

    for category, results in run.sections:
        if not results:
            continue
        lines.append("")
        lines.append(f"{category.name}:")
        lines.extend(format_result_line(r) for r in results)

    summary = run.summary()
    lines.append("")
    lines.append(_SEPARATOR)
    lines.append(
        f"{INFO} Total: {summary.total}  Installed: {summary.installed}  Missing: {summary.missing}"
    )
    lines.append(verdict_line(summary))
    if summary.missing and install_hint:
        lines.append(f"{INFO} Failed checks indicate tools that need to be installed.")
        lines.append(f"{INFO} {install_hint}")
    lines.append("")
    return "\n".join(lines)


def _request_json(r) -> dict[str, Any]:
    return {"method": r.method, "identifier": r.identifier, "manager": r.manager}


def format_report_json(run: CheckRun, *, install_hint: str | None = None) -> dict[str, Any]:
    results: list[dict[str, Any]] = []
    for category, cat_results in run.sections:
        for r in cat_results:
            results.append(
                {
                    "category": category.name,
                    "name": r.name,
                    "status": r.status,
                    "detail": r.detail,
                    **_request_json(r.request),
                    "tried": [_request_json(t) for t in r.tried],
                }
            )
    summary = run.summary()
    return {
        "metadata": dict(run.metadata or {}),
        "summary": summary.as_dict(),
        "tier": classify(summary),
        "install_hint": install_hint if summary.missing else None,
        "results": results,
    }


def write_report(
    path: str | Path,
    *,
    text: str | None = None,
    json_data: dict[str, Any] | None = None,
) -> None:
    if text is None and json_data is None:
        raise ValueError("write_report requires text or json_data")
    target = Path(path)
    if text is not None:
        atomic_write_text(target, text)
    if json_data is not None:
        if text is None:
            write_json(target, json_data)
        else:
            write_json(target.with_suffix(target.suffix + ".json"), json_data)
