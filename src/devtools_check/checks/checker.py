from __future__ import annotations

import subprocess
from typing import Callable

from devtools_check.checks import probes
from devtools_check.checks.managers import get_manager
from devtools_check.checks.types import (
    VERSION_UNKNOWN,
    CheckRequest,
    CheckResult,
    ToolEntry,
)
from devtools_check.utils.log import logger

_PROBE_ERRORS = (OSError, subprocess.SubprocessError, ValueError, KeyError)


class ToolAvailabilityChecker:
    """
    Evaluates check requests against the current host.

    Absence is a normal outcome: every probe failure (missing binary, spawn error,
    timeout, unparseable output) ends up as status MISSING, never as an exception.
    """

    def __init__(self, *, timeout_s: float = 5.0) -> None:
        self.timeout_s = float(timeout_s)
        self._methods: dict[str, Callable[[CheckRequest], CheckResult]] = {
            "command": self._check_command,
            "path": self._check_path,
            "package": self._check_package,
        }

    def evaluate(self, request: CheckRequest) -> CheckResult:
        method = self._methods.get(request.method)
        if method is None:
            logger.warning("devtools_unknown_method", method=str(request.method))
            return CheckResult(request=request, status="MISSING")
        try:
            return method(request)
        except _PROBE_ERRORS as ex:
            logger.warning(
                "devtools_probe_failed",
                tool=request.display_name,
                probe=request.describe(),
                error=f"{type(ex).__name__}: {ex}",
            )
            return CheckResult(request=request, status="MISSING")

    def evaluate_tool(self, entry: ToolEntry) -> CheckResult:
        if not entry.alternatives:
            raise ValueError(f"tool entry without alternatives: {entry.name}")
        if not entry.chained:
            return self.evaluate(entry.alternatives[0])

        tried: list[CheckRequest] = []
        res: CheckResult | None = None
        for request in entry.alternatives:
            tried.append(request)
            res = self.evaluate(request)
            if res.installed:
                break
        assert res is not None
        return CheckResult(
            request=res.request,
            status=res.status,
            detail=res.detail if res.installed else None,
            tried=tuple(tried),
        )

    def _version(self, argv: list[str]) -> str:
        try:
            out = probes.run_capture(argv, timeout_s=self.timeout_s)
        except subprocess.TimeoutExpired:
            logger.info("devtools_version_timeout", argv=argv, timeout_s=self.timeout_s)
            return VERSION_UNKNOWN
        except (OSError, subprocess.SubprocessError):
            return VERSION_UNKNOWN
        if out.returncode != 0:
            return VERSION_UNKNOWN
        return probes.first_line(out.stdout) or VERSION_UNKNOWN

    def _check_command(self, request: CheckRequest) -> CheckResult:
        exe = probes.which(request.identifier)
        if not exe:
            return CheckResult(request=request, status="MISSING")
        # Empty version_args: the tool has no version flag, don't run it.
        if not request.version_args:
            return CheckResult(request=request, status="INSTALLED", detail=VERSION_UNKNOWN)
        version = self._version([exe, *request.version_args])
        return CheckResult(request=request, status="INSTALLED", detail=version)

    def _check_path(self, request: CheckRequest) -> CheckResult:
        found = probes.path_exists(request.identifier)
        if found is None:
            return CheckResult(request=request, status="MISSING")
        return CheckResult(request=request, status="INSTALLED", detail=str(found))

    def _check_package(self, request: CheckRequest) -> CheckResult:
        manager = get_manager(str(request.manager or ""))
        if not probes.which(manager.executable):
            return CheckResult(
                request=request,
                status="MISSING",
                detail=f"{manager.executable} not available",
            )

        out = probes.run_capture(manager.argv(request.identifier), timeout_s=self.timeout_s)
        if out.returncode != 0 and not manager.lists_on_error:
            if not manager.exit_status_is_membership:
                logger.info(
                    "devtools_manager_query_failed",
                    manager=manager.name,
                    returncode=out.returncode,
                )
            return CheckResult(request=request, status="MISSING")

        found, version = manager.parse(out.stdout, request.identifier)
        if not found and not manager.exit_status_is_membership:
            return CheckResult(request=request, status="MISSING")
        detail = f"via {manager.label}"
        if version:
            detail += f" ({version})"
        return CheckResult(request=request, status="INSTALLED", detail=detail)
