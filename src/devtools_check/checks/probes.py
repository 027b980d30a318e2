"""
Host environment probes.

Read-only: executable lookup, bounded subprocess capture, path checks.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ProcessOutput:
    returncode: int
    stdout: str


def which(name: str) -> str | None:
    return shutil.which(name)


def run_capture(argv: list[str], *, timeout_s: float) -> ProcessOutput:
    """
    Run argv with stdout+stderr merged.

    Raises OSError / subprocess.SubprocessError (incl. TimeoutExpired); callers fold those.
    """
    res = subprocess.run(
        argv,
        check=False,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        errors="replace",
        timeout=timeout_s,
    )
    return ProcessOutput(returncode=int(res.returncode), stdout=res.stdout or "")


def first_line(text: str) -> str:
    for line in (text or "").splitlines():
        line = line.strip()
        if line:
            return line
    return ""


def expand_path(raw: str) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(raw)))


def path_exists(raw: str) -> Path | None:
    p = expand_path(raw)
    return p if p.exists() else None
