from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from devtools_check.config import get_settings
from devtools_check.utils import log


def _unusable_log_dir(tmp_path: Path, monkeypatch) -> Path:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")
    monkeypatch.setenv("DEVTOOLS_LOG_DIR", str(blocker / "logs"))
    get_settings.cache_clear()
    return blocker / "logs"


def test_file_handler_writes_under_log_dir(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("DEVTOOLS_LOG_DIR", str(tmp_path / "logs"))
    get_settings.cache_clear()
    handler = log._file_handler(get_settings(), logging.Formatter())
    try:
        assert isinstance(handler, RotatingFileHandler)
        assert Path(handler.baseFilename) == tmp_path / "logs" / log.LOG_FILE_NAME
    finally:
        handler.close()


def test_file_handler_raises_for_unusable_log_dir(tmp_path: Path, monkeypatch) -> None:
    _unusable_log_dir(tmp_path, monkeypatch)
    with pytest.raises(OSError):
        log._file_handler(get_settings(), logging.Formatter())


def test_unusable_log_dir_falls_back_to_stderr(tmp_path: Path, monkeypatch, capsys) -> None:
    log_dir = _unusable_log_dir(tmp_path, monkeypatch)
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", list(root.handlers))
    monkeypatch.setattr(root, "_devtools_check_structlog_configured", False)
    level = root.level
    try:
        log._configure_structlog()
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0], RotatingFileHandler)
    finally:
        root.setLevel(level)

    err = capsys.readouterr().err
    assert "log_file_unavailable" in err
    assert str(log_dir) in err
