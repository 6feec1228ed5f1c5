# utils/logger.py
"""Logging helpers built on top of loguru."""

from __future__ import annotations

import os
import sys
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, TypeVar, cast

from loguru import logger as _logger
from loguru._logger import Logger as LoguruLogger
from tqdm.auto import tqdm

T = TypeVar("T")


# ============================== CONFIG =======================================

MODULE_W = 8
LINE_W = 3
LEVEL_ENV = "SURFPATH_LOG_LEVEL"


@dataclass(frozen=True)
class LoggingCfg:
    """Project-wide logging configuration."""

    level: str = "INFO"
    json: bool = True
    file_sink: bool = True
    log_dir: Path = Path(".logs")
    log_format: str = (
        "<green>{time:MM-DD HH:mm:ss}</green>"
        "[<level>{level:.3}</level>]"
        f"[<cyan>{{extra[module]:<{MODULE_W}.{MODULE_W}}}</cyan>:"
        f"<cyan>{{line:>{LINE_W}}}</cyan>] "
        "<level>{message}</level>"
    )
    # file logs are JSON (serialize=True), so this format is unused in practice.
    log_file_format: str = (
        f"{{time:YYYY-MM-DD HH:mm:ss}}[{{level:.3}}]"
        f"[{{extra[module]:<{MODULE_W}.{MODULE_W}}}:{{line:>{LINE_W}}}] "
        "{{message}}"
    )
    progress_bar_format: str = (
        "{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]"
    )


# Exposed default config instance
LOGCFG = LoggingCfg()


# ============================== LOGGER =======================================


class Logger:
    """Thin wrapper around loguru with unified configuration."""

    _configured: bool = False
    _log_dir: Path = LOGCFG.log_dir
    _log_file: Optional[Path] = None
    _file_sink: bool = LOGCFG.file_sink
    _lock = threading.Lock()

    @staticmethod
    def _default_level() -> str:
        return os.environ.get(LEVEL_ENV, LOGCFG.level).upper()

    @staticmethod
    def _add_sinks(level: str, json_format: bool) -> None:
        """Attach console sink and (optionally) the JSON file sink."""
        _logger.add(
            sys.stderr,
            level=level,
            serialize=False,
            format=LOGCFG.log_format,
        )
        if not Logger._file_sink:
            Logger._log_file = None
            return
        os.makedirs(Logger._log_dir, exist_ok=True)
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        Logger._log_file = Logger._log_dir / f"{ts}.log.json"
        _logger.add(
            Logger._log_file,
            level=level,
            serialize=json_format,
            format=LOGCFG.log_file_format,
        )

    @staticmethod
    def _configure(level: str, json_format: bool, force: bool = False) -> None:
        """Configure sinks once (thread-safe); ``force`` replaces existing sinks."""
        with Logger._lock:
            if Logger._configured and not force:
                return
            _logger.remove()
            Logger._add_sinks(level, json_format)
            Logger._configured = True

    @staticmethod
    def configure(
        level: Optional[str] = None,
        log_dir: Optional[Path | str] = None,
        json_format: Optional[bool] = None,
        file_sink: Optional[bool] = None,
    ) -> None:
        """
        Manually (re)configure the logger.
        Safe to call after get_logger(): bound loggers share the same sinks.
        """
        if log_dir is not None:
            Logger._log_dir = Path(log_dir)
        if file_sink is not None:
            Logger._file_sink = bool(file_sink)
        lvl = (level or Logger._default_level()).upper()
        jsn = LOGCFG.json if json_format is None else bool(json_format)
        Logger._configure(lvl, jsn, force=True)

    @staticmethod
    def get_logger(
        name: str,
        level: Optional[str] = None,
        json_format: Optional[bool] = None,
    ) -> LoguruLogger:
        """
        Return a configured loguru logger bound to ``name`` (in extra[module]).
        """
        Logger._configure(
            (level or Logger._default_level()).upper(),
            LOGCFG.json if json_format is None else bool(json_format),
        )
        return _logger.bind(module=name)

    @staticmethod
    def progress(
        iterable: Iterable[T],
        desc: Optional[str] = None,
        total: Optional[int] = None,
    ) -> Iterable[T]:
        """Unified tqdm wrapper with project bar style."""
        return cast(
            Iterable[T],
            tqdm(
                iterable,
                desc=desc,
                total=total,
                leave=False,
                bar_format=LOGCFG.progress_bar_format,
            ),
        )
