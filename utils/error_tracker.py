"""Error taxonomy and centralized unhandled exception tracking."""

from __future__ import annotations

import signal
import sys
import traceback
from typing import Callable, List, Optional

from .logger import Logger


class PathSynthesisError(Exception):
    """Base class for path synthesis errors."""


class ConfigError(PathSynthesisError):
    """Raised when a configuration file or value is invalid."""


class BoundaryError(PathSynthesisError):
    """Raised when boundary geometry cannot be interpreted at all."""


class SurfaceLoadError(PathSynthesisError):
    """Raised when a surface mesh or cloud file holds no usable geometry."""


class ServiceError(PathSynthesisError):
    """Raised by an external planning service that failed a request."""

    def __init__(self, service: str, message: str = "") -> None:
        self.service = service
        super().__init__(f"{service}: {message}" if message else service)


class ErrorTracker:
    """Installable global exception hook that logs uncaught errors."""

    logger = Logger.get_logger("errors")
    _installed = False
    _orig_hook: Optional[Callable[..., None]] = None
    _cleanup_funcs: List[Callable[[], None]] = []

    @classmethod
    def register_cleanup(cls, func: Callable[[], None]) -> None:
        """Register a cleanup function executed on fatal errors."""
        cls._cleanup_funcs.append(func)

    @classmethod
    def _run_cleanup(cls) -> None:
        """Execute all registered cleanup callbacks."""
        for func in cls._cleanup_funcs:
            try:
                func()
            except Exception as e:
                cls.logger.error(f"Cleanup failed: {e}")

    @classmethod
    def install_excepthook(cls) -> None:
        """Log unhandled exceptions through the project logger."""
        if cls._installed:
            return

        cls._orig_hook = sys.excepthook

        def _hook(exc_type, exc, tb) -> None:
            message = "".join(traceback.format_exception(exc_type, exc, tb))
            cls.logger.error(f"Unhandled exception:\n{message}")
            cls._run_cleanup()
            if cls._orig_hook:
                cls._orig_hook(exc_type, exc, tb)

        sys.excepthook = _hook
        cls._installed = True
        cls.logger.debug("Global exception hook installed")

    @classmethod
    def install_signal_handlers(cls) -> None:
        """Shutdown gracefully on SIGINT or SIGTERM."""

        def _handler(signum, frame) -> None:
            cls.logger.info(f"Received signal {signum}")
            cls._run_cleanup()
            raise SystemExit(1)

        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)

    @classmethod
    def report(cls, exc: BaseException) -> None:
        """Log an exception with full traceback to logger only."""
        tb = exc.__traceback__
        if tb:
            formatted = "".join(traceback.format_exception(type(exc), exc, tb))
        else:
            stack = "".join(traceback.format_stack())
            formatted = f"{type(exc).__name__}: {exc}\nTraceback (most recent call last):\n{stack}"
        cls.logger.error(formatted)
