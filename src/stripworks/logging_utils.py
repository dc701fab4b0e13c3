"""Centralised logging utilities for StripWorks applications."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

__all__ = ["configure_logging"]

_MANAGED_HANDLER_FLAG = "_stripworks_managed_handler"
_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _default_log_directory() -> Path:
    """Return the default directory for StripWorks log files."""

    env_override = os.environ.get("STRIPWORKS_LOG_DIR")
    if env_override:
        return Path(env_override).expanduser()

    module_path = Path(__file__).resolve()
    # Project root is the first parent holding pyproject.toml or .git
    for candidate in module_path.parents:
        if (candidate / "pyproject.toml").exists() or (candidate / ".git").exists():
            return candidate / "logs"

    return Path.cwd() / "logs"


def _remove_managed_handlers(logger: logging.Logger) -> None:
    """Detach any handlers previously installed by :func:`configure_logging`."""

    for handler in list(logger.handlers):
        if getattr(handler, _MANAGED_HANDLER_FLAG, False):
            logger.removeHandler(handler)
            handler.close()


def _managed(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT))
    setattr(handler, _MANAGED_HANDLER_FLAG, True)
    return handler


def configure_logging(
    log_name: str,
    *,
    level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    include_console: bool = True,
) -> Path:
    """Configure root logging to write to ``<log_dir>/<log_name>.log``.

    Handlers installed by an earlier call are replaced, so repeated calls
    (for example one per CLI invocation in tests) never duplicate output.
    """

    target_directory = (
        Path(log_dir).expanduser() if log_dir else _default_log_directory()
    )
    target_directory.mkdir(parents=True, exist_ok=True)
    log_path = target_directory / f"{log_name}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    _remove_managed_handlers(root_logger)

    root_logger.addHandler(
        _managed(logging.FileHandler(log_path, encoding="utf-8"), level)
    )
    if include_console:
        root_logger.addHandler(_managed(logging.StreamHandler(), level))

    logging.captureWarnings(True)

    return log_path
