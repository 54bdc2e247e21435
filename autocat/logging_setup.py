"""Logging for ``autocat``.

Every module logs through ``get_logger("autocat.<module>")``. Until the
process opts in with ``configure_logging`` the ``autocat`` logger only holds a
``NullHandler``, so importing the classification core from another
application prints nothing. The CLI root callback is the one place that opts
in; it writes ``timestamp logger LEVEL message`` lines to stderr, leaving
stdout free for command output such as the JSON of ``detect-trips``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "autocat"
_LEVEL_ENV_VAR = "AUTOCAT_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _level_from_name(name: str) -> int:
    # "10" and "debug" are both accepted; anything unrecognised means INFO
    token = name.strip().upper()
    if token.isdigit():
        return int(token)
    numeric = getattr(logging, token, None)
    return numeric if isinstance(numeric, int) else logging.INFO


def _resolve_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if level is None:
        level = os.getenv(_LEVEL_ENV_VAR) or ""
    return _level_from_name(level) if level.strip() else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Send ``autocat`` log records to ``stream``.

    Only the first call in a process has an effect, so a host application and
    the CLI can both call it safely. ``level`` overrides
    ``AUTOCAT_LOG_LEVEL``; with neither set the level is INFO, which shows the
    recategorisation batch progress but not per-transaction matches.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    for handler in [h for h in pkg_logger.handlers if isinstance(h, logging.NullHandler)]:
        pkg_logger.removeHandler(handler)

    resolved = _resolve_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
    pkg_logger.setLevel(resolved)
    pkg_logger.addHandler(handler)
    # A host that also configures the root logger would otherwise print twice
    pkg_logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
