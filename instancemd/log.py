# This file is part of instancemd. See LICENSE file for license information.
"""Logging setup for instance-metadata."""

import logging
import sys
from typing import Optional

from instancemd import settings

DEFAULT_LEVEL = logging.WARNING

_HANDLER: Optional[logging.Handler] = None


def _level_from(value) -> int:
    if isinstance(value, int):
        return value
    level = logging.getLevelName(str(value).upper())
    if isinstance(level, int):
        return level
    return DEFAULT_LEVEL


def setup_logging(cfg=None, debug=False):
    """Configure the root logger from the 'logging' section of cfg.

    Handlers installed by a previous call are replaced.
    """
    log_cfg = settings.CFG_BUILTIN["logging"]
    if cfg and isinstance(cfg.get("logging"), dict):
        log_cfg = {**log_cfg, **cfg["logging"]}

    level = logging.DEBUG if debug else _level_from(log_cfg.get("level"))

    global _HANDLER
    root = logging.getLogger()
    if _HANDLER is not None:
        root.removeHandler(_HANDLER)
    _HANDLER = logging.StreamHandler(sys.stderr)
    _HANDLER.setFormatter(logging.Formatter(log_cfg.get("format")))
    root.addHandler(_HANDLER)
    root.setLevel(level)
    logging.getLogger(__name__).debug(
        "Logging configured at level %s", logging.getLevelName(level)
    )
