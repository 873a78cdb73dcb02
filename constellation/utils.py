#!/usr/bin/env python3
"""
General utilities for the Constellation Simulator.

The entry point calls load_config() and then setup_logging() before anything
else runs. Both read plain JSON-shaped mappings; missing keys fall back to the
values in constants.py.
"""
import json
import logging
import logging.handlers
import os
from typing import Any, Dict, List, Optional

from .constants import LOG_BACKUP_COUNT, LOG_FILE, LOG_FORMAT, LOG_MAX_BYTES


def try_float(val) -> Optional[float]:
    try:
        return float(val)
    except (TypeError, ValueError):
        return None


def _log_handlers(log_file: str, max_bytes: int, backup_count: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        folder = os.path.dirname(log_file)
        if folder:
            os.makedirs(folder, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        ))
    return handlers


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Point the root logger at the console and a rotating log file.

    Keys of the "logging" section: level, format, log_file, max_bytes and
    backup_count. An empty log_file keeps output on the console only. Calling
    this again replaces the handlers from the previous call.
    """
    section = config.get("logging") or {}
    level = str(section.get("level", "INFO")).upper()
    log_file = section.get("log_file", LOG_FILE)
    formatter = logging.Formatter(section.get("format", LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    for old in list(root.handlers):
        root.removeHandler(old)
        if isinstance(old, logging.FileHandler):
            old.close()
    for handler in _log_handlers(
        log_file,
        int(section.get("max_bytes", LOG_MAX_BYTES)),
        int(section.get("backup_count", LOG_BACKUP_COUNT)),
    ):
        handler.setFormatter(formatter)
        root.addHandler(handler)

    logging.info(f"Logging to console{' and ' + log_file if log_file else ''} at level {level}.")


def load_config(path: str) -> Dict[str, Any]:
    """
    Read the JSON run configuration at `path`.

    Raises OSError when the file cannot be opened and ValueError when it is not
    valid JSON or its top level is not an object.
    """
    with open(path, "r", encoding="utf-8") as f:
        config = json.load(f)
    if not isinstance(config, dict):
        raise ValueError(f"{path} must hold a JSON object, not {type(config).__name__}")
    logging.debug(f"Configuration loaded from {path}.")
    return config
