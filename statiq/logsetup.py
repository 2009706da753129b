"""Process-wide logging setup driven by :class:`LoggingConfig`."""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone

from statiq.config import LoggingConfig

FILTER_ENV = "STATIQ_LOG"
TRACE = 5
_OFF = logging.CRITICAL + 10

_LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "off": _OFF,
}
_LEVEL_NAMES = {TRACE: "TRACE", logging.WARNING: "WARN", logging.CRITICAL: "ERROR"}


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        fields = {"message": record.getMessage()}
        if record.exc_info:
            fields["exception"] = self.formatException(record.exc_info)
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": _LEVEL_NAMES.get(record.levelno, record.levelname),
            "target": record.name,
            "fields": fields,
        }
        return json.dumps(payload)


def _parse_filter(spec: str) -> tuple[int | None, dict[str, int]] | None:
    """Parse ``level`` / ``target=level`` directives; None when nothing is valid."""
    default: int | None = None
    targets: dict[str, int] = {}
    for directive in (part.strip() for part in spec.split(",")):
        if not directive:
            continue
        target, sep, level_name = directive.rpartition("=")
        level = _LEVELS.get(level_name.strip().lower())
        if level is None:
            continue
        if sep:
            targets[target.strip().replace("::", ".")] = level
        else:
            default = level
    if default is None and not targets:
        return None
    return default, targets


def _is_installed(root: logging.Logger) -> bool:
    return any(getattr(handler, "_statiq_subscriber", False) for handler in root.handlers)


def init(cfg: LoggingConfig) -> logging.Handler | None:
    """Install the process-wide log handler once.

    The filter comes from the ``STATIQ_LOG`` environment variable when it holds
    valid directives, else from ``cfg.level``. Returns the installed handler,
    or None when a handler was already installed.
    """
    root = logging.getLogger()
    if _is_installed(root):
        return None

    env_spec = os.environ.get(FILTER_ENV)
    parsed = _parse_filter(env_spec) if env_spec else None
    if parsed is None:
        parsed = _parse_filter(cfg.level) or (None, {})
    default, targets = parsed

    handler = logging.StreamHandler(sys.stdout)
    if cfg.format.lower() == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)5s %(name)s: %(message)s"))
    handler._statiq_subscriber = True  # type: ignore[attr-defined]

    root.setLevel(_OFF if default is None else default)
    for target, level in targets.items():
        logging.getLogger(target).setLevel(level)
    root.addHandler(handler)
    return handler