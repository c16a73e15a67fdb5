from __future__ import annotations

import logging
from pathlib import Path

DEFAULT_LOG_FILENAME = "querydeck.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
# Wire-level chatter from the HTTP stack drowns out query and service records.
NOISY_LOGGERS = ("httpx", "httpcore")
SERVICE_LOGGER = "querydeck.language_service"


def _log_file(log_path: Path | None = None) -> Path:
    if log_path is None:
        return Path.cwd() / DEFAULT_LOG_FILENAME
    return Path(log_path).expanduser().resolve()


def _writes_to(handler: logging.Handler, path: Path) -> bool:
    file_name = getattr(handler, "baseFilename", None)
    if not file_name:
        return False
    try:
        return Path(file_name).resolve() == path
    except OSError:
        return False


def configure_logging(
    debug_enabled: bool,
    log_path: Path | None = None,
    service_output: bool = True,
) -> Path | None:
    """Send DEBUG records to a log file and return its path.

    Language service stdout/stderr lines are logged at DEBUG by
    ``querydeck.language_service``; pass ``service_output=False`` to keep
    only its start/stop records. Returns None when logging is disabled or the
    file cannot be opened. Calling it again for the same file adds no handler.
    """
    if not debug_enabled:
        return None

    path = _log_file(log_path)
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger(SERVICE_LOGGER).setLevel(logging.DEBUG if service_output else logging.INFO)

    if any(_writes_to(existing, path) for existing in root.handlers):
        return path
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        return None
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    logging.getLogger(__name__).debug("Debug logging enabled. Writing to %s", path)
    return path
