import logging
import sys
from pathlib import Path
from typing import Optional

from portfolio.core.settings import settings

log = logging.getLogger("uvicorn.error")

_LOGGER_NAME = "portfolio.contact_debug"
_logger: Optional[logging.Logger] = None
_log_path: Optional[Path] = None
_write_failure_reported = False


def _report_write_failure(exc: Optional[BaseException]) -> None:
    global _write_failure_reported
    if _write_failure_reported:
        return
    _write_failure_reported = True
    log.warning(f"[diagnostics] cannot write debug log {settings.contact_debug_log}: {exc}")


class _QuietFileHandler(logging.FileHandler):
    """FileHandler that drops records it cannot write instead of printing tracebacks."""

    def handleError(self, record: logging.LogRecord) -> None:
        _report_write_failure(sys.exc_info()[1])


def _build_logger(path: Path) -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    handler = _QuietFileHandler(str(path), mode="a", encoding="utf-8", delay=True)
    handler.setFormatter(logging.Formatter("%(asctime)s %(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    return logger


def get_debug_logger() -> Optional[logging.Logger]:
    """Return the contact debug logger, creating it for the configured path on first use."""
    global _logger, _log_path
    path = Path(settings.contact_debug_log)
    if _log_path == path:
        return _logger
    try:
        _logger = _build_logger(path)
        _log_path = path
    except Exception as exc:
        log.warning(f"[diagnostics] debug log unavailable at {path}: {exc}")
        _logger = None
        _log_path = path
    return _logger


def debug_log(msg: str) -> None:
    # Never let troubleshooting output break a request.
    try:
        logger = get_debug_logger()
        if logger is not None:
            logger.debug(msg)
    except Exception as exc:
        _report_write_failure(exc)


def reset_debug_logger() -> None:
    global _logger, _log_path, _write_failure_reported
    if _logger is not None:
        for h in list(_logger.handlers):
            _logger.removeHandler(h)
            h.close()
    _logger = None
    _log_path = None
    _write_failure_reported = False
