"""
Custom logger with domain levels: warning, info, request, error, slow, great

Keyword context passed to each call is appended to the message as
key=value pairs and attached to the record as ``custom_data``.
"""
import logging
import traceback
from datetime import datetime, timezone
from typing import Dict, Any

from agency.logging.log_levels import LogLevel
from agency.logging.formatters import get_formatter_for_level
from agency.helpers.getters import isDebugMode


LOG_LEVEL_MAP = {
    LogLevel.WARNING: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.REQUEST: logging.INFO,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.SLOW: logging.WARNING,
    LogLevel.GREAT: logging.INFO,
}


class CustomLogger:
    """
    Logger wrapper used by services, tasks and middleware

    Usage:
        logger = CustomLogger("agency.sweep")
        logger.info("Client snapshot updated", client_id=12)
        logger.error("Tier resolution failed", client_id=12)
        logger.slow("Dashboard query", duration=2.3)
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG if isDebugMode() else logging.INFO)
        self.logger.propagate = False

        # Avoid duplicated handlers when the same name is built twice
        self.logger.handlers.clear()

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter('%(message)s'))
        self.logger.addHandler(console_handler)

    def _log(
        self,
        level: LogLevel,
        message: str,
        exc_info: bool = False,
        **context: Any
    ) -> None:
        log_data = {
            "level": level.value,
            "module": self.name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **context
        }

        if exc_info:
            log_data["traceback"] = self._get_clean_traceback()

        if context:
            message = f"{message} | " + " ".join(f"{k}={v}" for k, v in context.items())

        record = logging.LogRecord(
            name=self.name,
            level=LOG_LEVEL_MAP[level],
            pathname="",
            lineno=0,
            msg=message,
            args=(),
            exc_info=None
        )
        formatted_message = get_formatter_for_level(level).format(record)

        self.logger.log(
            LOG_LEVEL_MAP[level],
            formatted_message,
            extra={"custom_data": log_data},
            exc_info=exc_info
        )

    def _get_clean_traceback(self) -> str:
        """
        Current traceback without duplicated lines or library frames
        """
        seen = set()
        clean_lines = []

        for line in traceback.format_exc().split('\n'):
            if line.strip() and line not in seen:
                if not any(skip in line for skip in ['/usr/local/lib/python', 'site-packages']):
                    seen.add(line)
                    clean_lines.append(line)

        return '\n'.join(clean_lines)

    def warning(self, message: str, **context: Any) -> None:
        """
        Something deserves attention but nothing failed

        Example:
            logger.warning("Sweep already running, skipping")
        """
        self._log(LogLevel.WARNING, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self._log(LogLevel.INFO, message, **context)

    def request(
        self,
        message: str,
        method: str,
        path: str,
        status_code: int,
        duration: float,
        **context: Any
    ) -> None:
        """
        HTTP request log

        Example:
            logger.request("API request", method="GET", path="/api/dashboard/mrr",
                           status_code=200, duration=0.041)
        """
        self._log(
            LogLevel.REQUEST,
            message,
            method=method,
            path=path,
            status_code=status_code,
            duration=duration,
            **context
        )

    def error(
        self,
        message: str,
        exc_info: bool = False,
        **context: Any
    ) -> None:
        """
        Failure that needs attention

        Pass exc_info=True from inside an except block to attach the traceback.
        """
        self._log(LogLevel.ERROR, message, exc_info=exc_info, **context)

    def slow(
        self,
        message: str,
        duration: float,
        threshold: float = 1.0,
        **context: Any
    ) -> None:
        self._log(
            LogLevel.SLOW,
            message,
            duration=duration,
            threshold=threshold,
            **context
        )

    def great(self, message: str, **context: Any) -> None:
        """
        Notable success (a completed sweep, a batch of reminders sent)
        """
        self._log(LogLevel.GREAT, message, **context)


_loggers: Dict[str, CustomLogger] = {}


def get_logger(name: str) -> CustomLogger:
    """
    Cached logger instance

    Usage:
        from agency.logging import get_logger
        logger = get_logger(__name__)
    """
    if name not in _loggers:
        _loggers[name] = CustomLogger(name)
    return _loggers[name]
