import logging
from agency.logging.log_levels import LogLevel


class BaseFormatter(logging.Formatter):
    def __init__(self, fmt=None):
        super().__init__(fmt or '%(asctime)s - %(name)s - %(levelname)s - %(message)s')


class ErrorFormatter(BaseFormatter):
    def __init__(self):
        super().__init__('[ERROR] %(asctime)s - %(name)s - %(message)s')


class WarningFormatter(BaseFormatter):
    def __init__(self):
        super().__init__('[WARNING] %(asctime)s - %(name)s - %(message)s')


class InfoFormatter(BaseFormatter):
    def __init__(self):
        super().__init__('[INFO] %(asctime)s - %(name)s - %(message)s')


class RequestFormatter(BaseFormatter):
    def __init__(self):
        super().__init__('[REQUEST] %(asctime)s - %(message)s')


class SlowFormatter(BaseFormatter):
    def __init__(self):
        super().__init__('[SLOW] %(asctime)s - %(name)s - %(message)s')


class GreatFormatter(BaseFormatter):
    def __init__(self):
        super().__init__('[GREAT] %(asctime)s - %(name)s - %(message)s')


_FORMATTERS = {
    LogLevel.ERROR: ErrorFormatter,
    LogLevel.WARNING: WarningFormatter,
    LogLevel.INFO: InfoFormatter,
    LogLevel.REQUEST: RequestFormatter,
    LogLevel.SLOW: SlowFormatter,
    LogLevel.GREAT: GreatFormatter,
}


def get_formatter_for_level(level: LogLevel) -> logging.Formatter:
    """Return the formatter for a custom level"""
    return _FORMATTERS.get(level, BaseFormatter)()
