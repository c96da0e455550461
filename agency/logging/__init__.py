"""
Application logger with domain-specific levels (request, slow, great)
"""
from agency.logging.custom_logger import CustomLogger, get_logger
from agency.logging.log_levels import LogLevel

__all__ = [
    'CustomLogger',
    'LogLevel',
    'get_logger',
]
