"""
Centralized logging configuration with Sentry integration.

Root logger setup for the API and the Celery worker, plus error reporting
for failures that are handled (logged and skipped) rather than raised.
"""

import logging
import sys
from typing import Dict, Any, Optional

import sentry_sdk
from sentry_sdk.integrations.celery import CeleryIntegration
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.redis import RedisIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from agency.core.config import settings


SENSITIVE_FIELDS = [
    'password', 'token', 'secret', 'authorization',
    'api_key', 'access_token', 'gst_number', 'phone', 'email',
]

SENSITIVE_HEADERS = ['Authorization', 'Cookie', 'X-API-Key', 'X-Auth-Token']


def init_sentry():
    """
    Initialize Sentry for error tracking and performance monitoring.

    Only initializes if SENTRY_DSN is configured.
    """
    if not settings.SENTRY_DSN:
        logging.info("SENTRY_DSN not configured. Sentry disabled.")
        return

    try:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.SENTRY_ENVIRONMENT or settings.MODE,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            integrations=[
                FastApiIntegration(),
                SqlalchemyIntegration(),
                CeleryIntegration(),
                RedisIntegration(),
            ],
            before_send=filter_sensitive_data,
            send_default_pii=False,
            attach_stacktrace=True,
            max_breadcrumbs=50,
        )
        logging.info(f"Sentry initialized successfully for environment: {settings.MODE}")
    except Exception as e:
        logging.error(f"Failed to initialize Sentry: {e}")


def filter_sensitive_data(event: Dict[str, Any], hint: Dict[str, Any] = None) -> Optional[Dict[str, Any]]:
    """
    Filter sensitive data before sending to Sentry.

    Client contact details and credentials are replaced with a marker in
    both the request body and the headers.

    Args:
        event: Sentry event dictionary
        hint: Sentry hint dictionary

    Returns:
        Modified event with sensitive data removed
    """
    request = event.get('request') or {}

    data = request.get('data')
    if isinstance(data, dict):
        for field in SENSITIVE_FIELDS:
            if field in data:
                data[field] = '[FILTERED]'

    headers = request.get('headers')
    if isinstance(headers, dict):
        for header in SENSITIVE_HEADERS:
            if header in headers:
                headers[header] = '[FILTERED]'

    return event


def capture_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    tags: Optional[Dict[str, str]] = None
) -> Optional[str]:
    """
    Capture a handled error and send it to Sentry with context.

    Used where a failure is isolated (one client in a sweep, one reminder)
    and must not interrupt the surrounding batch.

    Returns:
        Sentry event ID if sent, None otherwise
    """
    try:
        with sentry_sdk.new_scope() as scope:
            if context:
                for key, value in context.items():
                    scope.set_context(key, value)
            if tags:
                for key, value in tags.items():
                    scope.set_tag(key, value)
            return sentry_sdk.capture_exception(error)
    except Exception as e:
        logging.error(f"Failed to capture error in Sentry: {e}")
        logging.error(f"Original error: {error}")
        return None


def setup_logging():
    """
    Configure root logging for the application.

    Sets up the stdout handler, format and level from LOG_LEVEL.
    """
    log_level = settings.LOG_LEVEL.upper()

    logger = logging.getLogger()
    logger.setLevel(getattr(logging, log_level))

    # Remove existing handlers
    logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, log_level))
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    logger.addHandler(console_handler)

    logging.info(f"Logging configured with level: {log_level}")
