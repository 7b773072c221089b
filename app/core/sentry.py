"""
Sentry error tracking for the partner API.

Initialised from the application lifespan when ``SENTRY_DSN`` is set;
every helper here is a no-op otherwise.
"""

import logging
from typing import Optional, Dict, Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from app.config import Settings

logger = logging.getLogger(__name__)

_sentry_initialized = False

SENSITIVE_HEADERS = ("authorization", "cookie", "x-api-key")
SENSITIVE_FIELDS = ("password", "token", "access_token", "secret", "pricing_overrides")


def init_sentry(settings: Settings) -> bool:
    """Initialise the Sentry SDK. Returns True when error tracking is on."""
    global _sentry_initialized

    if not settings.SENTRY_DSN:
        logger.info("Sentry DSN not configured, error tracking disabled")
        return False

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        release=settings.VERSION,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoggingIntegration(
                level=logging.WARNING,
                event_level=logging.ERROR,
            ),
        ],
        before_send=filter_sensitive_data,
        send_default_pii=False,
        attach_stacktrace=True,
        max_breadcrumbs=50,
    )

    _sentry_initialized = True
    logger.info(f"Sentry initialized for {settings.ENVIRONMENT} environment")
    return True


def filter_sensitive_data(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Filter sensitive data before sending to Sentry.

    Removes authorization headers, cookies, passwords, session tokens and
    partner pricing tables from request payloads.
    """
    request = event.get("request") or {}

    headers = request.get("headers")
    if isinstance(headers, dict):
        for header in list(headers):
            if header.lower() in SENSITIVE_HEADERS:
                headers[header] = "[Filtered]"

    data = request.get("data")
    if isinstance(data, dict):
        for field in SENSITIVE_FIELDS:
            if field in data:
                data[field] = "[Filtered]"

    return event


def capture_exception(
    exception: Exception,
    context: Optional[Dict[str, Any]] = None,
) -> Optional[str]:
    """
    Capture an exception to Sentry with additional context.

    Returns:
        Sentry event ID if captured, None otherwise
    """
    if not _sentry_initialized:
        return None

    with sentry_sdk.new_scope() as scope:
        for key, value in (context or {}).items():
            scope.set_extra(key, value)
        return sentry_sdk.capture_exception(exception)


def set_user_context(user_id: str, email: Optional[str] = None, role: Optional[str] = None) -> None:
    """Set user context for all subsequent events in this request."""
    if not _sentry_initialized:
        return

    sentry_sdk.set_user({"id": user_id, "email": email, "role": role})
