"""Structured logging for the marketplace client.

Configures structlog with:
- contextvars merging, so callers can bind request/user context
- app context (service, version, environment) on every event
- PII scrubbing before anything is rendered
- JSON output for log shippers, or the console renderer for development
"""

import logging
import re
import typing as t

import structlog

from .conf import VERSION, settings

SENSITIVE_KEYS = [
    "password",
    "password2",
    "confirm_password",
    "confirmpassword",
    "secret",
    "api_key",
    "token",
    "access_token",
    "refresh_token",
    "authorization",
    "cookie",
    "session_id",
    "sessionid",
    "account_number",
    "accountnumber",
]

EMAIL_PATTERN = re.compile(r"\b[\w\.-]+@[\w\.-]+\.\w+\b")


def scrub_pii(logger: t.Any, method_name: str, event_dict: dict[str, t.Any]) -> dict[str, t.Any]:
    """Scrub PII from log events.

    Redacts credentials, session cookies and account numbers, and masks email
    addresses found in free-text values. Lists are walked too, since API error
    envelopes carry `errors` as a list of `{field, message}` objects whose
    messages often echo the submitted email.
    """

    def _scrub(value: t.Any, key: str = "") -> t.Any:
        if isinstance(value, dict):
            return {k: _scrub_item(str(k), v) for k, v in value.items()}
        if isinstance(value, list):
            return [_scrub(item, key) for item in value]
        if isinstance(value, str) and "email" not in key.lower():
            return EMAIL_PATTERN.sub("[EMAIL]", value)
        return value

    def _scrub_item(key: str, value: t.Any) -> t.Any:
        if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
            return "[REDACTED]"
        return _scrub(value, key)

    return t.cast(dict[str, t.Any], _scrub(event_dict))


def add_app_context(logger: t.Any, method_name: str, event_dict: dict[str, t.Any]) -> dict[str, t.Any]:
    """Add application-level context to all log events."""
    event_dict["service"] = settings.SERVICE_NAME
    event_dict["version"] = VERSION
    event_dict["environment"] = settings.DEPLOYMENT_ENVIRONMENT
    return event_dict


def configure_logging(json: bool | None = None, level: str | None = None) -> None:
    """Install the structlog processor chain.

    Args:
        json: Render events as JSON. Defaults to settings.LOG_JSON.
        level: Minimum level name. Defaults to settings.LOG_LEVEL.
    """
    json = settings.LOG_JSON if json is None else json
    level_no = logging.getLevelName((level or settings.LOG_LEVEL).upper())
    if not isinstance(level_no, int):
        level_no = logging.INFO

    renderer: t.Any = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            add_app_context,
            scrub_pii,
            renderer,
        ],
        context_class=dict,
        wrapper_class=structlog.make_filtering_bound_logger(level_no),
        cache_logger_on_first_use=True,
    )
