"""
Structured audit logging for the gateway client.

All audit events are logged as JSON for machine parsing.
Events include: login_success, login_failed, register_failed,
authenticate_failed, bridge_success, bridge_failed, profile_unavailable,
logout, logout_call_failed.

NEVER logs: passwords, bearer credentials, CSRF tokens or cookies.
"""

import json
import logging
import re
import time
from typing import Any, Dict

AUDIT_LOGGER_NAME = 'focusboard.audit'

# Control characters that could forge extra log lines.
_LOG_INJECTION_PATTERN = re.compile(r'[\x00-\x1f\x7f]')

# Context fields copied into the JSON entry when present on the record.
_CONTEXT_FIELDS = ('service', 'email', 'status', 'reason', 'path', 'user_id')


def sanitize_log_value(value: str, max_length: int = 256) -> str:
    """
    Sanitize a string for safe inclusion in log output.

    Removes control characters and truncates to a maximum length.
    """
    cleaned = _LOG_INJECTION_PATTERN.sub('', str(value))
    return cleaned[:max_length]


class AuditFormatter(logging.Formatter):
    """JSON formatter for audit events."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            'timestamp': time.strftime('%Y-%m-%dT%H:%M:%S%z', time.gmtime(record.created)),
            'level': record.levelname,
            'event': getattr(record, 'event', 'unknown'),
            'message': record.getMessage(),
        }

        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = sanitize_log_value(str(value))

        return json.dumps(log_entry)


def setup_audit_logging() -> logging.Logger:
    """
    Configure the audit logger.

    Returns the 'focusboard.audit' logger writing JSON to stderr.
    Safe to call repeatedly: handlers are only attached once.
    """
    logger = logging.getLogger(AUDIT_LOGGER_NAME)
    logger.setLevel(logging.INFO)

    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(AuditFormatter())
    logger.addHandler(console_handler)

    return logger


def audit_log(event: str, message: str, level: int = logging.INFO, **context) -> None:
    """
    Log an audit event.

    Args:
        event: Event type (e.g., 'login_success', 'bridge_failed')
        message: Human-readable description
        level: Logging level, INFO unless the event reports a failure
        **context: Additional context (service, email, status, reason, path)
    """
    logger = logging.getLogger(AUDIT_LOGGER_NAME)
    extra = {'event': event}
    extra.update(context)
    logger.log(level, message, extra=extra)
