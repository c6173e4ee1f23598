"""
Tests for audit logging.

Bridge failures are reported through the audit log instead of the sign-in
result, and no credential material ever reaches a log record.
"""

import json
import logging

import pytest

from focusboard.client import InvalidCredentials
from focusboard.logging_config import AUDIT_LOGGER_NAME, AuditFormatter, sanitize_log_value

from tests.conftest import DEMO_EMAIL, DEMO_PASSWORD, DEMO_TOKEN, RESOURCE_HOST


def audit_events(caplog):
    return [r for r in caplog.records if r.name == AUDIT_LOGGER_NAME]


def event_names(caplog):
    return [getattr(r, 'event', None) for r in audit_events(caplog)]


class TestAuditEvents:

    @pytest.mark.asyncio
    async def test_login_logs_success_and_bridge(self, gateway, caplog):
        caplog.set_level(logging.INFO, logger=AUDIT_LOGGER_NAME)

        await gateway.auth.login(DEMO_EMAIL, DEMO_PASSWORD)

        assert event_names(caplog) == ['login_success', 'bridge_success']

    @pytest.mark.asyncio
    async def test_bridge_failure_logged_as_warning(self, gateway, services, caplog):
        caplog.set_level(logging.INFO, logger=AUDIT_LOGGER_NAME)
        services.fail[(RESOURCE_HOST, '/auth/session')] = 503

        await gateway.auth.login(DEMO_EMAIL, DEMO_PASSWORD)

        failed = [r for r in audit_events(caplog) if r.event == 'bridge_failed']
        assert len(failed) == 1
        assert failed[0].levelno == logging.WARNING
        assert failed[0].status == 503
        assert failed[0].reason == 'HttpError'

    @pytest.mark.asyncio
    async def test_failed_login_logged(self, gateway, caplog):
        caplog.set_level(logging.INFO, logger=AUDIT_LOGGER_NAME)

        with pytest.raises(InvalidCredentials):
            await gateway.auth.login(DEMO_EMAIL, 'wrong')

        assert event_names(caplog) == ['login_failed']

    @pytest.mark.asyncio
    async def test_secrets_never_logged(self, gateway, caplog):
        """Passwords, bearer values and CSRF tokens stay out of every record."""
        caplog.set_level(logging.DEBUG)

        with pytest.raises(InvalidCredentials):
            await gateway.auth.login(DEMO_EMAIL, 'S3cret-pass')
        await gateway.auth.login(DEMO_EMAIL, DEMO_PASSWORD)
        await gateway.categories.create('Deep work')
        await gateway.auth.logout()

        formatter = AuditFormatter()
        for record in caplog.records:
            rendered = record.getMessage() + formatter.format(record)
            assert 'S3cret-pass' not in rendered
            assert f'Bearer {DEMO_TOKEN}' not in rendered
            assert 'csrf-' not in rendered


class TestAuditFormatter:

    def test_json_entry_with_context(self):
        record = logging.LogRecord(AUDIT_LOGGER_NAME, logging.INFO, __file__, 1, 'Signed out', None, None)
        record.event = 'logout'
        record.email = 'a@b.com'

        entry = json.loads(AuditFormatter().format(record))

        assert entry['event'] == 'logout'
        assert entry['email'] == 'a@b.com'
        assert entry['level'] == 'INFO'
        assert 'status' not in entry

    def test_sanitize_strips_control_characters(self):
        assert sanitize_log_value('a@b.com\n{"event": "forged"}') == 'a@b.com{"event": "forged"}'

    def test_sanitize_strips_carriage_return_and_tab(self):
        assert sanitize_log_value('a@b.com\r\n\tx') == 'a@b.comx'

    def test_sanitize_truncates(self):
        assert len(sanitize_log_value('x' * 1000)) == 256
