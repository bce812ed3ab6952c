"""Log rendering and the request context bound for each call."""

from __future__ import annotations

import json
import logging

import pytest
import structlog
from fastapi.security import HTTPAuthorizationCredentials

from tycoon.auth.dependencies import get_current_account_id
from tycoon.auth.jwt import create_access_token
from tycoon.config import Settings
from tycoon.middleware.logging import setup_logging


@pytest.fixture(autouse=True)
def clean_context():
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


def _root_formatter() -> logging.Formatter:
    return next(
        h.formatter
        for h in logging.getLogger().handlers
        if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)
    )


class TestServiceLogRendering:
    def test_stdlib_record_rendered_as_json_with_context(self):
        setup_logging(Settings(log_format="json"))
        structlog.contextvars.bind_contextvars(request_id="req-1", account_id="alice")
        record = logging.LogRecord(
            "tycoon.heist.service", logging.INFO, __file__, 1, "Heist event reset for %s", ("2026-W02",), None,
        )

        line = json.loads(_root_formatter().format(record))

        assert line["event"] == "Heist event reset for 2026-W02"
        assert line["logger"] == "tycoon.heist.service"
        assert line["level"] == "info"
        assert line["request_id"] == "req-1"
        assert line["account_id"] == "alice"

    def test_setup_twice_keeps_one_handler(self):
        setup_logging(Settings(log_format="json"))
        setup_logging(Settings(log_format="console"))
        ours = [
            h for h in logging.getLogger().handlers
            if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)
        ]
        assert len(ours) == 1


class TestAccountContext:
    async def test_authenticated_account_bound_to_logs(self):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=create_access_token("alice"))
        assert await get_current_account_id(credentials) == "alice"
        assert structlog.contextvars.get_contextvars()["account_id"] == "alice"
