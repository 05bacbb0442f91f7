"""
tests/conftest.py — Shared fixtures and fake HTTP responses for the test suite.
"""

from unittest.mock import MagicMock

import pytest
import requests

from purger.config import Settings


def _fake_response(status_code: int = 200, json_body=None, text: str = "", headers: dict = None):
    """Return a mock ``requests.Response``; ``json_body=None`` makes ``.json()`` raise."""
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.headers = headers or {}
    if json_body is None:
        resp.json.side_effect = ValueError("No JSON object could be decoded")
        resp.text = text
        resp.content = text.encode("utf-8")
    else:
        resp.json.return_value = json_body
        resp.text = text or str(json_body)
        resp.content = resp.text.encode("utf-8")
    return resp


def _search_page(records: list, total):
    """Search response body: each hit wrapped in its own context list."""
    return {"messages": [[r] for r in records], "total_results": total}


def _messages(start: int, count: int, channel_id: str = "900") -> list[dict]:
    return [
        {"id": str(i), "channel_id": channel_id, "content": f"message {i}"}
        for i in range(start, start + count)
    ]


@pytest.fixture
def fake_response():
    return _fake_response


@pytest.fixture
def search_page():
    return _search_page


@pytest.fixture
def make_messages():
    return _messages


@pytest.fixture
def settings():
    """Settings with small, easily asserted delays."""
    return Settings(
        token="Bot test-token",
        author_id="111",
        guild_id="222",
        base_url="https://discord.test/api/v9",
        search_delay_ms=1100,
        search_rate_limit_floor_ms=1200,
        search_default_wait_ms=5000,
        delete_delay_ms=1500,
        delete_default_wait_ms=3000,
        retry_delay_base_ms=5000,
        max_attempts=3,
        user_token_delay=0,
        confirm_delay=0,
    )


@pytest.fixture
def headers():
    return {"authorization": "Bot test-token"}
