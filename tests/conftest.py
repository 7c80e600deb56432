"""Shared test fixtures for the bento test suite."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
import requests

from bento import BentoClient, BentoConfig, EmailData


def make_response(status: int = 200, body=None, text: str | None = None,
                  headers: dict | None = None) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status
    response.encoding = "utf-8"
    response.reason = "test"
    if text is not None:
        response._content = text.encode("utf-8")
    elif body is not None:
        response._content = json.dumps(body).encode("utf-8")
    else:
        response._content = b""
    response.headers.update(headers or {})
    return response


@pytest.fixture
def config() -> BentoConfig:
    return BentoConfig(
        publishable_key="test_pub_key",
        secret_key="test_secret_key",
        site_uuid="test_site_uuid",
        base_url="https://api.test.com/api/v1",
        max_attempts=3,
        retry_base_delay=0,
        retry_max_delay=0,
    )


@pytest.fixture
def client(config: BentoConfig) -> BentoClient:
    return BentoClient(config)


@pytest.fixture
def mock_request(client: BentoClient):
    """Patch the client's session so every call returns a canned 200."""
    with patch.object(client.session, "request") as request:
        request.return_value = make_response(200, {})
        yield request


@pytest.fixture
def email_factory():
    """Factory to create EmailData instances with overrides."""

    def _make(**overrides) -> EmailData:
        defaults = dict(
            to="test@example.com",
            sender="sender@example.com",
            subject="Test",
            html_body="<p>Test</p>",
            transactional=True,
        )
        defaults.update(overrides)
        return EmailData(**defaults)

    return _make


def sent_json(request_mock, call_index: int = 0):
    """JSON body passed to session.request on a given call."""
    return request_mock.call_args_list[call_index].kwargs["json"]


def sent_params(request_mock, call_index: int = 0):
    return request_mock.call_args_list[call_index].kwargs["params"]
