"""Shared fixtures: isolated data directory and a fake HTTP session."""

import json

import pytest

from paydesk.api.client import ApiClient
from paydesk.config import settings
from paydesk.models.session import AuthSession
from paydesk.utils.logging import AuditLogger
from paydesk.utils.session import reset_current_session, set_current_session


class FakeResponse:
    """Just enough of requests.Response for ApiClient."""

    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Records requests and replays queued responses (or raises queued exceptions)."""

    def __init__(self, *responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append({
            "method": method,
            "url": url,
            "params": params,
            "json": json,
            "headers": headers or {},
            "timeout": timeout,
        })
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last_call(self):
        return self.calls[-1]


BASE_URL = "https://gateway.test/api"


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep session files, logs and exports inside a temp directory."""
    monkeypatch.setattr(settings, "data_dir", tmp_path / "paydesk")
    monkeypatch.setattr(settings, "pii_use_presidio", False)
    token = set_current_session(None)
    yield tmp_path
    reset_current_session(token)


@pytest.fixture
def no_sleep(monkeypatch):
    """Make retry backoff instantaneous."""
    sleeps = []
    monkeypatch.setattr("paydesk.utils.resilience.time.sleep", sleeps.append)
    return sleeps


@pytest.fixture
def fake_http():
    return FakeSession()


@pytest.fixture
def audit(tmp_path):
    return AuditLogger(log_dir=tmp_path / "logs", user_id="user_001", use_presidio=False)


@pytest.fixture
def client(fake_http, audit):
    return ApiClient(base_url=BASE_URL, session=fake_http, audit_logger=audit)


@pytest.fixture
def merchant_session():
    session = AuthSession(token="jwt-token", role="admin", user_id="user_001", email="shop@example.com")
    set_current_session(session)
    return session


@pytest.fixture
def superadmin_session():
    session = AuthSession(token="admin-token", role="superAdmin", user_id="admin_001")
    set_current_session(session)
    return session
