from __future__ import annotations

import pytest
from fake_http import PRIMARY_URL, SECONDARY_URL, FakeSession

from sfsearch.api import SessionManager
from sfsearch.tenants import Tenant


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """No real SALESFORCE_* settings or .env files leak into tests."""
    for slot in (1, 2):
        for prefix in ("SALESFORCE_URL_", "SALESFORCE_CONSUMER_KEY_", "SALESFORCE_CONSUMER_SECRET_"):
            monkeypatch.delenv(f"{prefix}{slot}", raising=False)
    monkeypatch.delenv("SALESFORCE_HTTP_TIMEOUT", raising=False)
    monkeypatch.setattr("sfsearch.cli.load_env_files", lambda *a, **k: None)


@pytest.fixture
def primary_env(monkeypatch):
    monkeypatch.setenv("SALESFORCE_URL_1", PRIMARY_URL)
    monkeypatch.setenv("SALESFORCE_CONSUMER_KEY_1", "key-1")
    monkeypatch.setenv("SALESFORCE_CONSUMER_SECRET_1", "secret-1")


@pytest.fixture
def both_env(monkeypatch, primary_env):
    monkeypatch.setenv("SALESFORCE_URL_2", SECONDARY_URL)
    monkeypatch.setenv("SALESFORCE_CONSUMER_KEY_2", "key-2")
    monkeypatch.setenv("SALESFORCE_CONSUMER_SECRET_2", "secret-2")


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def manager(fake_session) -> SessionManager:
    return SessionManager(session=fake_session)  # type: ignore[arg-type]


@pytest.fixture
def tenant() -> Tenant:
    return Tenant(
        label="primary",
        base_url=PRIMARY_URL,
        consumer_key="key-1",
        consumer_secret="secret-1",
    )


@pytest.fixture
def cli_session(monkeypatch, fake_session) -> FakeSession:
    """Make the CLI build its SessionManager around the fake session."""
    monkeypatch.setattr(
        SessionManager,
        "from_env",
        classmethod(lambda cls: cls(session=fake_session)),
    )
    return fake_session
