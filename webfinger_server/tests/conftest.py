"""
Pytest configuration for webfinger_server. Apps are built from explicit Config values;
the WEBFINGER_* environment is cleared so load_config() tests start from nothing.
"""
import pytest
from fastapi.testclient import TestClient

from webfinger_server.config import Config
from webfinger_server.main import create_app

CONFIGURED_RESOURCE = "acct:user@example.com"
ISSUER_URL = "https://example.com/issuer"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "WEBFINGER_RESOURCE",
        "WEBFINGER_ISSUER_URL",
        "WEBFINGER_ALLOW_DOMAIN_WILDCARD",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config():
    return Config(resource=CONFIGURED_RESOURCE, issuer_url=ISSUER_URL)


@pytest.fixture
def wildcard_config():
    return Config(resource=CONFIGURED_RESOURCE, issuer_url=ISSUER_URL, allow_domain_wildcard=True)


@pytest.fixture
def client(config):
    return TestClient(create_app(config))


@pytest.fixture
def wildcard_client(wildcard_config):
    return TestClient(create_app(wildcard_config))
