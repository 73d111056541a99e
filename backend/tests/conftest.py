"""
Shared fixtures: in-memory database, settings and a mocked calculator API.
"""
import copy
import json
from pathlib import Path

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from azure_catalog.catalog.client import CatalogClient
from azure_catalog.catalog.context import UpdateContext
from azure_catalog.catalog.enablement import EnablementPatterns
from azure_catalog.catalog.resolver import EntityResolver
from azure_catalog.catalog.sync import CatalogSync
from azure_catalog.config import Settings
from azure_catalog.models import Base

FIXTURES_DIR = Path(__file__).parent / "fixtures"
PRICES_URL = "https://prices.test/api/v3/pricing"
NODE = "service:prov:azure:test"


def load_fixture(name: str) -> dict:
    with open(FIXTURES_DIR / name, encoding="utf-8") as f:
        return json.load(f)


class FakeCalculatorApi:
    """Serves fixture documents by calculator path, 404 otherwise."""

    def __init__(self, documents):
        self.documents = documents
        self.requests = []
        self.failures = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request.url.path)
        prefix = "/api/v3/pricing/"
        suffix = "/calculator/"
        path = request.url.path
        name = path[len(prefix):-len(suffix)] if path.startswith(prefix) and path.endswith(suffix) else path

        if name in self.failures:
            raise self.failures[name]
        if name not in self.documents:
            return httpx.Response(404, text="Not found")
        return httpx.Response(200, json=self.documents[name])

    def fail(self, name: str, error: Exception):
        self.failures[name] = error


@pytest.fixture
def documents():
    """Calculator documents by path, mutable per test."""
    return {
        "virtual-machines": copy.deepcopy(load_fixture("virtual-machines.json")),
        "mysql": copy.deepcopy(load_fixture("mysql.json")),
        "sql-database": copy.deepcopy(load_fixture("sql-database.json")),
        "managed-disks": copy.deepcopy(load_fixture("managed-disks.json")),
    }


@pytest.fixture
def api(documents):
    return FakeCalculatorApi(documents)


@pytest.fixture
def settings():
    return Settings(prices_url=PRICES_URL, node=NODE)


@pytest.fixture
def catalog_client(settings, api):
    client = CatalogClient(settings, client=httpx.Client(transport=httpx.MockTransport(api)))
    yield client
    client.close()


@pytest.fixture
def db_session():
    """Create test database session."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    Session = sessionmaker(bind=engine)
    session = Session()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def catalog_sync(db_session, settings, catalog_client):
    return CatalogSync(db_session, settings, catalog_client)


@pytest.fixture
def context(settings):
    """Fresh run context with every axis enabled."""
    return UpdateContext(node=NODE, patterns=EnablementPatterns.compile(settings))


@pytest.fixture
def resolver(db_session, context):
    return EntityResolver(db_session, context)
