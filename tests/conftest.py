"""Shared fixtures: the example documents and their parsed clients."""

from __future__ import annotations

from pathlib import Path

import pytest

from openapi_ts.client_builder import parse_document
from openapi_ts.config import Config
from openapi_ts.loader import load_document

FIXTURES = Path(__file__).parent / "fixtures"

PETSTORE_V2 = FIXTURES / "petstore-v2.json"
USERS_V3 = FIXTURES / "users-v3.yaml"


@pytest.fixture(scope="session")
def petstore_document():
    return load_document(PETSTORE_V2)


@pytest.fixture(scope="session")
def users_document():
    return load_document(USERS_V3)


@pytest.fixture
def petstore_client(petstore_document):
    """A fresh Client per test; enum naming mutates it."""
    return parse_document(petstore_document, Config())


@pytest.fixture
def users_client(users_document):
    return parse_document(users_document, Config())
