"""Shared fixtures for the subnet control plane tests."""

import logging
import os

# Settings are read once at import time, pin them before the app loads
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("IN_CLUSTER", "false")
os.environ.setdefault("ENV", "test")

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from api.deps import get_object_store
from core.logutils import request_logger
from database.models import AdmissionAudit
from database.session import SessionLocal
from k8s.client import KubeObjectStore
from main import app


@pytest.fixture
def log() -> logging.LoggerAdapter:
    """Request-scoped logger as handed to components."""
    return request_logger("tests", Test="true")


@pytest.fixture
def store() -> MagicMock:
    """Object store mock, every getter raises unless a test configures it."""
    mock = MagicMock(spec=KubeObjectStore)
    mock.list_subnets.return_value = []
    return mock


@pytest.fixture
def client(store: MagicMock):
    """TestClient with the cluster replaced by the store mock."""
    app.dependency_overrides[get_object_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def audit_rows(client):
    """Reader for the admission audit table, emptied before each test."""
    db = SessionLocal()
    db.query(AdmissionAudit).delete()
    db.commit()

    def _rows():
        db.expire_all()
        return db.query(AdmissionAudit).order_by(AdmissionAudit.id).all()

    yield _rows
    db.close()
