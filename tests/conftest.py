"""Shared fixtures for the khata tests."""

import os
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from khata.audit import AuditLogger
from khata.config import LedgerSettings
from khata.services.storage import InMemoryRecordStore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer KHATA_* variables out of the tests."""
    for name in list(os.environ):
        if name.startswith("KHATA_"):
            monkeypatch.delenv(name)


@pytest.fixture
def now():
    """A fixed local 'now': 15 Jan 2025, 14:30."""
    return datetime(2025, 1, 15, 14, 30)


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def audit_logger():
    return MagicMock(spec=AuditLogger)


@pytest.fixture
def ledger_settings():
    return LedgerSettings()
