"""Shared fixtures: in-memory database, stores and a fake-clocked credential pool."""

from __future__ import annotations

import pytest

from lead_pipeline.credentials.pool import Credential, CredentialPool
from lead_pipeline.db.database import open_database
from lead_pipeline.store.jobs import JobStore
from lead_pipeline.store.objects import ObjectStore
from lead_pipeline.store.records import BusinessStore
from tests.helpers import FakeClock


@pytest.fixture
def db():
    database = open_database(":memory:")
    yield database
    database.close()


@pytest.fixture
def store(db):
    return BusinessStore(db)


@pytest.fixture
def jobs(db):
    return JobStore(db)


@pytest.fixture
def objects(tmp_path):
    return ObjectStore(tmp_path / "objects")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def pool(clock):
    return CredentialPool(
        [Credential(name="alpha", key="key-a"), Credential(name="beta", key="key-b")],
        rate_per_second=100,
        clock=clock,
        sleep=clock.sleep,
    )
