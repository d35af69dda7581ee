from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import medstock.persistence.db as db
from medstock.commands import CommandContext
from medstock.inventory.registry import MedicineRegistry
from medstock.persistence.models import Base

TODAY = date(2026, 1, 1)


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return tmp_path_factory.mktemp("db") / "test.sqlite"


@pytest.fixture(scope="session", autouse=True)
def configure_test_engine(test_db_path: Path):
    engine = create_engine(
        f"sqlite+pysqlite:///{test_db_path}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    TestSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

    db.engine = engine
    db.SessionLocal = TestSessionLocal

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def clean_db(configure_test_engine):
    Base.metadata.drop_all(bind=db.engine)
    Base.metadata.create_all(bind=db.engine)
    yield


@pytest.fixture()
def registry() -> MedicineRegistry:
    reg = MedicineRegistry()
    reg.add_batch("Panadol", Decimal("5.00"), 10, date(2030, 1, 1), "pain relief", 50)
    reg.add_batch("Panadol", Decimal("4.50"), 5, date(2030, 6, 1), "pain relief", 50)
    reg.add_batch("Vicks", Decimal("10"), 20, date(2029, 3, 15), "cough syrup", 100)
    return reg


@pytest.fixture()
def ctx(registry: MedicineRegistry) -> CommandContext:
    return CommandContext(registry=registry, today=TODAY)


@pytest.fixture()
def client(clean_db):
    from medstock.main import app

    with TestClient(app) as c:
        yield c
