import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FORMAT", "standard")
os.environ.setdefault("ENABLE_REQUEST_LOGGING", "false")

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import stockledger.models  # noqa: F401
from stockledger.database import Base, build_engine, get_db
from stockledger.main import app
from stockledger.models import (
    Account,
    Bill,
    Contract,
    Customer,
    InventoryRecord,
    Product,
    Supplier,
    Warehouse,
)
from stockledger.utils.events import get_event_bus, DomainEvent


@pytest.fixture()
def engine():
    eng = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def recorded_events():
    events = []
    bus = get_event_bus()
    bus.subscribe(DomainEvent, events.append)
    yield events
    bus.unsubscribe(DomainEvent, events.append)


def _add(db, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture()
def product(db) -> Product:
    return _add(db, Product(code="P001", name="Steel bolt M8", unit="box", price=Decimal("10.00")))


@pytest.fixture()
def other_product(db) -> Product:
    return _add(db, Product(code="P002", name="Copper wire 2mm", unit="roll", price=Decimal("25.00")))


@pytest.fixture()
def warehouse(db) -> Warehouse:
    return _add(db, Warehouse(code="WH1", name="North depot", location="Hanoi", status="active"))


@pytest.fixture()
def other_warehouse(db) -> Warehouse:
    return _add(db, Warehouse(code="WH2", name="South depot", location="Da Nang", status="active"))


@pytest.fixture()
def supplier(db) -> Supplier:
    return _add(db, Supplier(code="SUP1", name="Acme Metals"))


@pytest.fixture()
def customer(db) -> Customer:
    return _add(db, Customer(code="CUS1", name="Delta Builders"))


@pytest.fixture()
def account(db) -> Account:
    return _add(db, Account(code="ACC1", name="Warehouse clerk"))


@pytest.fixture()
def bill(db) -> Bill:
    return _add(db, Bill(code="BILL1", name="Invoice 0001"))


@pytest.fixture()
def contract(db) -> Contract:
    return _add(db, Contract(code="CT1", name="Supply contract 2024"))


@pytest.fixture()
def make_record(db, product, warehouse):
    """Insert an inventory record directly, bypassing the ledger."""

    def _make(code: str, year: int, balance: int, product_code: str = None, warehouse_code: str = None):
        return _add(
            db,
            InventoryRecord(
                code=code,
                year=year,
                product_code=product_code or product.code,
                warehouse_code=warehouse_code or warehouse.code,
                balance_before=balance,
                total_in=0,
                total_out=0,
                current_balance=balance,
                min_threshold=0,
            ),
        )

    return _make


@pytest.fixture()
def this_year() -> int:
    return date.today().year
