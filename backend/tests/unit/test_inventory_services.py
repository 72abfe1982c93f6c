from datetime import date
from decimal import Decimal

import pytest

from stockledger.core.exceptions import (
    ConflictException,
    DuplicateCodeException,
    EntityNotFoundException,
    ReferenceNotFoundException,
)
from stockledger.models import InventoryRecord, Product, StockIn, Warehouse
from stockledger.schemas.inventory import InventoryCreate, InventoryUpdate
from stockledger.schemas.inventory_check import InventoryCheckCreate, InventoryCheckUpdate
from stockledger.schemas.stock_movement import StockInCreate
from stockledger.services.inventory_check_service import InventoryCheckService
from stockledger.services.inventory_service import InventoryService
from stockledger.services.stock_in_service import StockInService
from stockledger.services.warehouse_service import WarehouseService


def _warehouse(db, code: str = "WH1") -> Warehouse:
    db.expire_all()
    return db.query(Warehouse).filter(Warehouse.code == code).one()


def _create_inventory(db, code: str = "INV-P001-WH1-2024", **overrides) -> InventoryRecord:
    values = dict(
        code=code,
        year=2024,
        product_code="P001",
        warehouse_code="WH1",
        balance_before=20,
        current_balance=20,
    )
    values.update(overrides)
    return InventoryService(db).create_inventory(InventoryCreate(**values))


def _check(db, code: str, actual: int, **extra):
    payload = InventoryCheckCreate(
        code=code,
        year=extra.pop("year", 2024),
        actual_quantity=actual,
        check_date=extra.pop("check_date", date(2024, 9, 30)),
        product_code=extra.pop("product_code", "P001"),
        warehouse_code=extra.pop("warehouse_code", "WH1"),
        **extra,
    )
    return InventoryCheckService(db).create_check(payload)


# ── inventory records ────────────────────────────────────────────────────────

def test_create_inventory_adds_stock_value(db, product, warehouse):
    record = _create_inventory(db)
    assert record.code == "INV-P001-WH1-2024"
    assert record.seq == 1
    assert _warehouse(db).total_stock_value == Decimal("200.00")


def test_taken_inventory_code_gets_a_suffix(db, product, warehouse):
    _create_inventory(db)
    second = _create_inventory(db)
    third = _create_inventory(db)
    assert second.code == "INV-P001-WH1-2024_1"
    assert third.code == "INV-P001-WH1-2024_2"


def test_create_inventory_rejects_unknown_product(db, warehouse):
    with pytest.raises(ReferenceNotFoundException):
        _create_inventory(db, product_code="P404")
    assert db.query(InventoryRecord).count() == 0


def test_moving_inventory_to_another_warehouse_moves_its_value(db, product, warehouse, other_warehouse):
    _create_inventory(db)
    InventoryService(db).update_inventory("INV-P001-WH1-2024", InventoryUpdate(warehouse_code="WH2"))

    assert _warehouse(db, "WH1").total_stock_value == Decimal("0.00")
    assert _warehouse(db, "WH2").total_stock_value == Decimal("200.00")


def test_correcting_balance_adjusts_stock_value(db, product, warehouse):
    _create_inventory(db)
    InventoryService(db).update_inventory("INV-P001-WH1-2024", InventoryUpdate(current_balance=15))
    assert _warehouse(db).total_stock_value == Decimal("150.00")


def test_empty_update_leaves_record_and_value_unchanged(db, product, warehouse):
    _create_inventory(db, balance_before=5, total_in=3, total_out=1, current_balance=7)
    service = InventoryService(db)
    db.expire_all()
    before = InventoryService._snapshot(service.get_inventory("INV-P001-WH1-2024"))
    value_before = _warehouse(db).total_stock_value

    service.update_inventory("INV-P001-WH1-2024", InventoryUpdate())

    db.expire_all()
    assert InventoryService._snapshot(service.get_inventory("INV-P001-WH1-2024")) == before
    assert _warehouse(db).total_stock_value == value_before == Decimal("70.00")


def test_lookups_default_to_current_year(db, make_record, this_year):
    make_record("INV-NOW", this_year, 3)
    make_record("INV-OLD", this_year - 1, 9)
    service = InventoryService(db)

    assert [r.code for r in service.get_by_product("P001")] == ["INV-NOW"]
    assert [r.code for r in service.get_by_warehouse("WH1", this_year - 1)] == ["INV-OLD"]
    with pytest.raises(EntityNotFoundException):
        service.get_by_product("P001", 1999)


def test_low_stock_lists_records_at_or_below_threshold(db, make_record, this_year):
    make_record("INV-LOW", this_year, 2)
    make_record("INV-OK", this_year, 50)
    service = InventoryService(db)
    service.update_inventory("INV-LOW", InventoryUpdate(min_threshold=5))
    service.update_inventory("INV-OK", InventoryUpdate(min_threshold=5))

    assert [r.code for r in service.list_low_stock()] == ["INV-LOW"]


def test_delete_is_blocked_while_checks_reference_the_record(db, make_record):
    make_record("INV-2024", 2024, 20)
    _check(db, "IC-1", 18, inventory_code="INV-2024")

    with pytest.raises(ConflictException):
        InventoryService(db).delete_inventory("INV-2024")
    db.expire_all()
    assert db.query(InventoryRecord).count() == 1


def test_delete_detaches_stock_ins_and_removes_value(db, product, warehouse):
    StockInService(db).create_stock_in(
        StockInCreate(code="SI-1", product_code="P001", received_date=date(2024, 2, 1),
                      quantity=6, warehouse_code="WH1")
    )
    assert _warehouse(db).total_stock_value == Decimal("60.00")

    InventoryService(db).delete_inventory("INV-P001-WH1-2024")

    db.expire_all()
    assert db.query(StockIn).filter(StockIn.code == "SI-1").one().inventory_code is None
    assert _warehouse(db).total_stock_value == Decimal("0.00")


def test_reconcile_reports_drift_after_manual_edit(db, product, warehouse):
    StockInService(db).create_stock_in(
        StockInCreate(code="SI-1", product_code="P001", received_date=date(2024, 2, 1),
                      quantity=6, warehouse_code="WH1")
    )
    service = InventoryService(db)
    service.update_inventory("INV-P001-WH1-2024", InventoryUpdate(current_balance=10))

    report = service.reconcile("INV-P001-WH1-2024")
    assert report.posted_total_in == 6
    assert report.expected_balance == 6
    assert report.drift == 4
    assert report.balanced is False


# ── inventory checks ─────────────────────────────────────────────────────────

def test_check_records_variance_without_touching_balance(db, make_record):
    make_record("INV-2024", 2024, 20)

    check = _check(db, "IC-1", 15, inventory_code="INV-2024")

    assert check.system_quantity == 20
    assert check.variance == -5
    db.expire_all()
    record = db.query(InventoryRecord).filter(InventoryRecord.code == "INV-2024").one()
    assert record.current_balance == 20
    assert _warehouse(db).last_checked_date == date(2024, 9, 30)


def test_check_without_inventory_has_zero_system_quantity(db, product, warehouse):
    check = _check(db, "IC-1", 7)
    assert check.system_quantity == 0
    assert check.variance == 7


def test_check_with_unknown_inventory_fails(db, product, warehouse):
    with pytest.raises(ReferenceNotFoundException):
        _check(db, "IC-1", 7, inventory_code="INV-404")


def test_duplicate_check_code_is_refused(db, product, warehouse):
    _check(db, "IC-1", 7)
    with pytest.raises(DuplicateCodeException):
        _check(db, "IC-1", 8)


def test_check_update_recomputes_variance_from_current_balance(db, make_record):
    make_record("INV-2024", 2024, 20)
    _check(db, "IC-1", 15, inventory_code="INV-2024")

    check = InventoryCheckService(db).update_check("IC-1", InventoryCheckUpdate(actual_quantity=22))

    assert check.system_quantity == 20
    assert check.variance == 2


def test_check_update_of_notes_keeps_snapshot(db, make_record):
    make_record("INV-2024", 2024, 20)
    _check(db, "IC-1", 15, inventory_code="INV-2024")
    InventoryService(db).update_inventory("INV-2024", InventoryUpdate(current_balance=30))

    check = InventoryCheckService(db).update_check("IC-1", InventoryCheckUpdate(notes="recount"))

    assert check.system_quantity == 20
    assert check.variance == -5


def test_check_date_change_moves_warehouse_last_checked(db, product, warehouse):
    _check(db, "IC-1", 3)
    InventoryCheckService(db).update_check("IC-1", InventoryCheckUpdate(check_date=date(2024, 12, 1)))
    assert _warehouse(db).last_checked_date == date(2024, 12, 1)


# ── warehouses ───────────────────────────────────────────────────────────────

def test_revalue_rebuilds_stock_value_from_records(db, make_record):
    make_record("INV-2023", 2023, 4)
    make_record("INV-2024", 2024, 6)

    result = WarehouseService(db).revalue("WH1")

    assert result.previous_stock_value == Decimal("0")
    assert result.recomputed_stock_value == Decimal("100")
    assert result.difference == Decimal("100")
    assert _warehouse(db).total_stock_value == Decimal("100.00")


def test_revalue_rounds_to_cents(db, make_record):
    db.add(Product(code="P010", name="Washer M4", unit="pcs", price=Decimal("0.10")))
    db.commit()
    make_record("INV-WASHER", 2024, 3, product_code="P010")

    result = WarehouseService(db).revalue("WH1")

    assert str(result.recomputed_stock_value) == "0.30"
    assert _warehouse(db).total_stock_value == Decimal("0.30")


def test_unknown_warehouse_is_not_found(db):
    with pytest.raises(EntityNotFoundException):
        WarehouseService(db).get_warehouse("WH404")
