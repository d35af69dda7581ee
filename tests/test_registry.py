from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from medstock.inventory.registry import MedicineRegistry


def _add(reg: MedicineRegistry, name: str, qty: int = 1, expiry: date = date(2030, 1, 1)):
    return reg.add_batch(name, Decimal("1"), qty, expiry, "desc", 100)


def test_batch_ids_strictly_increase_and_are_never_reused():
    reg = MedicineRegistry()
    first = _add(reg, "Panadol")
    second = _add(reg, "Vicks")
    reg.remove_batch(second.batch_id)
    third = _add(reg, "Aspirin")
    reg.purge()
    fourth = _add(reg, "Aspirin")

    ids = [first.batch_id, second.batch_id, third.batch_id, fourth.batch_id]
    assert ids == [1, 2, 3, 4]
    assert len(set(ids)) == len(ids)


def test_counters_resume_past_loaded_records(registry: MedicineRegistry):
    restored = MedicineRegistry(records=registry.records(), next_batch_id=1)
    assert restored.next_batch_id == 4
    assert _add(restored, "Panadol").batch_id == 4


def test_name_lookups_are_case_insensitive(registry: MedicineRegistry):
    assert registry.has_name("panadol")
    assert [b.batch_id for b in registry.batches_named(" PANADOL ")] == [1, 2]
    assert registry.total_quantity("Panadol") == 15
    assert registry.max_quantity("Panadol") == 50
    assert registry.max_quantity("Unknown") is None


def test_dispense_requires_registered_batch(registry: MedicineRegistry):
    batch = registry.get_batch(1)
    assert batch is not None
    record = registry.add_dispense(batch, 2, "S1234567A", "Jane", date(2026, 1, 1))
    assert record.dispense_id == 1
    assert record.batch_id == 1

    registry.remove_batch(1)
    assert [d.dispense_id for d in registry.dispenses()] == [1]
    with pytest.raises(KeyError):
        registry.add_dispense(batch, 1, "S1234567A", "Jane", date(2026, 1, 1))


def test_snapshot_is_detached(registry: MedicineRegistry):
    snapshot = registry.snapshot("batch")
    snapshot[0].quantity = 999
    assert registry.get_batch(1).quantity == 10
