from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from medstock.commands import CommandContext, execute_command, parse_command
from medstock.core.errors import OutOfRangeError
from medstock.inventory.registry import MedicineRegistry
from medstock.persistence.storage import InventoryStorage


def test_empty_store_loads_empty_registry(clean_db):
    registry = InventoryStorage().load()

    assert len(registry) == 0
    assert registry.next_batch_id == 1
    assert registry.next_dispense_id == 1


def test_save_and_load_round_trip(clean_db, registry: MedicineRegistry):
    registry.add_dispense(registry.get_batch(3), 4, "S1234567A", "Jane", date(2026, 1, 1))
    registry.add_batch("Aspirin", Decimal("0.35"), 7, date(2031, 2, 1), "blood thinner", 70)
    storage = InventoryStorage()

    storage.save(registry)
    loaded = storage.load()

    assert [r.to_dict() for r in loaded.records()] == [r.to_dict() for r in registry.records()]
    assert loaded.get_batch(4).price == Decimal("0.35")
    assert loaded.next_batch_id == 5
    assert loaded.next_dispense_id == 2


def test_counters_survive_deletion_and_purge(clean_db, registry: MedicineRegistry):
    storage = InventoryStorage()
    registry.remove_batch(3)
    storage.save(registry)
    assert storage.load().next_batch_id == 4

    registry.purge()
    storage.save(registry)
    loaded = storage.load()
    assert len(loaded) == 0
    assert loaded.add_batch("Vicks", Decimal("1"), 1, date(2030, 1, 1), "x", 5).batch_id == 4


def test_commands_persist_through_storage(clean_db, registry: MedicineRegistry):
    storage = InventoryStorage()
    ctx = CommandContext(registry=registry, storage=storage, today=date(2026, 1, 1))

    parsed = parse_command("DISPENSE n/Panadol q/12 c/S1 s/Jane")
    execute_command(ctx, parsed.name, parsed.parameters)

    reloaded = storage.load()
    assert [b.quantity for b in reloaded.batches_named("Panadol")] == [0, 3]
    assert [(d.batch_id, d.quantity) for d in reloaded.dispenses()] == [(1, 10), (2, 2)]


def test_oversized_integer_is_rejected_before_any_change(clean_db, registry: MedicineRegistry):
    storage = InventoryStorage()
    storage.save(registry)
    ctx = CommandContext(registry=registry, storage=storage, today=date(2026, 1, 1))
    parameters = {"n": "Zinc", "p": "1", "q": "1", "e": "01-01-2031", "d": "x", "m": "99999999999999999999"}

    with pytest.raises(OutOfRangeError):
        execute_command(ctx, "ADD", parameters)

    assert len(registry.batches()) == 3
    assert len(storage.load().batches()) == 3
