from __future__ import annotations

from datetime import date
from decimal import Decimal
from itertools import combinations

import pytest

from medstock.commands.query import DISPENSE_VIEW, QueryEngine, query
from medstock.core.errors import InvalidValueSyntaxError, UnrecognizedParameterError
from medstock.inventory.registry import MedicineRegistry


def _ids(records) -> list[int]:
    return [r.batch_id for r in records]


def test_list_sort_and_reversed_sort(registry: MedicineRegistry):
    engine = QueryEngine.for_batches()

    ascending = engine.run(registry.records(), {"n": "Panadol", "sort": "q"})
    assert [r.quantity for r in ascending] == [5, 10]

    descending = engine.run(registry.records(), {"n": "Panadol", "rsort": "quantity"})
    assert [r.quantity for r in descending] == [10, 5]


def test_list_only_returns_batches(registry: MedicineRegistry):
    batch = registry.get_batch(3)
    registry.add_dispense(batch, 1, "S1", "Jane", date(2026, 1, 1))

    assert _ids(query(registry.records(), {})) == [1, 2, 3]


def test_list_name_and_description_are_exact_matches(registry: MedicineRegistry):
    assert _ids(query(registry.records(), {"n": "Panadol"})) == [1, 2]
    assert query(registry.records(), {"n": "panadol"}) == []
    assert query(registry.records(), {"n": "Pana"}) == []
    assert _ids(query(registry.records(), {"d": "cough syrup"})) == [3]


def test_list_typed_filters(registry: MedicineRegistry):
    assert _ids(query(registry.records(), {"p": "5"})) == [1]
    assert _ids(query(registry.records(), {"e": "15-03-2029"})) == [3]
    assert _ids(query(registry.records(), {"m": "50"})) == [1, 2]
    assert _ids(query(registry.records(), {"i": "2"})) == [2]


def test_filter_composition_is_intersection(registry: MedicineRegistry):
    registry.add_batch("Panadol", Decimal("5.00"), 20, date(2030, 7, 1), "pain relief", 50)
    registry.add_batch("Vicks", Decimal("5.00"), 10, date(2029, 4, 1), "cough syrup", 100)
    records = registry.records()
    filters = [("n", "Panadol"), ("p", "5"), ("q", "10"), ("m", "50"), ("d", "pain relief")]

    for left, right in combinations(filters, 2):
        only_left = set(_ids(query(records, [left])))
        only_right = set(_ids(query(records, [right])))
        both = _ids(query(records, [left, right]))
        flipped = _ids(query(records, [right, left]))
        assert set(both) == only_left & only_right
        assert both == flipped


def test_sort_is_stable(registry: MedicineRegistry):
    registry.add_batch("Aspirin", Decimal("5.00"), 10, date(2031, 1, 1), "tablets", 80)
    records = registry.records()

    by_price = query(records, [("sort", "p")])
    assert _ids(by_price) == [2, 1, 4, 3]

    by_quantity_then_price = query(records, [("sort", "q"), ("sort", "p")])
    assert _ids(by_quantity_then_price) == [2, 1, 4, 3]

    # ties on price keep the order of the previous sort
    reversed_price = query(records, [("sort", "i"), ("rsort", "p")])
    assert _ids(reversed_price) == [3, 1, 4, 2]


def test_sort_then_filter_keeps_order(registry: MedicineRegistry):
    result = query(registry.records(), [("rsort", "e"), ("m", "50")])
    assert _ids(result) == [2, 1]


def test_unknown_directive_aborts(registry: MedicineRegistry):
    with pytest.raises(UnrecognizedParameterError):
        query(registry.records(), {"n": "Panadol", "zz": "1"})


def test_unknown_sort_field_aborts(registry: MedicineRegistry):
    with pytest.raises(InvalidValueSyntaxError):
        query(registry.records(), {"sort": "colour"})


def test_results_are_detached_snapshot(registry: MedicineRegistry):
    result = query(registry.records(), {"i": "1"})
    registry.get_batch(1).quantity = 0
    registry.remove_batch(2)

    assert result[0].quantity == 10
    result[0].quantity = 77
    assert registry.get_batch(1).quantity == 0


def test_dispense_text_filters_are_case_insensitive_substrings(registry: MedicineRegistry):
    panadol = registry.get_batch(1)
    vicks = registry.get_batch(3)
    registry.add_dispense(panadol, 2, "S1234567A", "Jane Tan", date(2026, 1, 1))
    registry.add_dispense(vicks, 1, "T7654321B", "John Lim", date(2026, 1, 2))
    registry.add_dispense(panadol, 3, "S1111111C", "jane ong", date(2026, 1, 2))
    engine = QueryEngine(DISPENSE_VIEW)

    by_name = engine.run(registry.records(), {"n": "pana"})
    assert [d.dispense_id for d in by_name] == [1, 3]

    by_staff = engine.run(registry.records(), {"s": "JANE", "rsort": "q"})
    assert [d.dispense_id for d in by_staff] == [3, 1]

    by_customer = engine.run(registry.records(), {"c": "s1", "date": "02-01-2026"})
    assert [d.dispense_id for d in by_customer] == [3]

    by_stock = engine.run(registry.records(), {"sid": "3"})
    assert [d.dispense_id for d in by_stock] == [2]
