from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable

from medstock.inventory.records import Batch, DispenseRecord, MedicineRecord, same_name

logger = logging.getLogger(__name__)


class MedicineRegistry:
    """Sole owner of the live record collection and its identifier counters."""

    def __init__(
        self,
        records: Iterable[MedicineRecord] | None = None,
        next_batch_id: int = 1,
        next_dispense_id: int = 1,
    ):
        self._records: list[MedicineRecord] = list(records or [])
        highest_batch = max((r.batch_id for r in self._records if r.kind == "batch"), default=0)
        highest_dispense = max((r.dispense_id for r in self._records if r.kind == "dispense"), default=0)
        self.next_batch_id = max(next_batch_id, highest_batch + 1)
        self.next_dispense_id = max(next_dispense_id, highest_dispense + 1)

    def __len__(self) -> int:
        return len(self._records)

    def records(self) -> list[MedicineRecord]:
        return list(self._records)

    def batches(self) -> list[Batch]:
        return [r for r in self._records if r.kind == "batch"]

    def dispenses(self) -> list[DispenseRecord]:
        return [r for r in self._records if r.kind == "dispense"]

    def snapshot(self, kind: str) -> list[MedicineRecord]:
        return [r.copy() for r in self._records if r.kind == kind]

    def get_batch(self, batch_id: int) -> Batch | None:
        for record in self._records:
            if record.kind == "batch" and record.batch_id == batch_id:
                return record
        return None

    def has_name(self, name: str) -> bool:
        return any(same_name(batch.name, name) for batch in self.batches())

    def batches_named(self, name: str) -> list[Batch]:
        return [batch for batch in self.batches() if same_name(batch.name, name)]

    def total_quantity(self, name: str) -> int:
        return sum(batch.quantity for batch in self.batches_named(name))

    def max_quantity(self, name: str) -> int | None:
        siblings = self.batches_named(name)
        if not siblings:
            return None
        return siblings[0].max_quantity

    def add_batch(
        self,
        name: str,
        price: Decimal,
        quantity: int,
        expiry: date,
        description: str,
        max_quantity: int,
    ) -> Batch:
        batch = Batch(
            batch_id=self.next_batch_id,
            name=name,
            price=price,
            quantity=quantity,
            expiry=expiry,
            description=description,
            max_quantity=max_quantity,
        )
        self.next_batch_id += 1
        self._records.append(batch)
        logger.debug("batch added: id=%s name=%s qty=%s", batch.batch_id, batch.name, batch.quantity)
        return batch

    def add_dispense(
        self,
        batch: Batch,
        quantity: int,
        customer_id: str,
        staff: str,
        dispensed_on: date,
    ) -> DispenseRecord:
        if self.get_batch(batch.batch_id) is None:
            raise KeyError(f"batch {batch.batch_id} is not registered")
        record = DispenseRecord(
            dispense_id=self.next_dispense_id,
            name=batch.name,
            quantity=quantity,
            customer_id=customer_id,
            dispensed_on=dispensed_on,
            staff=staff,
            batch_id=batch.batch_id,
        )
        self.next_dispense_id += 1
        self._records.append(record)
        return record

    def remove_batch(self, batch_id: int) -> Batch:
        batch = self.get_batch(batch_id)
        if batch is None:
            raise KeyError(f"batch {batch_id} is not registered")
        self._records = [r for r in self._records if r is not batch]
        return batch

    def purge(self) -> int:
        removed = len(self._records)
        self._records.clear()
        return removed
