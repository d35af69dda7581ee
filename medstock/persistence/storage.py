from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from medstock.inventory.records import Batch, DispenseRecord, MedicineRecord
from medstock.inventory.registry import MedicineRegistry
from medstock.persistence.db import init_db, session_scope
from medstock.persistence.models import BatchModel, CounterModel, DispenseModel

logger = logging.getLogger(__name__)

BATCH_COUNTER = "next_batch_id"
DISPENSE_COUNTER = "next_dispense_id"


def _batch_row(batch: Batch, position: int) -> BatchModel:
    return BatchModel(
        batch_id=batch.batch_id,
        name=batch.name,
        price=format(batch.price, "f"),
        quantity=batch.quantity,
        expiry=batch.expiry,
        description=batch.description,
        max_quantity=batch.max_quantity,
        position=position,
    )


def _dispense_row(record: DispenseRecord, position: int) -> DispenseModel:
    return DispenseModel(
        dispense_id=record.dispense_id,
        name=record.name,
        quantity=record.quantity,
        customer_id=record.customer_id,
        dispensed_on=record.dispensed_on,
        staff=record.staff,
        batch_id=record.batch_id,
        position=position,
    )


def _set_counter(session: Session, name: str, value: int) -> None:
    counter = session.get(CounterModel, name)
    if counter is None:
        session.add(CounterModel(name=name, value=value))
    else:
        counter.value = value


class InventoryStorage:
    """Writes the whole registry as one snapshot; the core never sees the schema."""

    def __init__(self, create_schema: bool = True):
        if create_schema:
            init_db()

    def save(self, registry: MedicineRegistry) -> None:
        with session_scope() as session:
            session.execute(delete(DispenseModel))
            session.execute(delete(BatchModel))
            for position, record in enumerate(registry.records()):
                if record.kind == "batch":
                    session.add(_batch_row(record, position))
                else:
                    session.add(_dispense_row(record, position))
            _set_counter(session, BATCH_COUNTER, registry.next_batch_id)
            _set_counter(session, DISPENSE_COUNTER, registry.next_dispense_id)
        logger.info(
            "inventory saved: records=%s next_batch_id=%s",
            len(registry),
            registry.next_batch_id,
        )

    def load(self) -> MedicineRegistry:
        with session_scope() as session:
            batch_rows = list(session.scalars(select(BatchModel)).all())
            dispense_rows = list(session.scalars(select(DispenseModel)).all())
            counters = {row.name: row.value for row in session.scalars(select(CounterModel)).all()}

            ordered: list[tuple[int, MedicineRecord]] = []
            for row in batch_rows:
                ordered.append(
                    (
                        row.position,
                        Batch(
                            batch_id=row.batch_id,
                            name=row.name,
                            price=Decimal(row.price),
                            quantity=row.quantity,
                            expiry=row.expiry,
                            description=row.description,
                            max_quantity=row.max_quantity,
                        ),
                    )
                )
            for row in dispense_rows:
                ordered.append(
                    (
                        row.position,
                        DispenseRecord(
                            dispense_id=row.dispense_id,
                            name=row.name,
                            quantity=row.quantity,
                            customer_id=row.customer_id,
                            dispensed_on=row.dispensed_on,
                            staff=row.staff,
                            batch_id=row.batch_id,
                        ),
                    )
                )

        ordered.sort(key=lambda item: item[0])
        registry = MedicineRegistry(
            records=[record for _, record in ordered],
            next_batch_id=counters.get(BATCH_COUNTER, 1),
            next_dispense_id=counters.get(DISPENSE_COUNTER, 1),
        )
        logger.info("inventory loaded: records=%s", len(registry))
        return registry
