from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping

from medstock.commands import parameters as P
from medstock.commands.validation import as_date, as_decimal, as_int, check_expiry_order, check_quantity_fits
from medstock.core.errors import NotFoundError
from medstock.inventory.records import Batch
from medstock.inventory.registry import MedicineRegistry

logger = logging.getLogger(__name__)

Mutator = Callable[[Batch, str], None]

# Keys whose presence turns an update into a broadcast over every batch of the name.
BROADCAST_KEYS: tuple[str, ...] = (P.NAME, P.DESCRIPTION, P.MAX_QUANTITY)


def _set_name(batch: Batch, value: str) -> None:
    batch.name = value.strip()


def _set_description(batch: Batch, value: str) -> None:
    batch.description = value.strip()


def _set_max_quantity(batch: Batch, value: str) -> None:
    batch.max_quantity = as_int(value)


def _set_price(batch: Batch, value: str) -> None:
    batch.price = as_decimal(value)


def _set_quantity(batch: Batch, value: str) -> None:
    batch.quantity = as_int(value)


def _set_expiry(batch: Batch, value: str) -> None:
    batch.expiry = as_date(value)


BROADCAST_MUTATORS: dict[str, Mutator] = {
    P.NAME: _set_name,
    P.DESCRIPTION: _set_description,
    P.MAX_QUANTITY: _set_max_quantity,
}

TARGET_MUTATORS: dict[str, Mutator] = {
    P.PRICE: _set_price,
    P.QUANTITY: _set_quantity,
    P.EXPIRY_DATE: _set_expiry,
}


@dataclass(frozen=True)
class Reconciliation:
    total_before: int
    quantity: int
    max_quantity: int


@dataclass
class UpdateOutcome:
    target_id: int
    affected: list[Batch] = field(default_factory=list)

    @property
    def rows_affected(self) -> int:
        return len(self.affected)


class UpdateCascade:
    def __init__(self, registry: MedicineRegistry):
        self.registry = registry

    def reconcile(self, target: Batch, directives: Mapping[str, str]) -> Reconciliation | None:
        has_quantity = P.QUANTITY in directives
        has_max = P.MAX_QUANTITY in directives
        if not has_quantity and not has_max:
            return None

        total_before = self.registry.total_quantity(target.name)
        if has_quantity:
            quantity = total_before - target.quantity + as_int(directives[P.QUANTITY])
        else:
            quantity = total_before

        if has_max:
            max_quantity = as_int(directives[P.MAX_QUANTITY])
        else:
            max_quantity = self.registry.max_quantity(target.name) or target.max_quantity

        return Reconciliation(total_before=total_before, quantity=quantity, max_quantity=max_quantity)

    def update(self, batch_id: int, directives: Mapping[str, str]) -> UpdateOutcome:
        target = self.registry.get_batch(batch_id)
        if target is None:
            raise NotFoundError(f"stock id {batch_id} not found", field=P.ID, value=str(batch_id))

        reconciliation = self.reconcile(target, directives)
        if reconciliation is not None:
            field_key = P.QUANTITY if P.QUANTITY in directives else P.MAX_QUANTITY
            check_quantity_fits(reconciliation.quantity, reconciliation.max_quantity, field=field_key)

        if P.EXPIRY_DATE in directives:
            check_expiry_order(
                self.registry,
                target.name,
                as_date(directives[P.EXPIRY_DATE]),
                exclude_id=target.batch_id,
            )

        if any(key in directives for key in BROADCAST_KEYS):
            affected = self.registry.batches_named(target.name)
        else:
            affected = [target]

        for key, value in directives.items():
            if key in BROADCAST_MUTATORS:
                mutate = BROADCAST_MUTATORS[key]
                for batch in affected:
                    mutate(batch, value)
            elif key in TARGET_MUTATORS:
                TARGET_MUTATORS[key](target, value)

        logger.info("stock %s updated: rows_affected=%s keys=%s", batch_id, len(affected), list(directives))
        return UpdateOutcome(target_id=batch_id, affected=[batch.copy() for batch in affected])
