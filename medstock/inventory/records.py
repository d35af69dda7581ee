from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Any, Literal, Union

from medstock.inventory.dates import format_date

RecordKind = Literal["batch", "dispense"]


@dataclass
class Batch:
    batch_id: int
    name: str
    price: Decimal
    quantity: int
    expiry: date
    description: str
    max_quantity: int
    kind: RecordKind = field(default="batch", init=False)

    def copy(self) -> "Batch":
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "batch_id": self.batch_id,
            "name": self.name,
            "price": format(self.price, "f"),
            "quantity": self.quantity,
            "expiry": format_date(self.expiry),
            "description": self.description,
            "max_quantity": self.max_quantity,
        }


@dataclass
class DispenseRecord:
    dispense_id: int
    name: str
    quantity: int
    customer_id: str
    dispensed_on: date
    staff: str
    batch_id: int
    kind: RecordKind = field(default="dispense", init=False)

    def copy(self) -> "DispenseRecord":
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "dispense_id": self.dispense_id,
            "name": self.name,
            "quantity": self.quantity,
            "customer_id": self.customer_id,
            "date": format_date(self.dispensed_on),
            "staff": self.staff,
            "batch_id": self.batch_id,
        }


MedicineRecord = Union[Batch, DispenseRecord]


def same_name(left: str, right: str) -> bool:
    return left.strip().casefold() == right.strip().casefold()
