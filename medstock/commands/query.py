from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Union

from medstock.commands import parameters as P
from medstock.commands.validation import as_date, as_decimal, as_int
from medstock.core.errors import InvalidValueSyntaxError, UnrecognizedParameterError
from medstock.inventory.records import MedicineRecord

Predicate = Callable[[MedicineRecord], bool]
FilterFactory = Callable[[str], Predicate]
SortKey = Callable[[MedicineRecord], Any]
Directives = Union[Mapping[str, str], Iterable[tuple[str, str]]]


def _equals(attr: str, parse: Callable[[str], Any] = str) -> FilterFactory:
    def build(value: str) -> Predicate:
        target = parse(value)
        return lambda record: getattr(record, attr) == target

    return build


def _contains(attr: str) -> FilterFactory:
    def build(value: str) -> Predicate:
        needle = value.casefold()
        return lambda record: needle in getattr(record, attr).casefold()

    return build


def _attr(attr: str) -> SortKey:
    return lambda record: getattr(record, attr)


def _text(attr: str) -> SortKey:
    return lambda record: getattr(record, attr).casefold()


@dataclass(frozen=True)
class QueryView:
    kind: str
    syntax: str
    filters: Mapping[str, FilterFactory]
    sort_keys: Mapping[str, SortKey]

    @property
    def sort_fields(self) -> frozenset[str]:
        return frozenset(self.sort_keys)


# LIST matches names and descriptions exactly; LISTDISPENSE text filters are
# case-insensitive substring matches.
BATCH_VIEW = QueryView(
    kind="batch",
    syntax=P.LIST_SYNTAX,
    filters={
        P.ID: _equals("batch_id", as_int),
        P.NAME: _equals("name"),
        P.PRICE: _equals("price", as_decimal),
        P.QUANTITY: _equals("quantity", as_int),
        P.EXPIRY_DATE: _equals("expiry", as_date),
        P.DESCRIPTION: _equals("description"),
        P.MAX_QUANTITY: _equals("max_quantity", as_int),
    },
    sort_keys={
        P.ID: _attr("batch_id"),
        "id": _attr("batch_id"),
        P.NAME: _text("name"),
        "name": _text("name"),
        P.PRICE: _attr("price"),
        "price": _attr("price"),
        P.QUANTITY: _attr("quantity"),
        "quantity": _attr("quantity"),
        P.EXPIRY_DATE: _attr("expiry"),
        "expiry": _attr("expiry"),
        "expiry_date": _attr("expiry"),
        P.DESCRIPTION: _text("description"),
        "description": _text("description"),
        P.MAX_QUANTITY: _attr("max_quantity"),
        "max_quantity": _attr("max_quantity"),
    },
)

DISPENSE_VIEW = QueryView(
    kind="dispense",
    syntax=P.LIST_DISPENSE_SYNTAX,
    filters={
        P.ID: _equals("dispense_id", as_int),
        P.NAME: _contains("name"),
        P.QUANTITY: _equals("quantity", as_int),
        P.CUSTOMER_ID: _contains("customer_id"),
        P.DATE: _equals("dispensed_on", as_date),
        P.STAFF: _contains("staff"),
        P.STOCK_ID: _equals("batch_id", as_int),
    },
    sort_keys={
        P.ID: _attr("dispense_id"),
        "id": _attr("dispense_id"),
        P.NAME: _text("name"),
        "name": _text("name"),
        P.QUANTITY: _attr("quantity"),
        "quantity": _attr("quantity"),
        P.CUSTOMER_ID: _text("customer_id"),
        "customer_id": _text("customer_id"),
        P.DATE: _attr("dispensed_on"),
        P.STAFF: _text("staff"),
        "staff": _text("staff"),
        P.STOCK_ID: _attr("batch_id"),
        "stock_id": _attr("batch_id"),
    },
)


def _pairs(directives: Directives) -> list[tuple[str, str]]:
    if isinstance(directives, Mapping):
        return list(directives.items())
    return list(directives)


class QueryEngine:
    def __init__(self, view: QueryView):
        self.view = view

    @classmethod
    def for_batches(cls) -> "QueryEngine":
        return cls(BATCH_VIEW)

    @classmethod
    def for_dispenses(cls) -> "QueryEngine":
        return cls(DISPENSE_VIEW)

    def _sort(self, working: list[MedicineRecord], field: str, reverse: bool) -> list[MedicineRecord]:
        key = self.view.sort_keys.get(field.strip().lower())
        if key is None:
            raise InvalidValueSyntaxError(
                f"cannot sort by '{field}'",
                field=P.REVERSED_SORT if reverse else P.SORT,
                value=field,
                syntax=self.view.syntax,
            )
        # sorted() is stable for reverse=True as well.
        return sorted(working, key=key, reverse=reverse)

    def run(self, records: Iterable[MedicineRecord], directives: Directives) -> list[MedicineRecord]:
        working = [record.copy() for record in records if record.kind == self.view.kind]
        for key, value in _pairs(directives):
            if key == P.SORT:
                working = self._sort(working, value, reverse=False)
                continue
            if key == P.REVERSED_SORT:
                working = self._sort(working, value, reverse=True)
                continue
            factory = self.view.filters.get(key)
            if factory is None:
                raise UnrecognizedParameterError(
                    f"parameter '{key}' is not recognised",
                    field=key,
                    value=value,
                    syntax=self.view.syntax,
                )
            predicate = factory(value)
            working = [record for record in working if predicate(record)]
        return working


def query(records: Iterable[MedicineRecord], directives: Directives, view: QueryView = BATCH_VIEW) -> list[MedicineRecord]:
    return QueryEngine(view).run(records, directives)
