from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Callable, Mapping

from medstock.commands import parameters as P
from medstock.core.errors import (
    CommandError,
    DuplicateNameError,
    InternalInvariantError,
    InvalidExpiryError,
    InvalidValueSyntaxError,
    MissingParameterError,
    NotFoundError,
    OutOfRangeError,
    QuantityExceedsMaxError,
    UnrecognizedParameterError,
)
from medstock.inventory.dates import format_date, parse_date
from medstock.inventory.records import same_name
from medstock.inventory.registry import MedicineRegistry

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"[+-]?\d+")
# Stored integers are signed 32-bit.
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1


@dataclass(frozen=True)
class ValidationContext:
    registry: MedicineRegistry
    # Medicine name the command acts on; enables the FEFO and rename checks.
    name: str | None = None
    target_id: int | None = None
    pending_total: int | None = None
    sort_fields: frozenset[str] = frozenset()


@dataclass(frozen=True)
class ValidationResult:
    error: CommandError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


FieldChecker = Callable[[str, str, ValidationContext], None]


def parse_int(key: str, value: str) -> int:
    text = value.strip()
    if not _INTEGER.fullmatch(text):
        raise InvalidValueSyntaxError(f"'{value}' is not a whole number", field=key, value=value)
    number = int(text)
    if not INT_MIN <= number <= INT_MAX:
        raise OutOfRangeError(f"'{value}' is out of range", field=key, value=value)
    return number


def parse_decimal(key: str, value: str) -> Decimal:
    try:
        number = Decimal(value.strip())
    except InvalidOperation as exc:
        raise InvalidValueSyntaxError(f"'{value}' is not a number", field=key, value=value) from exc
    if not number.is_finite():
        raise InvalidValueSyntaxError(f"'{value}' is not a number", field=key, value=value)
    return number


def parse_date_value(key: str, value: str) -> date:
    try:
        return parse_date(value)
    except ValueError as exc:
        raise InvalidValueSyntaxError(f"'{value}' is not a valid date", field=key, value=value) from exc


def as_int(value: str) -> int:
    try:
        return parse_int("", value)
    except CommandError as exc:
        raise InternalInvariantError(f"unvalidated integer reached parsing: {value!r}") from exc


def as_decimal(value: str) -> Decimal:
    try:
        return parse_decimal("", value)
    except CommandError as exc:
        raise InternalInvariantError(f"unvalidated number reached parsing: {value!r}") from exc


def as_date(value: str) -> date:
    try:
        return parse_date_value("", value)
    except CommandError as exc:
        raise InternalInvariantError(f"unvalidated date reached parsing: {value!r}") from exc


def check_expiry_order(
    registry: MedicineRegistry,
    name: str,
    expiry: date,
    exclude_id: int | None = None,
    field: str = P.EXPIRY_DATE,
) -> None:
    for batch in registry.batches_named(name):
        if batch.batch_id == exclude_id:
            continue
        if expiry < batch.expiry:
            raise InvalidExpiryError(
                f"expiry {format_date(expiry)} is earlier than batch {batch.batch_id} "
                f"of {batch.name} ({format_date(batch.expiry)})",
                field=field,
                value=format_date(expiry),
            )


def check_quantity_fits(quantity: int, max_quantity: int, field: str = P.QUANTITY) -> None:
    if quantity > max_quantity:
        raise QuantityExceedsMaxError(
            f"total quantity {quantity} exceeds maximum quantity {max_quantity}",
            field=field,
            value=str(quantity),
        )


def _non_empty(key: str, value: str, ctx: ValidationContext) -> None:
    if not value.strip():
        raise InvalidValueSyntaxError("value must not be empty", field=key, value=value)


def _price(key: str, value: str, ctx: ValidationContext) -> None:
    if parse_decimal(key, value) < 0:
        raise OutOfRangeError("price must not be negative", field=key, value=value)


def _quantity(key: str, value: str, ctx: ValidationContext) -> None:
    if parse_int(key, value) < 0:
        raise OutOfRangeError("quantity must not be negative", field=key, value=value)


def _positive_quantity(key: str, value: str, ctx: ValidationContext) -> None:
    if parse_int(key, value) <= 0:
        raise OutOfRangeError("quantity must be more than 0", field=key, value=value)


def _expiry(key: str, value: str, ctx: ValidationContext) -> None:
    expiry = parse_date_value(key, value)
    if ctx.name is not None:
        check_expiry_order(ctx.registry, ctx.name, expiry, exclude_id=ctx.target_id, field=key)


def _date(key: str, value: str, ctx: ValidationContext) -> None:
    parse_date_value(key, value)


def _name(key: str, value: str, ctx: ValidationContext) -> None:
    _non_empty(key, value, ctx)
    if ctx.target_id is None or ctx.name is None:
        return
    if same_name(value, ctx.name):
        return
    if ctx.registry.has_name(value):
        raise DuplicateNameError(f"medicine '{value.strip()}' already exists", field=key, value=value)


def _existing_name(key: str, value: str, ctx: ValidationContext) -> None:
    _non_empty(key, value, ctx)
    if not ctx.registry.has_name(value):
        raise NotFoundError(f"medicine '{value.strip()}' not found", field=key, value=value)


def _max_quantity(key: str, value: str, ctx: ValidationContext) -> None:
    maximum = parse_int(key, value)
    if maximum <= 0:
        raise OutOfRangeError("maximum quantity must be more than 0", field=key, value=value)
    if ctx.pending_total is not None:
        check_quantity_fits(ctx.pending_total, maximum, field=key)


def _batch_id(key: str, value: str, ctx: ValidationContext) -> None:
    batch_id = parse_int(key, value)
    if ctx.registry.get_batch(batch_id) is None:
        raise NotFoundError(f"stock id {batch_id} not found", field=key, value=value)


def _positive_id(key: str, value: str, ctx: ValidationContext) -> None:
    if parse_int(key, value) <= 0:
        raise OutOfRangeError("id must be more than 0", field=key, value=value)


def _sort_field(key: str, value: str, ctx: ValidationContext) -> None:
    if value.strip().lower() not in ctx.sort_fields:
        raise InvalidValueSyntaxError(f"cannot sort by '{value}'", field=key, value=value)


STOCK_CHECKERS: dict[str, FieldChecker] = {
    P.ID: _batch_id,
    P.NAME: _name,
    P.PRICE: _price,
    P.QUANTITY: _quantity,
    P.EXPIRY_DATE: _expiry,
    P.DESCRIPTION: _non_empty,
    P.MAX_QUANTITY: _max_quantity,
    P.SORT: _sort_field,
    P.REVERSED_SORT: _sort_field,
}

DISPENSE_RECORD_CHECKERS: dict[str, FieldChecker] = {
    P.ID: _positive_id,
    P.NAME: _non_empty,
    P.QUANTITY: _quantity,
    P.CUSTOMER_ID: _non_empty,
    P.DATE: _date,
    P.STAFF: _non_empty,
    P.STOCK_ID: _positive_id,
    P.SORT: _sort_field,
    P.REVERSED_SORT: _sort_field,
}

DISPENSE_COMMAND_CHECKERS: dict[str, FieldChecker] = {
    P.NAME: _existing_name,
    P.QUANTITY: _positive_quantity,
    P.CUSTOMER_ID: _non_empty,
    P.STAFF: _non_empty,
}


def check_parameters(
    parameters: Mapping[str, str],
    required: tuple[str, ...],
    optional: tuple[str, ...],
    syntax: str,
) -> None:
    if len(parameters) < len(required):
        raise MissingParameterError("missing parameters", field="", syntax=syntax)
    for key in required:
        if key not in parameters:
            raise MissingParameterError(f"parameter '{key}' is required", field=key, syntax=syntax)
    allowed = set(required) | set(optional)
    for key, value in parameters.items():
        if key not in allowed:
            raise UnrecognizedParameterError(
                f"parameter '{key}' is not recognised", field=key, value=value, syntax=syntax
            )


def check_values(
    parameters: Mapping[str, str],
    ctx: ValidationContext,
    checkers: Mapping[str, FieldChecker],
) -> None:
    for key, value in parameters.items():
        checker = checkers.get(key)
        if checker is None:
            continue
        checker(key, value, ctx)


def validate(
    parameters: Mapping[str, str],
    spec: P.ParameterSpec,
    ctx: ValidationContext,
    checkers: Mapping[str, FieldChecker] = STOCK_CHECKERS,
) -> ValidationResult:
    try:
        check_parameters(parameters, spec.required, spec.optional, spec.syntax)
        check_values(parameters, ctx, checkers)
    except CommandError as exc:
        exc.with_syntax(spec.syntax)
        logger.warning("rejected %s=%r: %s", exc.field or "parameters", exc.value, exc)
        return ValidationResult(error=exc)
    return ValidationResult()
