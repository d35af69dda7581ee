from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Mapping

from medstock.commands import parameters as P
from medstock.commands.cascade import UpdateCascade
from medstock.commands.query import BATCH_VIEW, DISPENSE_VIEW, QueryEngine
from medstock.commands.validation import (
    DISPENSE_COMMAND_CHECKERS,
    DISPENSE_RECORD_CHECKERS,
    ValidationContext,
    as_date,
    as_decimal,
    as_int,
    check_quantity_fits,
    parse_int,
    validate,
)
from medstock.core.errors import CommandError, InsufficientStockError, UnrecognizedParameterError
from medstock.inventory.dates import today
from medstock.inventory.records import MedicineRecord
from medstock.inventory.registry import MedicineRegistry
from medstock.persistence.storage import InventoryStorage

logger = logging.getLogger(__name__)


@dataclass
class CommandContext:
    registry: MedicineRegistry
    storage: InventoryStorage | None = None
    today: date = field(default_factory=today)


@dataclass
class CommandResult:
    command: str
    message: str
    records: list[MedicineRecord] = field(default_factory=list)
    rows_affected: int = 0
    mutated: bool = False
    exit: bool = False
    lines: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": self.command,
            "message": self.message,
            "rows_affected": self.rows_affected,
            "records": [record.to_dict() for record in self.records],
            "lines": list(self.lines),
        }


CommandHandler = Callable[[CommandContext, Mapping[str, str]], CommandResult]


@dataclass(frozen=True)
class RegisteredCommand:
    name: str
    syntax: str
    handler: CommandHandler


COMMANDS: dict[str, RegisteredCommand] = {}


def register_command(name: str, syntax: str) -> Callable[[CommandHandler], CommandHandler]:
    def _wrap(fn: CommandHandler) -> CommandHandler:
        if name in COMMANDS:
            raise ValueError(f"duplicate command registration: {name}")
        COMMANDS[name] = RegisteredCommand(name=name, syntax=syntax, handler=fn)
        return fn

    return _wrap


def get_command(name: str) -> RegisteredCommand | None:
    return COMMANDS.get(name.strip().upper())


def _lenient_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return parse_int("", value)
    except CommandError:
        return None


@register_command("ADD", P.ADD_SYNTAX)
def add_command(ctx: CommandContext, parameters: Mapping[str, str]) -> CommandResult:
    registry = ctx.registry
    raw_name = parameters.get(P.NAME, "")
    name = raw_name.strip()
    siblings = registry.batches_named(name) if name else []
    spec = P.ADD_EXISTING if siblings else P.ADD_NEW

    quantity = _lenient_int(parameters.get(P.QUANTITY))
    vctx = ValidationContext(
        registry=registry,
        name=name or None,
        pending_total=quantity if not siblings else None,
    )
    validate(parameters, spec, vctx).raise_for_error()

    quantity = as_int(parameters[P.QUANTITY])
    if siblings:
        existing = siblings[0]
        check_quantity_fits(registry.total_quantity(name) + quantity, existing.max_quantity)
        name = existing.name
        description = existing.description
        max_quantity = existing.max_quantity
    else:
        description = parameters[P.DESCRIPTION].strip()
        max_quantity = as_int(parameters[P.MAX_QUANTITY])

    batch = registry.add_batch(
        name=name,
        price=as_decimal(parameters[P.PRICE]),
        quantity=quantity,
        expiry=as_date(parameters[P.EXPIRY_DATE]),
        description=description,
        max_quantity=max_quantity,
    )
    return CommandResult(
        command="ADD",
        message=f"Medication added: {batch.name}",
        records=[batch.copy()],
        rows_affected=1,
        mutated=True,
    )


@register_command("LIST", P.LIST_SYNTAX)
def list_command(ctx: CommandContext, parameters: Mapping[str, str]) -> CommandResult:
    if parameters:
        vctx = ValidationContext(registry=ctx.registry, sort_fields=BATCH_VIEW.sort_fields)
        validate(parameters, P.LIST, vctx).raise_for_error()
    records = QueryEngine(BATCH_VIEW).run(ctx.registry.records(), parameters)
    return CommandResult(command="LIST", message=f"{len(records)} stock(s) found", records=records)


@register_command("UPDATE", P.UPDATE_SYNTAX)
def update_command(ctx: CommandContext, parameters: Mapping[str, str]) -> CommandResult:
    registry = ctx.registry
    batch_id = _lenient_int(parameters.get(P.ID))
    target = registry.get_batch(batch_id) if batch_id is not None else None
    vctx = ValidationContext(
        registry=registry,
        name=target.name if target is not None else None,
        target_id=target.batch_id if target is not None else None,
    )
    validate(parameters, P.UPDATE, vctx).raise_for_error()

    directives = {key: value for key, value in parameters.items() if key != P.ID}
    outcome = UpdateCascade(registry).update(as_int(parameters[P.ID]), directives)
    return CommandResult(
        command="UPDATE",
        message=f"Updated! Number of rows affected: {outcome.rows_affected}",
        records=list(outcome.affected),
        rows_affected=outcome.rows_affected,
        mutated=True,
    )


@register_command("DELETE", P.DELETE_SYNTAX)
def delete_command(ctx: CommandContext, parameters: Mapping[str, str]) -> CommandResult:
    validate(parameters, P.DELETE, ValidationContext(registry=ctx.registry)).raise_for_error()
    removed = ctx.registry.remove_batch(as_int(parameters[P.ID]))
    return CommandResult(
        command="DELETE",
        message=f"Medication deleted: Stock_Id={removed.batch_id}",
        records=[removed],
        rows_affected=1,
        mutated=True,
    )


@register_command("DISPENSE", P.DISPENSE_SYNTAX)
def dispense_command(ctx: CommandContext, parameters: Mapping[str, str]) -> CommandResult:
    registry = ctx.registry
    vctx = ValidationContext(registry=registry)
    validate(parameters, P.DISPENSE, vctx, checkers=DISPENSE_COMMAND_CHECKERS).raise_for_error()

    name = parameters[P.NAME].strip()
    wanted = as_int(parameters[P.QUANTITY])
    available = sorted(
        (b for b in registry.batches_named(name) if b.expiry >= ctx.today and b.quantity > 0),
        key=lambda b: (b.expiry, b.batch_id),
    )
    on_hand = sum(b.quantity for b in available)
    if wanted > on_hand:
        raise InsufficientStockError(
            f"unable to dispense {wanted}; only {on_hand} unexpired in stock for {name}",
            field=P.QUANTITY,
            value=parameters[P.QUANTITY],
        )

    remaining = wanted
    dispensed: list[MedicineRecord] = []
    for batch in available:
        if remaining <= 0:
            break
        take = min(batch.quantity, remaining)
        batch.quantity -= take
        remaining -= take
        record = registry.add_dispense(
            batch,
            quantity=take,
            customer_id=parameters[P.CUSTOMER_ID].strip(),
            staff=parameters[P.STAFF].strip(),
            dispensed_on=ctx.today,
        )
        dispensed.append(record.copy())

    return CommandResult(
        command="DISPENSE",
        message=f"Dispensed: {name} Quantity: {wanted}",
        records=dispensed,
        rows_affected=len(dispensed),
        mutated=True,
    )


@register_command("LISTDISPENSE", P.LIST_DISPENSE_SYNTAX)
def list_dispense_command(ctx: CommandContext, parameters: Mapping[str, str]) -> CommandResult:
    vctx = ValidationContext(registry=ctx.registry, sort_fields=DISPENSE_VIEW.sort_fields)
    validate(parameters, P.LIST_DISPENSE, vctx, checkers=DISPENSE_RECORD_CHECKERS).raise_for_error()
    records = QueryEngine(DISPENSE_VIEW).run(ctx.registry.records(), parameters)
    return CommandResult(command="LISTDISPENSE", message=f"{len(records)} dispense record(s) found", records=records)


@register_command("PURGE", P.PURGE_SYNTAX)
def purge_command(ctx: CommandContext, parameters: Mapping[str, str]) -> CommandResult:
    validate(parameters, P.PURGE, ValidationContext(registry=ctx.registry)).raise_for_error()
    removed = ctx.registry.purge()
    return CommandResult(
        command="PURGE",
        message="All data has been cleared!",
        rows_affected=removed,
        mutated=True,
    )


@register_command("HELP", P.HELP_SYNTAX)
def help_command(ctx: CommandContext, parameters: Mapping[str, str]) -> CommandResult:
    validate(parameters, P.HELP, ValidationContext(registry=ctx.registry)).raise_for_error()
    return CommandResult(command="HELP", message="Available commands", lines=list(P.ALL_SYNTAX))


@register_command("EXIT", P.EXIT_SYNTAX)
def exit_command(ctx: CommandContext, parameters: Mapping[str, str]) -> CommandResult:
    validate(parameters, P.EXIT, ValidationContext(registry=ctx.registry)).raise_for_error()
    return CommandResult(command="EXIT", message="Quitting MedStock...", exit=True)


def execute_command(ctx: CommandContext, name: str, parameters: Mapping[str, str]) -> CommandResult:
    command = get_command(name)
    if command is None:
        raise UnrecognizedParameterError(
            f"unknown command '{name}'",
            field=name,
            syntax=P.HELP_SYNTAX,
        )

    logger.info("command started: %s", command.name)
    try:
        result = command.handler(ctx, parameters)
    except CommandError as exc:
        exc.with_syntax(command.syntax)
        logger.warning("command %s rejected: %s (%s)", command.name, exc.kind, exc)
        raise

    if result.mutated and ctx.storage is not None:
        ctx.storage.save(ctx.registry)
    logger.info("command finished: %s rows_affected=%s", command.name, result.rows_affected)
    return result
