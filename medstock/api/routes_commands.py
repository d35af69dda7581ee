from __future__ import annotations

import threading

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from medstock.commands import CommandContext, execute_command, parse_command

router = APIRouter(tags=["commands"])

# Commands run strictly one after another against the shared registry.
_command_lock = threading.Lock()


class CommandRequest(BaseModel):
    command: str = Field(min_length=1)
    parameters: dict[str, str] = Field(default_factory=dict)


class RawCommandRequest(BaseModel):
    line: str = Field(min_length=1)


def _context(request: Request) -> CommandContext:
    return request.app.state.command_context


@router.post("/commands")
def run_command(body: CommandRequest, request: Request):
    with _command_lock:
        result = execute_command(_context(request), body.command, body.parameters)
    return result.to_dict()


@router.post("/commands/raw")
def run_raw_command(body: RawCommandRequest, request: Request):
    parsed = parse_command(body.line)
    with _command_lock:
        result = execute_command(_context(request), parsed.name, parsed.parameters)
    return result.to_dict()


@router.get("/stocks")
def list_stocks(request: Request):
    records = _context(request).registry.batches()
    return {"count": len(records), "records": [record.to_dict() for record in records]}
