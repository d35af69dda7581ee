from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from medstock.api.routes_commands import router as commands_router
from medstock.commands import CommandContext
from medstock.core.config import get_settings
from medstock.core.errors import CommandError
from medstock.core.logging import configure_logging
from medstock.persistence.storage import InventoryStorage

configure_logging()
logger = logging.getLogger(__name__)
settings = get_settings()

app = FastAPI(title=settings.app_name)


@app.on_event("startup")
def on_startup() -> None:
    storage = InventoryStorage()
    registry = storage.load()
    app.state.command_context = CommandContext(registry=registry, storage=storage)
    logger.info("inventory ready: records=%s next_batch_id=%s", len(registry), registry.next_batch_id)


@app.exception_handler(CommandError)
async def command_error_handler(_: Request, exc: CommandError):
    return JSONResponse(status_code=422, content=exc.to_dict())


@app.get("/healthz")
def healthz() -> dict:
    return {"status": "ok"}


app.include_router(commands_router)
