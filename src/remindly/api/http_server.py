from __future__ import annotations

import asyncio

import uvicorn

from remindly.config.settings import HTTP_HOST, HTTP_PORT
from remindly.core.app import RemindersApp
from remindly.logger import logger

from .app import create_app


async def _wait_shutdown_signal(shutdown_event: asyncio.Event, server: uvicorn.Server) -> None:
    await shutdown_event.wait()
    server.should_exit = True


async def main_loop(reminders: RemindersApp, shutdown_event: asyncio.Event) -> None:
    app = create_app(reminders)

    config = uvicorn.Config(
        app,
        host=HTTP_HOST,
        port=HTTP_PORT,
        log_level="info",
        access_log=False,
    )
    server = uvicorn.Server(config)
    # signals are handled by remindly.main
    server.install_signal_handlers = lambda: None

    watcher = asyncio.create_task(_wait_shutdown_signal(shutdown_event, server))
    logger.info(f"HTTP API starting: http://{HTTP_HOST}:{HTTP_PORT}")
    try:
        await server.serve()
    finally:
        watcher.cancel()
        try:
            await watcher
        except asyncio.CancelledError:
            pass
        logger.info("HTTP API stopped")
