from remindly.logger import setup_logging, logger
from remindly.config.settings import *
setup_logging(
    log_level=LOG_LEVEL,
    log_file=LOG_FILE,
    console_level="INFO",
)

import asyncio
import signal

from remindly.core.app import RemindersApp
from remindly.llm import create_llm_client
from remindly.storage.kv import KeyValueStore
from remindly.world.notifier import BusNotifier, LogNotifier, Notifier
from remindly.world.permission import StoredPermissionHost
from remindly.api.http_server import main_loop as http_main
from remindly.events import Bus

shutdown_event = asyncio.Event()


def signal_handler(sig, frame):
    """SIGINT / SIGTERM"""
    logger.info("Signal received, shutting down...")
    shutdown_event.set()


def _create_notifier(bus: Bus) -> Notifier:
    if NOTIFIER == "bus":
        return BusNotifier(bus)
    return LogNotifier()


async def main():
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    kv = KeyValueStore(DATA_DB_PATH)
    await kv.open()

    bus = Bus()
    reminders = RemindersApp(
        kv=kv,
        permission_host=StoredPermissionHost(kv),
        notifier=_create_notifier(bus),
        llm_client=create_llm_client(),
        bus=bus,
    )

    try:
        await reminders.start(shutdown_event)

        tasks = [shutdown_event.wait()]
        if ENABLE_HTTP_API:
            tasks.append(http_main(reminders, shutdown_event))
        else:
            logger.warning("HTTP API is disabled")

        await asyncio.gather(*tasks)
    finally:
        logger.info("Closing Remindly...")
        await reminders.close()

        logger.info("Closing database connection...")
        await kv.close()
        logger.info("Remindly closed")


def run() -> None:
    logger.info("Starting Remindly...")
    asyncio.run(main())


if __name__ == "__main__":
    run()
