"""
main.py — Single entry point.

Runs the image proxy web server in one asyncio event loop until SIGINT or
SIGTERM. Each inbound request resolves in its own task; nothing is shared
between requests except the stateless search backend and extractor.
"""
import asyncio
import logging
import signal
import sys

import config

logging.basicConfig(
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    handlers=[logging.StreamHandler(sys.stdout)],
)
logging.getLogger("aiohttp.access").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


async def run() -> None:
    from candidate_source import get_backend
    from extractors.base import get_extractor
    from server import start_server

    # Fail at startup, not on the first request, when config names an unknown backend
    try:
        get_backend()
        logger.info("HTML extractor: %s", get_extractor().name)
    except RuntimeError as exc:
        logger.critical("FATAL: %s", exc)
        raise

    runner = await start_server()

    stop_event = asyncio.Event()

    def _stop(*_):
        logger.info("Shutdown signal received.")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _stop)
        except (NotImplementedError, RuntimeError):
            # Windows doesn't support add_signal_handler for all signals
            pass

    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down…")
        await runner.cleanup()

    logger.info("Goodbye.")


def main() -> None:
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
