#!/usr/bin/env python3
"""
Standalone sweep worker: startup recovery, then one sweep per interval until stopped
"""
import logging
import signal
import threading

from rememberme.core.config import settings
from rememberme.db.base import Base
from rememberme.db.session import engine

from .service import build_sweep_loop

logger = logging.getLogger(__name__)


def main() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    import rememberme.models  # noqa: F401
    Base.metadata.create_all(bind=engine)

    stop_event = threading.Event()

    def _handle_signal(signum, frame):
        logger.info(f"[Worker] Received signal {signum}, shutting down")
        stop_event.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    sweep_loop = build_sweep_loop()
    sweep_loop.start()
    try:
        stop_event.wait()
    finally:
        sweep_loop.stop()


if __name__ == "__main__":
    main()
