"""
Process entrypoint for the appointment monitor.

Validates configuration before touching the network, then runs the
monitor loop until the process is interrupted.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from types import FrameType
from typing import Optional

from httpx import AsyncClient
from pydantic import ValidationError

from .config import Settings, get_settings
from .monitor import AppointmentMonitor
from .opsgenie import OpsGenieClient
from .sites import MijnAfspraakMakenSite
from .utils import setup_logging


logger = logging.getLogger(__name__)


def _handle_sigterm(signum: int, frame: Optional[FrameType]) -> None:
    # Treat SIGTERM (docker stop, systemd) the same as Ctrl+C
    raise KeyboardInterrupt


async def _run(settings: Settings) -> None:
    async with AsyncClient(timeout=settings.opsgenie.timeout) as http_client:
        monitor = AppointmentMonitor(
            config=settings.monitor,
            alerts=OpsGenieClient(http_client, settings.opsgenie),
            site=MijnAfspraakMakenSite(settings.site, settings.monitor.display_timezone),
        )
        await monitor.run_forever()


def main() -> None:
    """Entry point for running the monitor."""
    try:
        settings = get_settings()
    except ValidationError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error("Invalid configuration:\n%s", e)
        sys.exit(1)

    setup_logging(settings.logging)
    signal.signal(signal.SIGTERM, _handle_sigterm)

    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("Shutting down...")
        sys.exit(0)
    except Exception:  # noqa: BLE001
        logger.exception("Monitor stopped on unexpected error")
        sys.exit(1)


if __name__ == "__main__":
    main()
