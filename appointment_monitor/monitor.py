"""
Monitoring service for earlier appointments.

One sequential loop: ask OpsGenie whether an alert is still open, if not
look up the earliest slot on the booking site, alert when it beats the
current appointment, then sleep for the configured interval.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import Awaitable, Callable

from .browser import BookingBrowser
from .config import MonitorConfig
from .models import MonitorState
from .opsgenie import OpsGenieClient
from .sites import SiteAdapter
from .utils import format_date

logger = logging.getLogger(__name__)


ALERT_MESSAGE = "Earlier appointment available!"

BrowserFactory = Callable[[], BookingBrowser]
SleepFunc = Callable[[float], Awaitable[None]]


@dataclass
class AppointmentMonitor:
    """High-level monitoring loop."""

    config: MonitorConfig
    alerts: OpsGenieClient
    site: SiteAdapter
    browser_factory: BrowserFactory | None = None
    sleep: SleepFunc = asyncio.sleep
    _state: MonitorState = field(default_factory=MonitorState)

    def __post_init__(self) -> None:
        if self.browser_factory is None:
            headless = self.config.headless
            self.browser_factory = lambda: BookingBrowser(headless=headless)

    @property
    def state(self) -> MonitorState:
        return self._state

    def _fmt(self, value: datetime) -> str:
        return format_date(value, self.config.display_timezone)

    def is_earlier(self, found: datetime) -> bool:
        """Strictly before the current appointment; equal is not earlier."""
        return found < self.config.current_appointment_date

    def describe(self, earlier_date: datetime) -> str:
        return (
            f"Found appointment on {self._fmt(earlier_date)}. "
            f"Current appointment: {self._fmt(self.config.current_appointment_date)}"
        )

    async def send_opsgenie_alert(self, earlier_date: datetime) -> None:
        sent = await self.alerts.create_alert(ALERT_MESSAGE, self.describe(earlier_date))
        if sent:
            self._state.alerts_sent += 1

    async def check_appointment(self) -> None:
        """
        Look up the earliest slot and alert if it beats the current appointment.

        Any failure abandons this cycle's check; the browser is always closed.
        """
        self._state.checks_count += 1
        self._state.last_check_at = datetime.now(timezone.utc)
        logger.info("Checking for appointments at %s", self._fmt(self._state.last_check_at))

        try:
            browser = self.browser_factory()
            async with browser.session() as session:
                found = await session.first_available_time(self.site)

            logger.info("First available date: %s", self._fmt(found))
            logger.info("Current appointment date: %s", self._fmt(self.config.current_appointment_date))

            if self.is_earlier(found):
                logger.info("Found earlier appointment!")
                await self.send_opsgenie_alert(found)
            else:
                logger.info("No earlier appointments available")
            self._state.last_error = None
        except Exception as e:  # noqa: BLE001
            logger.exception("Error during check: %s", e)
            self._state.last_error = str(e)

    async def run_cycle(self) -> None:
        if await self.alerts.has_open_alerts():
            self._state.skipped_count += 1
            logger.warning("Found open alerts, skipping check...")
        else:
            await self.check_appointment()

        logger.info(
            "Waiting %s seconds until next check...",
            f"{self.config.check_interval_seconds:g}",
        )
        await self.sleep(self.config.check_interval_seconds)

    async def run_forever(self) -> None:
        logger.info("Starting appointment monitor (site: %s)", self.site.name)
        self._state.is_running = True
        try:
            while True:
                await self.run_cycle()
        finally:
            self._state.is_running = False


__all__ = ["AppointmentMonitor", "ALERT_MESSAGE"]
