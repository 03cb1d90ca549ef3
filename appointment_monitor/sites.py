"""
Booking site adapters.

Everything that depends on a particular booking site's markup lives here:
where to go, what to click, which background response carries the
availability and how to read it. The monitor loop only sees the
SiteAdapter interface, so a site redesign means editing or replacing an
adapter and nothing else.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
import logging
from typing import Any
from zoneinfo import ZoneInfo

from playwright.async_api import Page, Response
from pydantic import ValidationError

from .config import DEFAULT_TIMEZONE, SiteConfig
from .models import AvailabilityResponse

logger = logging.getLogger(__name__)


class AvailabilityError(Exception):
    """Raised when the availability payload doesn't have the expected shape."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SiteAdapter(ABC):
    """Site-specific steps for reading the earliest available appointment."""

    name: str = "site"

    @abstractmethod
    async def navigate(self, page: Page) -> None:
        """Open the booking entry page."""

    @abstractmethod
    async def interact(self, page: Page) -> None:
        """Click through to the step that requests availability."""

    @abstractmethod
    def matches_response(self, response: Response) -> bool:
        """Whether a background response carries the availability payload."""

    @abstractmethod
    def extract(self, body: Any) -> datetime:
        """Read the earliest available time from the decoded JSON body."""


class MijnAfspraakMakenSite(SiteAdapter):
    """
    Adapter for mijnafspraakmaken.nl municipal booking portals.

    Selecting a service and moving to step 2 makes the client fetch
    .../firstAvailableAppointmentTime, whose body looks like
    {"data": [{"firstAvailableTime": "2025-03-12T09:30:00+01:00"}]}.
    """

    name = "mijnafspraakmaken"

    def __init__(self, config: SiteConfig | None = None, tz_name: str = DEFAULT_TIMEZONE) -> None:
        self.config = config or SiteConfig()
        self.tz_name = tz_name

    async def navigate(self, page: Page) -> None:
        logger.info("Opening %s", self.config.booking_url)
        await page.goto(self.config.booking_url)

    async def interact(self, page: Page) -> None:
        await page.get_by_text(self.config.service_label).click()
        await page.get_by_text(self.config.next_step_label).click()

    def matches_response(self, response: Response) -> bool:
        return self.config.response_fragment in response.url and response.status == 200

    def extract(self, body: Any) -> datetime:
        try:
            payload = AvailabilityResponse.model_validate(body)
        except ValidationError as e:
            raise AvailabilityError(f"Unexpected availability payload: {e}") from e

        found = payload.earliest.first_available_time
        # Times without an offset are local to the municipality
        if found.tzinfo is None:
            found = found.replace(tzinfo=ZoneInfo(self.tz_name))
        return found


__all__ = ["SiteAdapter", "MijnAfspraakMakenSite", "AvailabilityError"]
