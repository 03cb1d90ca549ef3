"""
Pytest Configuration and Fixtures.

Shared fixtures and in-memory fakes for the appointment monitor tests.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from appointment_monitor.config import MonitorConfig, OpsGenieConfig, load_settings
from appointment_monitor.opsgenie import OpsGenieClient


# 2025-03-12 10:30 in Amsterdam (CET, +01:00)
TARGET_TIME = datetime(2025, 3, 12, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def base_env() -> Dict[str, str]:
    """Minimal valid environment."""
    return {
        "CURRENT_APPOINTMENT_DATE": "2025-03-12T10:30:00+01:00",
        "CHECK_INTERVAL_MS": "60000",
        "OPSGENIE_API_KEY": "test-genie-key",
    }


@pytest.fixture
def monitor_config() -> MonitorConfig:
    return MonitorConfig(current_appointment_date=TARGET_TIME, check_interval_ms=60000)


@pytest.fixture
def opsgenie_config() -> OpsGenieConfig:
    return OpsGenieConfig(api_key="test-genie-key", api_url="https://opsgenie.test")


class RecordingTransport:
    """httpx transport handler that records requests and replies via a callback."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self.responder = responder
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)


@pytest.fixture
def make_opsgenie(opsgenie_config):
    """Build an OpsGenieClient backed by httpx.MockTransport."""
    def _make(responder: Callable[[httpx.Request], httpx.Response]):
        transport = RecordingTransport(responder)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
        return OpsGenieClient(http_client, opsgenie_config), transport

    return _make


class FakeAlerts:
    """Stand-in for OpsGenieClient used by monitor tests."""

    def __init__(self, open_alerts: bool = False, send_ok: bool = True) -> None:
        self.open_alerts = open_alerts
        self.send_ok = send_ok
        self.queries = 0
        self.created: List[Dict[str, Any]] = []

    async def has_open_alerts(self) -> bool:
        self.queries += 1
        return self.open_alerts

    async def create_alert(self, message: str, description: str, tags=None) -> bool:
        self.created.append({"message": message, "description": description})
        return self.send_ok


class FakeBrowser:
    """Stand-in for BookingBrowser returning a fixed time or raising."""

    def __init__(self, found: Optional[datetime] = None, error: Optional[Exception] = None) -> None:
        self.found = found
        self.error = error
        self.opened = 0
        self.closed = 0

    @asynccontextmanager
    async def session(self):
        self.opened += 1
        try:
            yield self
        finally:
            self.closed += 1

    async def first_available_time(self, site) -> datetime:
        if self.error is not None:
            raise self.error
        return self.found


class FakeSite:
    name = "fake"


class SleepRecorder:
    """Records requested sleeps; stops the loop after `limit` calls."""

    class Stop(Exception):
        pass

    def __init__(self, limit: Optional[int] = None) -> None:
        self.limit = limit
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.limit is not None and len(self.calls) >= self.limit:
            raise SleepRecorder.Stop()


@pytest.fixture
def one_minute_before() -> datetime:
    return TARGET_TIME - timedelta(minutes=1)


@pytest.fixture
def settings(base_env):
    return load_settings(base_env)
