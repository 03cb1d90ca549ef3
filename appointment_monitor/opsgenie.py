"""
OpsGenie REST client.

Two calls are needed by the monitor: listing open alerts (to suppress
checks while an alert is unresolved) and creating a new alert when an
earlier appointment shows up. Both swallow failures at their public
boundary so a flaky alerting backend never stops the polling loop.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from httpx import AsyncClient, Response

from .config import OpsGenieConfig
from .models import Alert, AlertList

logger = logging.getLogger(__name__)


OPEN_ALERTS_QUERY = "status:open"


class OpsGenieError(Exception):
    """Raised for non-2xx replies from the OpsGenie API."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"OpsGenie API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class OpsGenieClient:
    def __init__(self, http_client: AsyncClient, config: OpsGenieConfig) -> None:
        self.http_client = http_client
        self.config = config

    @property
    def alerts_url(self) -> str:
        return f"{self.config.api_url}/v2/alerts"

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"GenieKey {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def _check(self, response: Response) -> None:
        if response.is_error:
            raise OpsGenieError(response.status_code, response.text)

    async def list_open_alerts(self) -> List[Alert]:
        """Return alerts OpsGenie reports as open, minus any marked closed."""
        response = await self.http_client.get(
            self.alerts_url,
            params={"query": OPEN_ALERTS_QUERY},
            headers=self.headers,
            timeout=self.config.timeout,
        )
        self._check(response)
        return AlertList.model_validate(response.json()).open_alerts()

    async def has_open_alerts(self) -> bool:
        """
        Whether any non-closed alert exists.

        Fails open: if the listing can't be fetched or parsed we report no
        open alerts, so an OpsGenie outage does not suppress checks forever.
        """
        try:
            alerts = await self.list_open_alerts()
        except Exception as e:  # noqa: BLE001
            logger.error("Failed to check OpsGenie alerts: %s", e)
            return False
        if alerts:
            logger.debug("OpsGenie reports %s open alert(s)", len(alerts))
        return bool(alerts)

    async def create_alert(
        self,
        message: str,
        description: str,
        tags: Optional[List[str]] = None,
    ) -> bool:
        """Create an alert. Returns False (after logging) if the request failed."""
        payload: Dict[str, Any] = {
            "message": message,
            "description": description,
            "tags": list(tags if tags is not None else self.config.tags),
        }
        try:
            response = await self.http_client.post(
                self.alerts_url,
                json=payload,
                headers=self.headers,
                timeout=self.config.timeout,
            )
            self._check(response)
        except Exception as e:  # noqa: BLE001
            logger.error("Failed to send OpsGenie alert: %s", e)
            return False
        logger.info("OpsGenie alert sent successfully")
        return True


__all__ = ["OpsGenieClient", "OpsGenieError", "OPEN_ALERTS_QUERY"]
