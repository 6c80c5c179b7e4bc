import enum
import logging

import httpx

from studytimer.services.api_client import ApiClient

logger = logging.getLogger(__name__)


class Severity(enum.IntEnum):
    INFO = 0
    WARNING = 1
    SUCCESS = 2
    ERROR = 3


class NotificationClient(ApiClient):
    """Creates notification records shown in the dashboard's notification bell."""

    async def create(
        self,
        title: str,
        message: str,
        severity: Severity = Severity.INFO,
    ) -> bool:
        """POST a notification record.

        Notifications are best-effort: this never raises. Returns True if
        the API accepted the record.
        """
        try:
            response = await self._http.post(
                self.url("/notifications"),
                headers=self._headers,
                json={"title": title, "message": message, "type": int(severity)},
            )
        except httpx.HTTPError as exc:
            logger.warning("Notification %r could not be delivered: %s", title, exc)
            return False

        if response.status_code >= 400:
            logger.warning(
                "Notification %r rejected with status %d", title, response.status_code
            )
            return False
        return True
