"""Best-effort notifications for headcount request events.

A dispatcher never raises: delivery problems are logged and swallowed so a
committed state transition is never reported as failed because an e-mail
could not be sent.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import requests

from ..core.constants import DEFAULT_NOTIFICATION_TIMEOUT_SECONDS
from ..core.enums import NotificationEvent
from ..core.logging_config import get_logger

logger = get_logger("notifications.dispatcher")


class NotificationDispatcher:
    """Base dispatcher: ``notify`` wraps ``_send`` in the best-effort boundary."""

    def notify(self, event: NotificationEvent, payload: Mapping[str, Any]) -> None:
        try:
            self._send(NotificationEvent(event), dict(payload))
        except Exception:
            logger.exception(
                "Notification delivery failed",
                extra={"event": getattr(event, "value", event), "request_id": payload.get("request_id")},
            )

    def _send(self, event: NotificationEvent, payload: Dict[str, Any]) -> None:
        raise NotImplementedError


class LoggingNotificationDispatcher(NotificationDispatcher):
    """Used when no webhook is configured: the event only shows up in the logs."""

    def _send(self, event: NotificationEvent, payload: Dict[str, Any]) -> None:
        logger.info("Headcount notification", extra={"event": event.value, "request_id": payload.get("request_id")})


class WebhookNotificationDispatcher(NotificationDispatcher):
    """POSTs ``{"event": ..., **payload}`` as JSON to an e-mail relay endpoint."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = DEFAULT_NOTIFICATION_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
        headers: Optional[Mapping[str, str]] = None,
    ):
        self.url = url
        self.timeout = float(timeout)
        self.session = session or requests.Session()
        self.headers = dict(headers or {})

    def _send(self, event: NotificationEvent, payload: Dict[str, Any]) -> None:
        body = {"event": event.value, **payload}
        response = self.session.post(self.url, json=body, headers=self.headers, timeout=self.timeout)
        response.raise_for_status()
        logger.info(
            "Headcount notification sent",
            extra={"event": event.value, "request_id": payload.get("request_id"), "status_code": response.status_code},
        )


def build_dispatcher(webhook_url: Optional[str], *, timeout: float = DEFAULT_NOTIFICATION_TIMEOUT_SECONDS) -> NotificationDispatcher:
    if webhook_url:
        return WebhookNotificationDispatcher(webhook_url, timeout=timeout)
    return LoggingNotificationDispatcher()
