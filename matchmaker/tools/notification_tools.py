"""
Notification channels for popular-profile alerts.

Delivery is fire-and-forget: ``emit`` hands the intent to a background
thread pool and returns immediately. Delivery errors are logged and
swallowed; they never reach the swipe request that triggered them.

The webhook channel does NOT send mail itself. It posts the rendered message
to the mail gateway configured in NOTIFICATION_WEBHOOK_URL.
"""

from __future__ import annotations

import html
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Optional

import httpx

from matchmaker.utils.logging_config import logger

if TYPE_CHECKING:
    from matchmaker.tools.popularity_tools import NotificationIntent


def render_popular_profile_email(intent: "NotificationIntent") -> dict:
    """Build the admin alert subject and HTML body."""

    profile = intent.profile or {}
    esc = lambda value: html.escape("" if value is None else str(value))  # noqa: E731

    pictures = "".join(
        f"<li>{esc(url)}</li>" for url in (profile.get("pictures") or [])
    )
    body = (
        "<!doctype html><html><body>"
        "<h2>Popular Profile Alert</h2>"
        f"<p>The following profile has received more than {intent.threshold} likes:</p>"
        "<ul>"
        f"<li><strong>Name:</strong> {esc(profile.get('name'))}</li>"
        f"<li><strong>Age:</strong> {esc(profile.get('age'))}</li>"
        f"<li><strong>Bio:</strong> {esc(profile.get('bio'))}</li>"
        f"<li><strong>Likes:</strong> {intent.like_count}</li>"
        f"<li><strong>Location:</strong> {esc(profile.get('latitude'))}, "
        f"{esc(profile.get('longitude'))}</li>"
        "</ul>"
        f"<p>Pictures:</p><ul>{pictures}</ul>"
        "</body></html>"
    )
    return {
        "subject": f"Profile exceeded {intent.threshold} likes",
        "html": body,
    }


class NotificationChannel(ABC):
    """Accepts notification intents; must never raise into the caller."""

    @abstractmethod
    def emit(self, intent: "NotificationIntent") -> None:
        """Queue an intent for best-effort delivery."""

    def close(self) -> None:
        """Release background resources."""


class LoggingNotificationChannel(NotificationChannel):
    """Used when no webhook is configured: the alert only goes to the log."""

    def emit(self, intent: "NotificationIntent") -> None:
        logger.info(
            "Popular profile alert (not delivered, no webhook): profile=%s likes=%s",
            intent.profile_id,
            intent.like_count,
        )


class WebhookNotificationChannel(NotificationChannel):
    """POSTs the rendered alert to a mail gateway on a background thread."""

    def __init__(
        self,
        url: str,
        admin_email: Optional[str],
        timeout: float = 10.0,
        max_workers: int = 2,
        auth_token: Optional[str] = None,
    ):
        self.url = url
        self.admin_email = admin_email
        self.timeout = timeout
        self.auth_token = auth_token
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="notify"
        )

    def _headers(self) -> dict:
        h = {"Content-Type": "application/json"}
        if self.auth_token:
            h["Authorization"] = f"Bearer {self.auth_token}"
        return h

    def build_payload(self, intent: "NotificationIntent") -> dict:
        message = render_popular_profile_email(intent)
        return {
            "to": self.admin_email,
            "subject": message["subject"],
            "html": message["html"],
            "profile_id": intent.profile_id,
            "like_count": intent.like_count,
        }

    def emit(self, intent: "NotificationIntent") -> Future | None:
        if not self.admin_email:
            logger.info(
                "ADMIN_EMAIL not configured; skipping popular alert for profile %s",
                intent.profile_id,
            )
            return None

        try:
            return self._executor.submit(self.deliver, intent)
        except RuntimeError as exc:
            logger.warning("Notification executor unavailable: %s", str(exc))
            return None

    def deliver(self, intent: "NotificationIntent") -> bool:
        """Send one alert synchronously. Returns False on any delivery failure."""

        try:
            with httpx.Client(timeout=self.timeout) as client:
                r = client.post(
                    self.url,
                    json=self.build_payload(intent),
                    headers=self._headers(),
                )
                r.raise_for_status()
            logger.info("Delivered popular alert for profile %s", intent.profile_id)
            return True
        except httpx.HTTPError as exc:
            logger.warning(
                "Failed to deliver popular alert for profile %s: %s",
                intent.profile_id,
                str(exc),
            )
            return False
        except Exception as exc:
            # Runs on a worker thread; nobody waits on the future.
            logger.warning(
                "Popular alert for profile %s failed: %s",
                intent.profile_id,
                str(exc),
                exc_info=True,
            )
            return False

    def close(self) -> None:
        self._executor.shutdown(wait=False)
