"""Push delivery through an HTTP gateway that relays to APNs.

The gateway accepts one payload plus a list of device tokens per request and
exposes a feedback endpoint listing tokens APNs has reported as permanently
unreachable. Delivery is fire-and-forget: failures are logged, never raised
to the job that asked for the send.
"""

from __future__ import annotations

from typing import Optional, Sequence

import requests
from apscheduler.schedulers.base import BaseScheduler

from sc_connect.configs.logging_config import get_logger
from sc_connect.configs.settings import PushConfig
from sc_connect.storage.base import SportsRepository, StorageError

logger = get_logger(__name__)


class PushNotifier:
    """Submit notifications to the push gateway."""

    NOTIFICATIONS_PATH = "/notifications"
    FEEDBACK_PATH = "/feedback"

    def __init__(
        self,
        gateway_url: Optional[str] = None,
        api_key: Optional[str] = None,
        production: Optional[bool] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.gateway_url = (gateway_url or PushConfig.GATEWAY_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else PushConfig.API_KEY
        self.production = PushConfig.PRODUCTION if production is None else production
        self.session = session or requests.Session()
        self.timeout = timeout or PushConfig.TIMEOUT
        self.connected = False
        if self.api_key:
            self.session.headers["Authorization"] = f"Bearer {self.api_key}"

    @staticmethod
    def build_payload(message: str, play_sound: bool) -> dict:
        aps: dict = {"alert": message, "badge": 1}
        if play_sound:
            aps["sound"] = "default"
        return {"aps": aps}

    def send_notification(
        self,
        tokens: Sequence[str],
        message: str,
        play_sound: bool = False,
    ) -> None:
        """Hand one notification for ``tokens`` to the gateway. Nothing is returned."""
        tokens = [token for token in tokens if token]
        if not tokens:
            logger.debug("No device tokens for notification %r; skipping", message)
            return

        body = {
            "tokens": tokens,
            "production": self.production,
            "payload": self.build_payload(message, play_sound),
        }
        response = self._request("post", self.NOTIFICATIONS_PATH, json=body)
        if response is None:
            return
        if not response.ok:
            logger.error(
                "Push gateway rejected notification (%r) with HTTP %d: %s",
                message,
                response.status_code,
                response.text,
            )
            return
        for token in tokens:
            logger.info('Notification ("%s") transmitted to: %s', message, token)

    def fetch_feedback(self) -> list[str]:
        """Tokens the gateway reports as permanently unreachable."""
        response = self._request("get", self.FEEDBACK_PATH)
        if response is None:
            return []
        if not response.ok:
            logger.error("Push feedback request failed with HTTP %d", response.status_code)
            return []
        try:
            entries = response.json()
        except ValueError:
            logger.error("Push feedback response was not JSON")
            return []
        tokens: list[str] = []
        for entry in entries or []:
            device = entry.get("device") if isinstance(entry, dict) else entry
            if device:
                tokens.append(str(device).lower())
        return tokens

    def _request(self, method: str, path: str, **kwargs) -> Optional[requests.Response]:
        url = f"{self.gateway_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout:
            logger.warning("Push gateway: connection timeout (%s)", url)
            return None
        except requests.ConnectionError as exc:
            if self.connected:
                logger.warning("Disconnected from push gateway: %s", exc)
            else:
                logger.error("Could not connect to push gateway at %s: %s", url, exc)
            self.connected = False
            return None
        except requests.RequestException as exc:
            logger.error("Push gateway request to %s failed: %s", url, exc)
            return None

        if not self.connected:
            logger.info("Connected to push gateway at %s", self.gateway_url)
            self.connected = True
        return response


class PushFeedbackListener:
    """Delete clients whose push tokens the gateway reports as dead."""

    JOB_ID = "push-feedback"

    def __init__(self, notifier: PushNotifier, store: SportsRepository) -> None:
        self.notifier = notifier
        self.store = store

    def poll(self) -> int:
        removed = 0
        for token in self.notifier.fetch_feedback():
            try:
                count = self.store.remove_client_by_push_token(token)
            except StorageError as exc:
                logger.error("Could not remove client with token %s: %s", token, exc)
                continue
            if count:
                removed += count
                logger.info(
                    "Client with token %s was not responding and was successfully removed.",
                    token,
                )
        return removed

    def start(
        self,
        scheduler: BaseScheduler,
        interval_seconds: int = PushConfig.FEEDBACK_INTERVAL_SECONDS,
    ) -> None:
        scheduler.add_job(
            self.poll,
            trigger="interval",
            seconds=interval_seconds,
            id=self.JOB_ID,
            replace_existing=True,
        )
        logger.info("Polling push feedback every %d seconds", interval_seconds)
