"""Webhook notifier for reporting the outcome of a sync run.

The payload follows the chat-bot webhook format
{"tag": "text", "text": {"content": "..."}}. Delivery is best effort:
a failed notification is logged and never changes the run's outcome.
"""

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Yuque to Confluence sync succeeded"
FAILURE_MESSAGE = "Yuque to Confluence sync failed\nError: {error}"


class WebhookNotifier:
    """Posts one message per run to a webhook URL.

    Example:
        >>> notifier = WebhookNotifier("https://hooks.example.com/abc")
        >>> notifier.notify(None)
    """

    def __init__(self, url: Optional[str], session: Optional[requests.Session] = None,
                 timeout: int = 10):
        self.url = url or ""
        self._session = session or requests.Session()
        self._timeout = timeout

    @staticmethod
    def build_message(error: Optional[BaseException]) -> str:
        if error is not None:
            return FAILURE_MESSAGE.format(error=error)
        return SUCCESS_MESSAGE

    def notify(self, error: Optional[BaseException]) -> bool:
        """Send the run outcome.

        Args:
            error: The error that aborted the run, or None on success

        Returns:
            True if the webhook accepted the message
        """
        if not self.url:
            logger.debug("No notification URL configured, skipping notification")
            return False

        payload = {
            "tag": "text",
            "text": {"content": self.build_message(error)},
        }
        try:
            response = self._session.post(self.url, json=payload, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Failed to deliver notification: {e}")
            return False

        logger.info("Notification delivered")
        return True
