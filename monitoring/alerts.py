"""monitoring/alerts.py

Slack webhook alerts for the activation waiter.

Sends operator notifications for:
- Epoch boundary waits and warmup re-estimates (info)
- Fatal conditions before the wait is aborted (critical)

Design goals:
- Zero secrets in code (env vars only)
- Fail-safe (never crash the wait on alert failure)
- Strict timeouts (prevent blocking)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

import requests

logger = logging.getLogger(__name__)


ALERT_INFO = "INFO"
ALERT_WARNING = "WARNING"
ALERT_CRITICAL = "CRITICAL"


@dataclass
class SlackWebhook:
    """Slack incoming-webhook client.

    Attributes:
        webhook_url: Webhook URL from SLACK_WEBHOOK_URL env var.
        timeout: Request timeout in seconds (default: 3).
    """

    webhook_url: str
    timeout: int = 3
    _session: Optional[requests.Session] = None

    @classmethod
    def from_env(cls, timeout: int = 3) -> "SlackWebhook":
        """Create webhook from environment variables."""
        url = os.getenv("SLACK_WEBHOOK_URL")
        if not url:
            logger.warning("[alerts] SLACK_WEBHOOK_URL not set, alerts will only be logged")
            return cls(webhook_url="", timeout=timeout)
        return cls(webhook_url=url, timeout=timeout)

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def send_message(self, text: str, level: str = ALERT_INFO) -> bool:
        """Post a message to the webhook.

        Args:
            text: Message text to send.
            level: Alert level, used as a prefix.

        Returns:
            True if sent successfully, False otherwise.
        """
        if not self.webhook_url:
            logger.debug(f"[alerts] Would send (disabled): {text[:50]}...")
            return False

        payload = {"text": f"[{level}] {text}" if level != ALERT_INFO else text}

        try:
            response = self._get_session().post(
                self.webhook_url,
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            logger.debug(f"[alerts] Sent: {text[:50]}...")
            return True

        except requests.exceptions.Timeout:
            logger.warning(f"[alerts] Timeout sending message: {text[:50]}...")
            return False
        except requests.exceptions.RequestException as e:
            logger.warning(f"[alerts] Request failed: {e}")
            return False


class Notifier:
    """Operator-facing sink: logs locally, then forwards to Slack."""

    def __init__(self, webhook: Optional[SlackWebhook] = None):
        self.webhook = webhook

    @classmethod
    def from_env(cls, timeout: int = 3) -> "Notifier":
        return cls(webhook=SlackWebhook.from_env(timeout=timeout))

    def _send(self, text: str, level: str) -> bool:
        if self.webhook is None:
            return False
        return self.webhook.send_message(text, level)

    def info(self, message: str) -> bool:
        logger.info(message)
        return self._send(message, ALERT_INFO)

    def warning(self, message: str) -> bool:
        logger.warning(message)
        return self._send(message, ALERT_WARNING)

    def critical(self, message: str) -> bool:
        logger.critical(message)
        return self._send(message, ALERT_CRITICAL)


def compose_activation_complete_alert(activation_epoch: int, current_epoch: Optional[int] = None) -> str:
    """Compose the final success message for a finished wait."""
    message = f"Stake delegated at epoch {activation_epoch} is fully active"
    if current_epoch is not None:
        message += f" (current epoch is {current_epoch})"
    return message
