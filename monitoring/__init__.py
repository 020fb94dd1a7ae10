"""monitoring/__init__.py

Operator notifications.

Submodules:
- alerts: Slack webhook client and the Notifier sink used by the waiter
"""

from .alerts import Notifier, SlackWebhook, compose_activation_complete_alert

__all__ = [
    "Notifier",
    "SlackWebhook",
    "compose_activation_complete_alert",
]
