"""Outbound run notifications."""

from .webhook import WebhookNotifier

__all__ = ["WebhookNotifier"]
