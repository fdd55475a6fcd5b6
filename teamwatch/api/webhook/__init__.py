"""Webhook receiver resource."""

from __future__ import annotations

from .resources import WebhookResource, verify_signature

__all__ = ["WebhookResource", "verify_signature"]
