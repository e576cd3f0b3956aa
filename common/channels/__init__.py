"""Notification channels for Clinical Chart Audit."""

from .whatsapp import WhatsAppChannel

__all__ = [
    "WhatsAppChannel",
]
