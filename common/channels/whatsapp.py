"""WhatsApp channel using an HTTP messaging API.

The API accepts a JSON body {"phone": ..., "message": ...} authenticated
with a bearer token.
"""

import logging

import requests

logger = logging.getLogger(__name__)


class WhatsAppChannel:
    """Send WhatsApp text messages through a messaging API."""

    def __init__(
        self,
        api_url: str | None,
        api_token: str | None,
        timeout: int = 30,
    ):
        """
        Initialize WhatsApp channel.

        Args:
            api_url: Messaging API endpoint
            api_token: Bearer token for the API
            timeout: Request timeout in seconds
        """
        self.api_url = api_url
        self.api_token = api_token
        self.timeout = timeout

    def is_configured(self) -> bool:
        """Check if the channel has an endpoint and credentials."""
        return bool(self.api_url and self.api_token)

    def send(self, message: str, phone: str) -> bool:
        """
        Send a text message.

        Args:
            message: The message text
            phone: Recipient phone number in international format

        Returns:
            True if the API accepted the message, False otherwise
        """
        if not self.is_configured():
            logger.warning("WhatsApp API not configured")
            return False
        if not phone:
            logger.warning("WhatsApp: no recipient phone number")
            return False

        try:
            response = requests.post(
                self.api_url,
                json={"phone": phone, "message": message},
                headers={
                    "Authorization": f"Bearer {self.api_token}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            logger.info(f"WhatsApp message sent to {phone}")
            return True

        except requests.RequestException as e:
            logger.error(f"Failed to send WhatsApp message: {e}")
            return False
