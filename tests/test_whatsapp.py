"""Tests for the WhatsApp messaging channel."""

from unittest.mock import Mock, patch

import requests

from common.channels.whatsapp import WhatsAppChannel


class TestWhatsAppChannel:
    """Test WhatsApp API calls."""

    def test_not_configured(self):
        channel = WhatsAppChannel(api_url=None, api_token=None)
        with patch("common.channels.whatsapp.requests.post") as post:
            assert not channel.send("hola", "5491100000000")
        post.assert_not_called()

    def test_send(self):
        channel = WhatsAppChannel("https://api.example.com/send", "token123", timeout=5)
        with patch("common.channels.whatsapp.requests.post") as post:
            post.return_value = Mock(status_code=200)
            assert channel.send("hola", "5491100000000")

        post.assert_called_once_with(
            "https://api.example.com/send",
            json={"phone": "5491100000000", "message": "hola"},
            headers={
                "Authorization": "Bearer token123",
                "Content-Type": "application/json",
            },
            timeout=5,
        )

    def test_http_error(self):
        channel = WhatsAppChannel("https://api.example.com/send", "token123")
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
        with patch("common.channels.whatsapp.requests.post", return_value=response):
            assert not channel.send("hola", "5491100000000")

    def test_connection_error(self):
        channel = WhatsAppChannel("https://api.example.com/send", "token123")
        with patch(
            "common.channels.whatsapp.requests.post",
            side_effect=requests.ConnectionError("refused"),
        ):
            assert not channel.send("hola", "5491100000000")

    def test_missing_phone(self):
        channel = WhatsAppChannel("https://api.example.com/send", "token123")
        with patch("common.channels.whatsapp.requests.post") as post:
            assert not channel.send("hola", "")
        post.assert_not_called()
