# tests/test_email_sender.py

"""Tests for SMTP reset-code delivery."""

import smtplib
import unittest
from unittest.mock import MagicMock, patch

from src.integrations.email_sender import EmailSender


def _configured(port: str = "587") -> EmailSender:
    sender = EmailSender()
    sender.settings.SMTP_HOST = "smtp.example.com"
    sender.settings.SMTP_PORT = port
    sender.settings.SMTP_USER = "bot@example.com"
    sender.settings.SMTP_PASS = "secret"
    return sender


class TestEmailSender(unittest.TestCase):
    """Delivery outcomes are reported, never raised."""

    def test_unconfigured_returns_false(self) -> None:
        sender = EmailSender()
        sender.settings.SMTP_HOST = ""
        with patch("src.integrations.email_sender.smtplib.SMTP") as mock_smtp:
            self.assertFalse(sender.send_reset_code("a@example.com", "abc"))
        mock_smtp.assert_not_called()

    @patch("src.integrations.email_sender.smtplib.SMTP")
    def test_starttls_delivery(self, mock_smtp: MagicMock) -> None:
        conn = mock_smtp.return_value.__enter__.return_value
        sender = _configured()

        self.assertTrue(sender.send_reset_code("a@example.com", "c0ffee"))

        mock_smtp.assert_called_once_with("smtp.example.com", 587, timeout=20)
        conn.starttls.assert_called_once()
        conn.login.assert_called_once_with("bot@example.com", "secret")
        message = conn.send_message.call_args.args[0]
        self.assertEqual(message["To"], "a@example.com")
        self.assertIn("c0ffee", message.get_content())

    @patch("src.integrations.email_sender.smtplib.SMTP_SSL")
    def test_ssl_port(self, mock_ssl: MagicMock) -> None:
        conn = mock_ssl.return_value.__enter__.return_value
        self.assertTrue(_configured("465").send_reset_code("a@example.com", "x"))
        conn.starttls.assert_not_called()

    @patch("src.integrations.email_sender.smtplib.SMTP")
    def test_smtp_failure_returns_false(self, mock_smtp: MagicMock) -> None:
        conn = mock_smtp.return_value.__enter__.return_value
        conn.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad")
        self.assertFalse(_configured().send_reset_code("a@example.com", "x"))


if __name__ == "__main__":
    unittest.main()
