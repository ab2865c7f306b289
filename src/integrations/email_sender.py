# src/integrations/email_sender.py

"""SMTP delivery of password-reset codes."""

import logging
import smtplib
from email.message import EmailMessage

from src.config.settings import Settings

logger = logging.getLogger("affiliate_bot.email")

_SUBJECT = "Password Reset - Amazon Affiliate Bot"

_BODY = """\
Hello,

We received a request to reset your password. Use the code below to
create a new password:

    {code}

This code will expire in 1 hour.
If you didn't request this password reset, you can safely ignore this email.
"""


class EmailSender:
    """Sends reset codes; reports False instead of raising on failure."""

    def __init__(self) -> None:
        self.settings = Settings()

    @property
    def configured(self) -> bool:
        s = self.settings
        return all((s.SMTP_HOST, s.SMTP_PORT, s.SMTP_USER, s.SMTP_PASS))

    def send_reset_code(self, to_address: str, code: str) -> bool:
        """Email *code* to *to_address*; True only if delivery succeeded."""
        if not self.configured:
            logger.warning(
                "SMTP credentials not configured, reset email not sent"
            )
            return False

        message = EmailMessage()
        message["Subject"] = _SUBJECT
        message["From"] = self.settings.SMTP_FROM_EMAIL
        message["To"] = to_address
        message.set_content(_BODY.format(code=code))

        port = int(self.settings.SMTP_PORT)
        smtp_cls = smtplib.SMTP_SSL if port == 465 else smtplib.SMTP
        try:
            with smtp_cls(self.settings.SMTP_HOST, port, timeout=20) as smtp:
                if smtp_cls is smtplib.SMTP:
                    smtp.starttls()
                smtp.login(self.settings.SMTP_USER, self.settings.SMTP_PASS)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(
                "Failed to send reset email to %s: %s",
                to_address,
                exc,
                exc_info=True,
            )
            return False

        logger.info("Password reset email sent to %s", to_address)
        return True
