"""
Admin notifications.

Email over SMTP is the default channel; a Telegram bot can be used instead.
Delivery problems are logged and reported as False, they never abort a digest
run that has already been stored.
"""

import smtplib
from email.message import EmailMessage

import requests

from util.config import NotificationConfig
from util.logging_util import setup_logger

logger = setup_logger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org/bot{token}"


class Notifier:

    def __init__(self, config: NotificationConfig):
        self.config = config

    def notify(self, to: str, subject: str, body: str) -> bool:
        """Send one plain text message. Returns True if it was handed off."""
        if self.config.channel == "telegram":
            return self.send_telegram(f"{subject}\n\n{body}")
        return self.send_email(to, subject, body)

    def send_email(self, to: str, subject: str, body: str) -> bool:
        if not to:
            logger.warning(f"No recipient for '{subject}', email not sent")
            return False

        message = EmailMessage()
        message["From"] = self.config.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        try:
            with smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=30) as smtp:
                if self.config.use_tls:
                    smtp.starttls()
                if self.config.username:
                    smtp.login(self.config.username, self.config.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to}: {e}")
            return False

        logger.info(f"Sent email to {to}: {subject}")
        return True

    def send_telegram(self, text: str) -> bool:
        if not self.config.telegram_bot_token or not self.config.telegram_chat_id:
            logger.warning("Telegram notification channel is not configured")
            return False

        api_url = TELEGRAM_API_URL.format(token=self.config.telegram_bot_token)
        response_data = {"chat_id": self.config.telegram_chat_id, "text": text}

        try:
            resp = requests.post(f"{api_url}/sendMessage", json=response_data, timeout=30)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to send Telegram message: {e}")
            return False

        logger.info("Sent Telegram notification")
        return True
