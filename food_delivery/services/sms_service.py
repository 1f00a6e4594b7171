"""
SMS Service using Twilio.

Delivers phone verification codes. Sending is best effort: failures are
logged and reported as False, never raised.
"""

import logging
from typing import Optional

from twilio.rest import Client

from ..config import SMSConfig

logger = logging.getLogger(__name__)


class SMSService:
    """Service for sending OTP codes via Twilio."""

    def __init__(self, config: Optional[SMSConfig] = None, log_codes: bool = False):
        """
        Initialize SMS service.

        Args:
            config: Twilio credentials (default: from environment)
            log_codes: When Twilio is not configured, write codes to the log
                       instead (local development only)
        """
        self.config = config or SMSConfig()
        self.log_codes = log_codes
        self._client = None

        if self.config.account_sid and self.config.auth_token:
            self._client = Client(self.config.account_sid, self.config.auth_token)
            logger.info("Twilio SMS service initialized")

    def is_configured(self) -> bool:
        """Check if Twilio is properly configured."""
        return self._client is not None and bool(self.config.from_number)

    def format_otp_message(self, code: str) -> str:
        return f"Your {self.config.sender_name} verification code is: {code}"

    def send_otp(self, phone: str, code: str) -> bool:
        """
        Send a verification code.

        Args:
            phone: Destination phone number (E.164)
            code: The one-time code

        Returns:
            True if the message was handed to the provider (or logged in
            development), False otherwise
        """
        if not self.is_configured():
            if self.log_codes:
                logger.info(f"[SMS] Twilio not configured, OTP for {phone}: {code}")
                return True
            logger.warning(f"Twilio not configured, OTP for {phone} was not sent")
            return False

        try:
            message = self._client.messages.create(
                body=self.format_otp_message(code),
                from_=self.config.from_number,
                to=phone
            )
            logger.info(f"OTP SMS sent to {phone}: {message.sid}")
            return True
        except Exception as e:
            logger.error(f"OTP SMS send failed to {phone}: {e}")
            return False
