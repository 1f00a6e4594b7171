"""Configuration module for the food delivery backend."""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Development defaults. Fixed so tokens survive restarts during local work.
DEFAULT_JWT_SECRET = "dev-jwt-secret-key-change-in-production"
DEFAULT_JWT_REFRESH_SECRET = "dev-refresh-secret-key-change-in-production"

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


class ConfigError(Exception):
    """Raised when the configuration is unusable for the current environment."""


def parse_duration(value: str) -> int:
    """
    Parse a duration string into seconds.

    Accepts plain seconds ("900") or a number with a unit suffix
    ("15m", "12h", "7d").

    Raises:
        ConfigError: If the value cannot be parsed
    """
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ConfigError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return int(amount) * _DURATION_UNITS[unit]


@dataclass
class TokenPolicy:
    """Signing secrets and lifetimes for access and refresh tokens."""
    access_secret: str = field(default_factory=lambda: os.getenv("JWT_SECRET") or DEFAULT_JWT_SECRET)
    refresh_secret: str = field(default_factory=lambda: os.getenv("JWT_REFRESH_SECRET") or DEFAULT_JWT_REFRESH_SECRET)
    access_expires_in: int = field(default_factory=lambda: parse_duration(os.getenv("JWT_EXPIRES_IN", "15m")))
    refresh_expires_in: int = field(default_factory=lambda: parse_duration(os.getenv("JWT_REFRESH_EXPIRES_IN", "7d")))
    algorithm: str = "HS256"

    def uses_default_secrets(self) -> bool:
        return (
            self.access_secret == DEFAULT_JWT_SECRET
            or self.refresh_secret == DEFAULT_JWT_REFRESH_SECRET
        )


@dataclass
class OTPConfig:
    """One-time password settings."""
    length: int = field(default_factory=lambda: int(os.getenv("OTP_LENGTH", "6")))
    ttl_minutes: int = field(default_factory=lambda: int(os.getenv("OTP_TTL_MINUTES", "10")))


@dataclass
class SMSConfig:
    """Twilio credentials for OTP delivery."""
    account_sid: str = field(default_factory=lambda: os.getenv("TWILIO_ACCOUNT_SID", ""))
    auth_token: str = field(default_factory=lambda: os.getenv("TWILIO_AUTH_TOKEN", ""))
    from_number: str = field(default_factory=lambda: os.getenv("TWILIO_PHONE_NUMBER", ""))
    sender_name: str = field(default_factory=lambda: os.getenv("SMS_SENDER_NAME", "FoodDelivery"))


@dataclass
class SecurityConfig:
    """Password hashing settings."""
    bcrypt_rounds: int = field(default_factory=lambda: int(os.getenv("BCRYPT_ROUNDS", "10")))
    password_min_length: int = field(default_factory=lambda: int(os.getenv("PASSWORD_MIN_LENGTH", "6")))


@dataclass
class Config:
    """Main configuration container."""
    tokens: TokenPolicy = field(default_factory=TokenPolicy)
    otp: OTPConfig = field(default_factory=OTPConfig)
    sms: SMSConfig = field(default_factory=SMSConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)

    environment: str = field(default_factory=lambda: os.getenv("ENVIRONMENT", "development"))
    data_dir: Path = field(default_factory=lambda: Path(os.getenv("DATA_DIR") or DEFAULT_DATA_DIR))
    frontend_url: str = field(default_factory=lambda: os.getenv("FRONTEND_URL", "http://localhost:3000"))

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def validate(self):
        """
        Check the configuration for the current environment.

        Development runs on the built-in secrets; production must set both
        secrets explicitly and keep them distinct.

        Raises:
            ConfigError: If the configuration is not safe to run with
        """
        if not self.is_production:
            return

        if self.tokens.uses_default_secrets():
            raise ConfigError(
                "JWT_SECRET and JWT_REFRESH_SECRET must be set in production"
            )
        if self.tokens.access_secret == self.tokens.refresh_secret:
            raise ConfigError(
                "JWT_SECRET and JWT_REFRESH_SECRET must be different"
            )


def load_config() -> Config:
    """Load configuration from environment variables."""
    return Config()
