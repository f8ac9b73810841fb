"""
Configuration settings for the Simulator Records API
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Environment configuration
ENV = os.getenv("ENV", "development")  # development or production
PORT = int(os.getenv("PORT", 8080))
DATABASE_URL = os.getenv("DATABASE_URL", "postgresql://localhost:5432/postgres")
RECIPIENT_EMAIL = os.getenv("RECIPIENT_EMAIL")

# CORS settings
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost").split(",")
    if origin.strip()
]

logger.info(f"Environment: {ENV}")


@dataclass
class MailSettings:
    """Outbound mail transport settings, read from the environment on demand"""
    host: Optional[str] = None
    port: int = 587
    secure: bool = False  # true for 465, false for STARTTLS ports
    user: Optional[str] = None
    password: Optional[str] = None
    from_name: str = "Your Service"
    from_email: Optional[str] = None
    resend_api_key: Optional[str] = None
    production: bool = False

    @classmethod
    def from_env(cls) -> "MailSettings":
        user = os.getenv("SMTP_USER")
        return cls(
            host=os.getenv("SMTP_HOST"),
            port=int(os.getenv("SMTP_PORT") or 587),
            secure=os.getenv("SMTP_SECURE") == "true",
            user=user,
            password=os.getenv("SMTP_PASS"),
            from_name=os.getenv("SMTP_FROM_NAME") or "Your Service",
            from_email=os.getenv("SMTP_FROM_EMAIL") or user,
            resend_api_key=os.getenv("RESEND_API_KEY"),
            production=os.getenv("ENV", "development") == "production",
        )

    @property
    def has_smtp_credentials(self) -> bool:
        return bool(self.host and self.user and self.password)

    @property
    def sender(self) -> str:
        return f'"{self.from_name}" <{self.from_email or self.user}>'
