"""
Notification gateway: outbound email over SMTP or Resend, with a disposable
Ethereal test account as the development fallback
"""

import asyncio
import logging
import re
from datetime import datetime
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Any, Dict, Optional, Tuple

import aiosmtplib
import httpx
import resend
from pydantic import ValidationError

from config.settings import MailSettings
from models.email import (
    EmailResult,
    EmailTemplate,
    EmailType,
    NotificationMailData,
    WelcomeMailData,
    mail_data_adapter,
)

logger = logging.getLogger(__name__)

NOT_CONFIGURED_ERROR = "Email service not configured"

ETHEREAL_ACCOUNT_URL = "https://api.nodemailer.com/user"
ETHEREAL_SMTP_HOST = "smtp.ethereal.email"
ETHEREAL_SMTP_PORT = 587
ETHEREAL_MESSAGE_URL = "https://ethereal.email/message/{msgid}"

_MSGID_PATTERN = re.compile(r"MSGID=([^\s\]]+)")


class TransportUnconfigured(RuntimeError):
    """Raised by transports that cannot be built from the given settings"""


class SmtpTransport:
    """SMTP delivery via aiosmtplib"""

    name = "smtp"

    def __init__(self, host: str, port: int, secure: bool, user: str, password: str):
        self.host = host
        self.port = port
        self.secure = secure
        self.user = user
        self.password = password

    async def send(self, message: EmailMessage) -> Tuple[str, str]:
        """Send a message; returns (message_id, server response)"""
        _, response = await aiosmtplib.send(
            message,
            hostname=self.host,
            port=self.port,
            username=self.user,
            password=self.password,
            use_tls=self.secure,
        )
        return message["Message-ID"], response

    async def verify(self) -> None:
        async with aiosmtplib.SMTP(hostname=self.host, port=self.port, use_tls=self.secure) as smtp:
            await smtp.login(self.user, self.password)


class ResendTransport:
    """Delivery through the Resend HTTP API"""

    name = "resend"

    def __init__(self, api_key: str):
        resend.api_key = api_key

    async def send(self, message: EmailMessage) -> Tuple[Optional[str], str]:
        html_part = message.get_body(preferencelist=("html",))
        text_part = message.get_body(preferencelist=("plain",))
        email_data = {
            "from": message["From"],
            "to": [message["To"]],
            "subject": message["Subject"],
            "html": html_part.get_content() if html_part else None,
            "text": text_part.get_content() if text_part else None,
        }
        result = await asyncio.to_thread(resend.Emails.send, email_data)

        # Extract just the ID string from the Resend response
        if hasattr(result, 'id'):
            resend_id = result.id
        elif isinstance(result, dict) and 'id' in result:
            resend_id = result['id']
        else:
            resend_id = None
        return resend_id, ""

    async def verify(self) -> None:
        await asyncio.to_thread(resend.Domains.list)


def _local_date() -> str:
    return datetime.now().strftime("%m/%d/%Y")


def _local_datetime() -> str:
    return datetime.now().strftime("%m/%d/%Y, %I:%M:%S %p")


def render_template(data: Any) -> EmailTemplate:
    """Render subject, HTML and text bodies for validated mail data"""
    if isinstance(data, WelcomeMailData):
        joined = _local_date()
        return EmailTemplate(
            subject=f"Welcome {data.name}!",
            html=f"""
          <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h2 style="color: #333;">Welcome to Our Service!</h2>
            <p>Hi <strong>{data.name}</strong>,</p>
            <p>Thank you for joining our service. We're excited to have you on board!</p>
            <div style="background-color: #f5f5f5; padding: 15px; margin: 20px 0; border-radius: 5px;">
              <p><strong>Your Details:</strong></p>
              <ul>
                <li>Name: {data.name}</li>
                <li>Email: {data.email}</li>
                <li>Age: {data.age}</li>
                <li>Joined: {joined}</li>
              </ul>
            </div>
            <p>If you have any questions, feel free to contact our support team.</p>
            <p>Best regards,<br>The Team</p>
          </div>
        """,
            text=(
                f"Welcome {data.name}!\n\n"
                "Thank you for joining our service. We're excited to have you on board!\n\n"
                "Your Details:\n"
                f"- Name: {data.name}\n"
                f"- Email: {data.email}\n"
                f"- Age: {data.age}\n"
                f"- Joined: {joined}\n\n"
                "If you have any questions, feel free to contact our support team.\n\n"
                "Best regards,\nThe Team"
            ),
        )

    sent_on = _local_datetime()
    if isinstance(data, NotificationMailData):
        return EmailTemplate(
            subject=f"Notification: {data.subject or 'Update'}",
            html=f"""
          <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h2 style="color: #333;">Notification</h2>
            <p>Hi there,</p>
            <p>{data.message}</p>
            <p>This notification was sent on {sent_on}</p>
            <p>Best regards,<br>The Team</p>
          </div>
        """,
            text=(
                f"Notification\n\nHi there,\n\n{data.message}\n\n"
                f"This notification was sent on {sent_on}\n\n"
                "Best regards,\nThe Team"
            ),
        )

    # Newlines become <br> in the HTML part only
    html_message = data.message.replace("\n", "<br>")
    return EmailTemplate(
        subject=data.subject or "Message from Our Service",
        html=f"""
          <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h2 style="color: #333;">Message</h2>
            <p>{html_message}</p>
            <p>Sent on {sent_on}</p>
          </div>
        """,
        text=f"{data.message}\n\nSent on {sent_on}",
    )


def parse_mail_data(mail_type: str, data: Dict[str, Any]):
    """Validate the data bag against the template selected by mail_type.

    Unrecognized types fall back to the custom template.
    """
    known = {item.value for item in EmailType}
    resolved = mail_type if mail_type in known else EmailType.CUSTOM.value
    return mail_data_adapter.validate_python({**data, "type": resolved})


def get_test_message_url(response: Optional[str]) -> Optional[str]:
    """Build an Ethereal preview link from an SMTP server response"""
    if not response:
        return None
    match = _MSGID_PATTERN.search(response)
    if not match:
        return None
    return ETHEREAL_MESSAGE_URL.format(msgid=match.group(1))


class NotificationGateway:
    """Single shared mail transport for the process"""

    def __init__(self, settings: Optional[MailSettings] = None):
        self.settings = settings or MailSettings.from_env()
        self.transport = None
        self._setup_transport()

    def _setup_transport(self) -> None:
        if self.settings.has_smtp_credentials:
            self.transport = SmtpTransport(
                host=self.settings.host,
                port=self.settings.port,
                secure=self.settings.secure,
                user=self.settings.user,
                password=self.settings.password,
            )
            logger.info("Email service configured successfully")
        elif self.settings.resend_api_key and self.settings.from_email:
            self.transport = ResendTransport(self.settings.resend_api_key)
            logger.info("Email service configured with Resend")
        elif self.settings.resend_api_key:
            logger.warning("RESEND_API_KEY set without SMTP_FROM_EMAIL - Resend transport disabled")
        else:
            logger.warning("Email service not configured - missing environment variables")

    async def initialize(self) -> None:
        """Provision a disposable test account when no transport is configured"""
        if self.transport is not None:
            return
        try:
            await self._create_test_transport()
        except (httpx.HTTPError, AttributeError, KeyError, TypeError, ValueError, TransportUnconfigured) as e:
            logger.error(f"Failed to create test email account: {e}")

    async def _create_test_transport(self) -> None:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(
                ETHEREAL_ACCOUNT_URL,
                json={"requestor": "simulator-records-api", "version": "1.0.0"}
            )
            response.raise_for_status()
            account = response.json()

        if account.get("status") != "success":
            raise TransportUnconfigured(account.get("error") or "Test account request rejected")

        self.settings.user = account["user"]
        self.settings.password = account["pass"]
        self.transport = SmtpTransport(
            host=ETHEREAL_SMTP_HOST,
            port=ETHEREAL_SMTP_PORT,
            secure=False,
            user=account["user"],
            password=account["pass"],
        )
        logger.info(f"Test email account created: {account['user']}")

    def is_ready(self) -> bool:
        return self.transport is not None

    def _build_message(self, to: str, template: EmailTemplate) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.settings.sender
        message["To"] = to
        message["Subject"] = template.subject
        message["Message-ID"] = make_msgid()
        message.set_content(template.text)
        message.add_alternative(template.html, subtype="html")
        return message

    async def send_email(self, to: str, mail_type: str, data: Dict[str, Any]) -> EmailResult:
        """Render the template for mail_type and send exactly one email"""
        if not self.is_ready():
            return EmailResult(success=False, error=NOT_CONFIGURED_ERROR)

        try:
            mail_data = parse_mail_data(mail_type, data)
        except TypeError as e:
            logger.error(f"Invalid email data for type '{mail_type}': {e}")
            return EmailResult(success=False, error="Invalid email data: expected an object")
        except ValidationError as e:
            logger.error(f"Invalid email data for type '{mail_type}': {e}")
            return EmailResult(success=False, error=f"Invalid email data: {e.error_count()} field error(s)")

        try:
            template = render_template(mail_data)
            message = self._build_message(to, template)
            message_id, response = await self.transport.send(message)

            preview_url = None if self.settings.production else get_test_message_url(response)

            logger.info(f"Email sent to {to}: {message_id}")
            return EmailResult(success=True, message_id=message_id, preview_url=preview_url)

        except Exception as e:
            logger.error(f"Email sending failed: {e}")
            return EmailResult(success=False, error=str(e) or "Unknown error")

    async def verify_connection(self) -> bool:
        if not self.is_ready():
            return False

        try:
            await self.transport.verify()
            return True
        except Exception as e:
            logger.error(f"Email connection verification failed: {e}")
            return False
