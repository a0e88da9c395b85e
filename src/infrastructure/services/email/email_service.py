"""Email notification sink for activation codes and OTPs.

Renders Jinja2 templates from ``EMAIL_TEMPLATES_DIR`` and delivers them with
fastapi-mail. In test mode (development and test environments) messages are
logged instead of sent; the code itself is never logged.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlencode

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from jinja2 import Environment, FileSystemLoader, TemplateError, TemplateNotFound, select_autoescape
from structlog import get_logger

from src.core.config.settings import Settings
from src.core.exceptions import EmailServiceError, TemplateRenderError
from src.core.logging import mask_email
from src.domain.interfaces.email import INotificationSink

logger = get_logger(__name__)


class EmailService(INotificationSink):
    """Sends account notifications by email.

    Attributes:
        settings: Email configuration settings
        jinja_env: Jinja2 environment for template rendering
        fastmail: FastMail instance, or ``None`` in test mode
    """

    ACTIVATION_TEMPLATE = "account_activation"
    OTP_TEMPLATE = "otp"

    def __init__(self, settings: Settings, fastmail: Optional[FastMail] = None):
        """Initialize EmailService with configuration.

        Args:
            settings: Application settings; email and code TTL values are read
            fastmail: Pre-built client; built from ``settings`` when omitted

        Raises:
            EmailServiceError: If the SMTP configuration is rejected
        """
        self.settings = settings
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(Path(settings.EMAIL_TEMPLATES_DIR))),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.fastmail = fastmail if fastmail is not None else self._build_fastmail()

    def _build_fastmail(self) -> Optional[FastMail]:
        if self.settings.EMAIL_TEST_MODE:
            return None
        try:
            config = ConnectionConfig(
                MAIL_USERNAME=self.settings.SMTP_USERNAME or "",
                MAIL_PASSWORD=self.settings.SMTP_PASSWORD.get_secret_value() if self.settings.SMTP_PASSWORD else "",
                MAIL_FROM=self.settings.FROM_EMAIL,
                MAIL_PORT=self.settings.SMTP_PORT,
                MAIL_SERVER=self.settings.SMTP_HOST,
                MAIL_FROM_NAME=self.settings.FROM_NAME,
                MAIL_STARTTLS=self.settings.SMTP_USE_TLS,
                MAIL_SSL_TLS=self.settings.SMTP_USE_SSL,
                USE_CREDENTIALS=bool(self.settings.SMTP_USERNAME and self.settings.SMTP_PASSWORD),
                VALIDATE_CERTS=True,
            )
        except ValueError as e:
            logger.error("Failed to configure FastMail", error=str(e))
            raise EmailServiceError(f"Failed to configure email service: {e}") from e
        return FastMail(config)

    def render_template(self, template_name: str, **context: Any) -> str:
        """Render an email template.

        Raises:
            TemplateRenderError: If the template is missing or fails to render
        """
        try:
            return self.jinja_env.get_template(template_name).render(
                year=datetime.now(timezone.utc).year,
                app_name=self.settings.PROJECT_NAME,
                **context,
            )
        except TemplateNotFound as e:
            logger.error("Template not found", template=template_name)
            raise TemplateRenderError(f"Template file not found: {template_name}") from e
        except TemplateError as e:
            logger.error("Template rendering failed", template=template_name, error=str(e))
            raise TemplateRenderError(f"Template rendering failed: {e}") from e

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> None:
        """Send an email with HTML and optional text content.

        Raises:
            EmailServiceError: If delivery fails
        """
        if self.fastmail is None:
            logger.info(
                "Email sent in test mode",
                to_email=mask_email(to_email),
                subject=subject,
                html_length=len(html_content),
            )
            return

        message = MessageSchema(
            subject=subject,
            recipients=[to_email],
            body=html_content,
            alternative_body=text_content,
            subtype=MessageType.html,
            multipart_subtype="alternative" if text_content else "mixed",
        )
        try:
            await self.fastmail.send_message(message)
        except Exception as e:
            logger.error("Failed to send email", to_email=mask_email(to_email), subject=subject, error=str(e))
            raise EmailServiceError(f"Failed to send email: {e}") from e

        logger.info("Email sent successfully", to_email=mask_email(to_email), subject=subject)

    async def send_activation_email(self, email: str, code: str, account_id: str) -> None:
        query = urlencode({"activation_token": code, "email": email, "id": account_id})
        context = {
            "activation_url": f"{self.settings.ACTIVATION_URL_BASE}?{query}",
            "expires_minutes": self.settings.ACTIVATION_CODE_TTL_SECONDS // 60,
        }
        await self.send_email(
            to_email=email,
            subject="Activate your account",
            html_content=self.render_template(f"{self.ACTIVATION_TEMPLATE}.html", **context),
            text_content=self.render_template(f"{self.ACTIVATION_TEMPLATE}.txt", **context),
        )

    async def send_otp_email(self, email: str, code: str) -> None:
        context = {
            "otp": code,
            "expires_minutes": self.settings.OTP_TTL_SECONDS // 60,
        }
        await self.send_email(
            to_email=email,
            subject="Your login verification code",
            html_content=self.render_template(f"{self.OTP_TEMPLATE}.html", **context),
            text_content=self.render_template(f"{self.OTP_TEMPLATE}.txt", **context),
        )
