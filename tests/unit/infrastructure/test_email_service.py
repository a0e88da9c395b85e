from unittest.mock import AsyncMock
from urllib.parse import parse_qs, urlparse

import pytest

from src.core.config.settings import settings
from src.core.exceptions import EmailServiceError, TemplateRenderError
from src.infrastructure.services.email.email_service import EmailService


@pytest.fixture
def fastmail():
    client = AsyncMock()
    client.send_message = AsyncMock()
    return client


@pytest.fixture
def email_service(fastmail):
    return EmailService(settings, fastmail=fastmail)


def test_test_mode_builds_no_smtp_client():
    service = EmailService(settings)

    assert settings.EMAIL_TEST_MODE is True
    assert service.fastmail is None


@pytest.mark.asyncio
async def test_test_mode_send_is_a_no_op():
    service = EmailService(settings)

    await service.send_otp_email("alice@example.com", "123456")


@pytest.mark.asyncio
async def test_activation_email_carries_link_with_code(email_service, fastmail):
    await email_service.send_activation_email("alice@example.com", "c0ffee", "acc-1")

    message = fastmail.send_message.await_args.args[0]
    assert "alice@example.com" in str(message.recipients[0])
    assert message.subject == "Activate your account"

    link = next(line for line in message.alternative_body.splitlines() if line.startswith("http"))
    query = parse_qs(urlparse(link).query)
    assert link.startswith(settings.ACTIVATION_URL_BASE)
    assert query == {"activation_token": ["c0ffee"], "email": ["alice@example.com"], "id": ["acc-1"]}


@pytest.mark.asyncio
async def test_otp_email_carries_code(email_service, fastmail):
    await email_service.send_otp_email("alice@example.com", "654321")

    message = fastmail.send_message.await_args.args[0]
    assert "654321" in message.body
    assert "654321" in message.alternative_body


@pytest.mark.asyncio
async def test_delivery_failure_raises_email_service_error(email_service, fastmail):
    fastmail.send_message.side_effect = ConnectionError("SMTP down")

    with pytest.raises(EmailServiceError):
        await email_service.send_otp_email("alice@example.com", "654321")


def test_missing_template_raises(email_service):
    with pytest.raises(TemplateRenderError):
        email_service.render_template("does_not_exist.html")


def test_html_template_escapes_context(email_service):
    html = email_service.render_template("otp.html", otp="<b>1</b>", expires_minutes=3)

    assert "<b>1</b>" not in html
    assert "&lt;b&gt;1&lt;/b&gt;" in html


def test_templates_render_outside_the_project_root(monkeypatch, tmp_path, fastmail):
    monkeypatch.chdir(tmp_path)
    service = EmailService(settings, fastmail=fastmail)

    text = service.render_template("otp.txt", otp="654321", expires_minutes=3)

    assert "654321" in text


@pytest.mark.asyncio
async def test_email_states_code_lifetime_from_settings(email_service, fastmail, monkeypatch):
    monkeypatch.setattr(settings, "OTP_TTL_SECONDS", 300)

    await email_service.send_otp_email("alice@example.com", "654321")

    assert "expires in 5 minutes" in fastmail.send_message.await_args.args[0].alternative_body
