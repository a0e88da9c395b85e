from unittest.mock import AsyncMock

import pytest

from src.core.exceptions import (
    AccountNotEnabledError,
    AccountNotFoundError,
    CodeExpiredError,
    DatabaseError,
    EmailAlreadyRegisteredError,
    EmailServiceError,
    InvalidCredentialsError,
    MissingAccountIdError,
    ServiceUnavailableError,
)
from src.domain.entities.account import Role
from src.domain.services.authentication.authentication_service import (
    AuthenticationService,
    wait_for_pending_notifications,
)
from src.domain.value_objects.account import Registration
from src.domain.value_objects.session import OtpChallenge, SessionGrant


async def _register(auth_service, username="alice", email="alice@example.com", password="s3cret!", role=Role.USER):
    await auth_service.register(username, email, password, role)
    await wait_for_pending_notifications()


async def _register_and_activate(auth_service, credential_store, notification_sink, **kwargs):
    await _register(auth_service, **kwargs)
    sent = notification_sink.last("activation")
    token = await auth_service.validate_email(sent.code, sent.email, sent.account_id)
    return sent.account_id, token


@pytest.mark.asyncio
async def test_register_creates_disabled_account_and_emails_code(auth_service, credential_store, notification_sink, secret_store):
    # Act
    await _register(auth_service, email="Alice@Example.com ")

    # Assert
    account = next(iter(credential_store.accounts.values()))
    assert account.email == "alice@example.com"
    assert account.is_enabled is False
    assert account.password_hash != "s3cret!"
    sent = notification_sink.last("activation")
    assert sent.email == "alice@example.com"
    assert sent.account_id == account.id
    assert await secret_store.get_activation_code("alice@example.com") == sent.code


@pytest.mark.asyncio
async def test_register_rejects_existing_email(auth_service, notification_sink):
    await _register(auth_service)

    with pytest.raises(EmailAlreadyRegisteredError):
        await auth_service.register("alice2", "ALICE@example.com", "other", Role.USER)

    assert len(notification_sink.sent) == 1


@pytest.mark.asyncio
async def test_register_keeps_requested_role(auth_service, credential_store):
    await _register(auth_service, role=Role.TEACHER)

    account = next(iter(credential_store.accounts.values()))
    assert account.role is Role.TEACHER


@pytest.mark.asyncio
async def test_login_unknown_account(auth_service):
    with pytest.raises(AccountNotFoundError):
        await auth_service.login("ghost", "whatever")


@pytest.mark.asyncio
async def test_login_wrong_password(auth_service, notification_sink):
    await _register(auth_service)

    with pytest.raises(InvalidCredentialsError):
        await auth_service.login("alice", "wrong")

    assert len(notification_sink.sent) == 1


@pytest.mark.asyncio
async def test_login_disabled_account_resends_activation(auth_service, notification_sink, secret_store):
    await _register(auth_service)
    first_code = notification_sink.last("activation").code

    with pytest.raises(AccountNotEnabledError):
        await auth_service.login("alice", "s3cret!")
    await wait_for_pending_notifications()

    second = notification_sink.last("activation")
    assert second.code != first_code
    assert await secret_store.get_activation_code("alice@example.com") == second.code


@pytest.mark.asyncio
async def test_validate_email_enables_account_and_stores_token(auth_service, credential_store, notification_sink, secret_store, token_service):
    account_id, token = await _register_and_activate(auth_service, credential_store, notification_sink)

    assert credential_store.accounts[account_id].is_enabled is True
    assert credential_store.tokens[account_id] == token
    assert token_service.decode_session_token(token).account_id == account_id
    assert not await token_service.check_activation_code("alice@example.com", notification_sink.last("activation").code)


@pytest.mark.asyncio
async def test_validate_email_with_wrong_code(auth_service, credential_store, notification_sink):
    await _register(auth_service)
    sent = notification_sink.last("activation")

    with pytest.raises(CodeExpiredError):
        await auth_service.validate_email("wrong", sent.email, sent.account_id)

    assert credential_store.accounts[sent.account_id].is_enabled is False


@pytest.mark.asyncio
async def test_validate_email_after_ttl(auth_service, notification_sink, secret_store):
    await _register(auth_service)
    sent = notification_sink.last("activation")
    secret_store.advance(901)

    with pytest.raises(CodeExpiredError):
        await auth_service.validate_email(sent.code, sent.email, sent.account_id)


@pytest.mark.asyncio
async def test_token_role_matches_account_role(auth_service, credential_store, notification_sink, token_service):
    _, token = await _register_and_activate(auth_service, credential_store, notification_sink, role=Role.ADMIN)

    assert token_service.decode_session_token(token).role is Role.ADMIN


@pytest.mark.asyncio
async def test_login_with_live_token_returns_it_unchanged(auth_service, credential_store, notification_sink):
    account_id, token = await _register_and_activate(auth_service, credential_store, notification_sink)
    sent_before = len(notification_sink.sent)

    result = await auth_service.login("alice@example.com", "s3cret!")

    assert result == SessionGrant(account_id=account_id, token=token)
    assert credential_store.tokens[account_id] == token
    assert len(notification_sink.sent) == sent_before


@pytest.mark.asyncio
async def test_login_without_token_issues_otp(auth_service, credential_store, notification_sink, secret_store):
    account_id, _ = await _register_and_activate(auth_service, credential_store, notification_sink)
    await auth_service.logout(account_id)

    result = await auth_service.login("alice", "s3cret!")
    await wait_for_pending_notifications()

    assert result == OtpChallenge(account_id=account_id, email="alice@example.com")
    otp = notification_sink.last("otp")
    assert otp.email == "alice@example.com"
    assert await secret_store.get_otp("alice@example.com") == otp.code


@pytest.mark.asyncio
async def test_login_with_expired_token_issues_otp(auth_service, credential_store, notification_sink):
    account_id, _ = await _register_and_activate(auth_service, credential_store, notification_sink)
    credential_store.tokens[account_id] = "expired-or-garbage"

    result = await auth_service.login("alice", "s3cret!")
    await wait_for_pending_notifications()

    assert isinstance(result, OtpChallenge)


@pytest.mark.asyncio
async def test_validate_otp_replaces_token(auth_service, credential_store, notification_sink, secret_store):
    account_id, old_token = await _register_and_activate(auth_service, credential_store, notification_sink)
    await auth_service.logout(account_id)
    await auth_service.login("alice", "s3cret!")
    await wait_for_pending_notifications()
    otp = notification_sink.last("otp").code

    new_token = await auth_service.validate_otp(otp, "alice@example.com", account_id)

    assert credential_store.tokens[account_id] == new_token
    with pytest.raises(CodeExpiredError):
        await auth_service.validate_otp(otp, "alice@example.com", account_id)


@pytest.mark.asyncio
async def test_validate_otp_wrong_code(auth_service):
    with pytest.raises(CodeExpiredError):
        await auth_service.validate_otp("000000", "alice@example.com", "acc-1")


@pytest.mark.asyncio
async def test_validate_otp_rejects_code_sent_to_another_address(auth_service, credential_store, notification_sink):
    victim_id, victim_token = await _register_and_activate(auth_service, credential_store, notification_sink)
    await auth_service.resend_otp("mallory@example.com")
    await wait_for_pending_notifications()
    otp = notification_sink.last("otp")

    with pytest.raises(CodeExpiredError):
        await auth_service.validate_otp(otp.code, otp.email, victim_id)

    assert credential_store.tokens[victim_id] == victim_token


@pytest.mark.asyncio
async def test_validate_email_rejects_code_sent_to_another_address(auth_service, credential_store, notification_sink):
    await _register(auth_service)
    victim_id = notification_sink.last("activation").account_id
    await auth_service.register("mallory", "mallory@example.com", "s3cret!", Role.USER)
    await wait_for_pending_notifications()
    own_code = notification_sink.last("activation")

    with pytest.raises(CodeExpiredError):
        await auth_service.validate_email(own_code.code, own_code.email, victim_id)

    assert credential_store.accounts[victim_id].is_enabled is False
    assert victim_id not in credential_store.tokens


@pytest.mark.asyncio
async def test_validate_otp_for_unknown_account(auth_service, secret_store):
    await secret_store.save_otp("alice@example.com", "123456")

    with pytest.raises(CodeExpiredError):
        await auth_service.validate_otp("123456", "alice@example.com", "acc-1")


@pytest.mark.asyncio
async def test_validate_otp_store_failure(auth_service, credential_store, notification_sink, secret_store):
    account_id, token = await _register_and_activate(auth_service, credential_store, notification_sink)
    await secret_store.save_otp("alice@example.com", "123456")
    credential_store.fail_replace = True

    with pytest.raises(DatabaseError):
        await auth_service.validate_otp("123456", "alice@example.com", account_id)

    assert credential_store.tokens[account_id] == token


@pytest.mark.asyncio
async def test_used_code_left_to_expire_when_delete_fails(token_service, credential_store, notification_sink):
    secret_store = AsyncMock()
    secret_store.get_otp.return_value = "123456"
    secret_store.delete_otp.side_effect = ServiceUnavailableError()
    account_id = await credential_store.create_account(
        Registration(username="alice", email="alice@example.com", password_hash="x", role=Role.USER)
    )
    service = AuthenticationService(credential_store, secret_store, token_service, notification_sink)
    token_service.secret_store = secret_store

    token = await service.validate_otp("123456", "alice@example.com", account_id)

    assert credential_store.tokens[account_id] == token


@pytest.mark.asyncio
async def test_resend_otp_invalidates_previous(auth_service, notification_sink, token_service):
    await auth_service.resend_otp("alice@example.com")
    await auth_service.resend_otp("alice@example.com")
    await wait_for_pending_notifications()

    first, second = [message.code for message in notification_sink.sent if message.kind == "otp"]
    if first != second:
        assert not await token_service.check_otp("alice@example.com", first)
    assert await token_service.check_otp("alice@example.com", second)


@pytest.mark.asyncio
async def test_resend_account_activation_always_reports_not_enabled(auth_service, notification_sink):
    with pytest.raises(AccountNotEnabledError):
        await auth_service.resend_account_activation("acc-1", "alice@example.com")
    await wait_for_pending_notifications()

    sent = notification_sink.last("activation")
    assert sent.account_id == "acc-1"


@pytest.mark.asyncio
async def test_resend_propagates_secret_store_outage(auth_service, secret_store):
    secret_store.available = False

    with pytest.raises(ServiceUnavailableError):
        await auth_service.resend_otp("alice@example.com")


@pytest.mark.asyncio
async def test_logout_is_idempotent(auth_service, credential_store, notification_sink):
    account_id, _ = await _register_and_activate(auth_service, credential_store, notification_sink)

    await auth_service.logout(account_id)
    await auth_service.logout(account_id)

    assert account_id not in credential_store.tokens


@pytest.mark.asyncio
@pytest.mark.parametrize("account_id", ["", None])
async def test_logout_requires_account_id(auth_service, account_id):
    with pytest.raises(MissingAccountIdError):
        await auth_service.logout(account_id)


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_registration(auth_service, credential_store, notification_sink):
    notification_sink.fail_with = lambda: EmailServiceError("SMTP down")

    await _register(auth_service)

    assert len(credential_store.accounts) == 1
    assert notification_sink.sent == []


@pytest.mark.asyncio
async def test_login_uses_store_order(token_service):
    # Arrange
    credential_store = AsyncMock()
    credential_store.find_credentials_by_identifier.return_value = None
    service = AuthenticationService(credential_store, AsyncMock(), token_service, AsyncMock())

    # Act
    with pytest.raises(AccountNotFoundError):
        await service.login("bob", "pw")

    # Assert
    credential_store.find_credentials_by_identifier.assert_awaited_once_with("bob")
    credential_store.replace_token.assert_not_awaited()
