from unittest.mock import AsyncMock

import pytest

from src.core.exceptions import MissingAccountIdError, ServiceUnavailableError
from src.domain.entities.account import Role
from src.domain.services.authentication.authentication_service import wait_for_pending_notifications
from src.domain.value_objects.account import Registration
from src.infrastructure.dependency_injection.auth_dependencies import get_authentication_service

REGISTER_URL = "/api/v1/register"
LOGIN_URL = "/api/v1/login"


async def _create_account(credential_store, token_service, enabled=True, role=Role.USER, with_token=True):
    account_id = await credential_store.create_account(
        Registration(
            username="alice",
            email="alice@example.com",
            password_hash=await token_service.hash_password("s3cret!"),
            role=role,
        )
    )
    credential_store.accounts[account_id].is_enabled = enabled
    if with_token:
        credential_store.tokens[account_id] = token_service.generate_session_token(account_id, role)
    return account_id


@pytest.mark.asyncio
async def test_register_success(async_client, credential_store, notification_sink):
    response = await async_client.post(
        REGISTER_URL,
        json={"username": "alice", "email": "alice@example.com", "password": "s3cret!"},
    )
    await wait_for_pending_notifications()

    assert response.status_code == 200
    assert response.json()["message"] == "Account created successfully"
    assert len(credential_store.accounts) == 1
    assert notification_sink.last("activation").email == "alice@example.com"


@pytest.mark.asyncio
async def test_register_duplicate_email(async_client):
    payload = {"username": "alice", "email": "alice@example.com", "password": "s3cret!"}
    await async_client.post(REGISTER_URL, json=payload)

    response = await async_client.post(REGISTER_URL, json={**payload, "username": "alice2"})

    assert response.status_code == 409
    assert response.json() == {"detail": "Email already exists"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"username": "alice", "email": "not-an-email", "password": "s3cret!"},
        {"username": "al", "email": "alice@example.com", "password": "s3cret!"},
        {"username": "alice", "email": "alice@example.com"},
        {"username": "alice", "email": "alice@example.com", "password": "s3cret!", "role": "root"},
    ],
)
async def test_register_invalid_payload(async_client, payload):
    response = await async_client.post(REGISTER_URL, json=payload)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_login_with_live_token(async_client, credential_store, token_service):
    account_id = await _create_account(credential_store, token_service)

    response = await async_client.post(LOGIN_URL, json={"username": "alice", "password": "s3cret!"})

    assert response.status_code == 200
    assert response.json() == {"user_id": account_id, "token": credential_store.tokens[account_id]}


@pytest.mark.asyncio
async def test_login_requires_otp(async_client, credential_store, token_service, notification_sink):
    account_id = await _create_account(credential_store, token_service, with_token=False)

    response = await async_client.post(LOGIN_URL, json={"username": "alice@example.com", "password": "s3cret!"})
    await wait_for_pending_notifications()

    assert response.status_code == 489
    assert response.json() == {"user_id": account_id, "username": "alice@example.com"}
    assert notification_sink.last("otp").email == "alice@example.com"


@pytest.mark.asyncio
async def test_login_disabled_account(async_client, credential_store, token_service, notification_sink):
    await _create_account(credential_store, token_service, enabled=False, with_token=False)

    response = await async_client.post(LOGIN_URL, json={"username": "alice", "password": "s3cret!"})
    await wait_for_pending_notifications()

    assert response.status_code == 423
    assert notification_sink.last("activation").email == "alice@example.com"


@pytest.mark.asyncio
async def test_login_unknown_account(async_client):
    response = await async_client.post(LOGIN_URL, json={"username": "ghost", "password": "s3cret!"})

    assert response.status_code == 404
    assert response.json() == {"detail": "User not found"}


@pytest.mark.asyncio
async def test_login_wrong_password(async_client, credential_store, token_service):
    await _create_account(credential_store, token_service)

    response = await async_client.post(LOGIN_URL, json={"username": "alice", "password": "wrong"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_missing_field(async_client):
    response = await async_client.post(LOGIN_URL, json={"username": "alice"})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_activate_email_returns_token(async_client, credential_store, secret_store, token_service):
    account_id = await _create_account(credential_store, token_service, enabled=False, with_token=False)
    await secret_store.save_activation_code("alice@example.com", "c0ffee")

    response = await async_client.get(
        "/api/v1/activate_email",
        params={"activation_token": "c0ffee", "email": "alice@example.com", "id": account_id},
    )

    assert response.status_code == 200
    assert response.json()["jwt_token"] == credential_store.tokens[account_id]
    assert credential_store.accounts[account_id].is_enabled is True


@pytest.mark.asyncio
async def test_activate_email_wrong_code(async_client, secret_store):
    await secret_store.save_activation_code("alice@example.com", "c0ffee")

    response = await async_client.get(
        "/api/v1/activate_email",
        params={"activation_token": "deadbeef", "email": "alice@example.com", "id": "acc-1"},
    )

    assert response.status_code == 410


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path,params",
    [
        ("/api/v1/activate_email", {"email": "alice@example.com", "id": "acc-1"}),
        ("/api/v1/validate_otp", {"otp": "123456", "id": "acc-1"}),
        ("/api/v1/resend_account_activation", {"email": "alice@example.com"}),
        ("/api/v1/resend_otp", {}),
    ],
)
async def test_missing_query_parameters(async_client, path, params):
    response = await async_client.get(path, params=params)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_validate_otp_returns_new_token(async_client, credential_store, secret_store, token_service):
    account_id = await _create_account(credential_store, token_service)
    await secret_store.save_otp("alice@example.com", "123456")

    response = await async_client.get(
        "/api/v1/validate_otp",
        params={"otp": "123456", "username": "alice@example.com", "id": account_id},
    )

    assert response.status_code == 200
    new_token = response.json()["jwt_token"]
    assert credential_store.tokens[account_id] == new_token


@pytest.mark.asyncio
async def test_resend_otp(async_client, notification_sink):
    response = await async_client.get("/api/v1/resend_otp", params={"email": "alice@example.com"})
    await wait_for_pending_notifications()

    assert response.status_code == 200
    assert notification_sink.last("otp").email == "alice@example.com"


@pytest.mark.asyncio
async def test_resend_otp_store_unavailable(async_client, secret_store):
    secret_store.available = False

    response = await async_client.get("/api/v1/resend_otp", params={"email": "alice@example.com"})

    assert response.status_code == 503


@pytest.mark.asyncio
async def test_resend_account_activation_answers_locked(async_client, notification_sink):
    response = await async_client.get(
        "/api/v1/resend_account_activation",
        params={"email": "alice@example.com", "id": "acc-1"},
    )
    await wait_for_pending_notifications()

    assert response.status_code == 423
    assert notification_sink.last("activation").account_id == "acc-1"


@pytest.mark.asyncio
async def test_logout_revokes_token(async_client, credential_store, token_service):
    account_id = await _create_account(credential_store, token_service)
    token = credential_store.tokens[account_id]
    headers = {"Authorization": f"Bearer {token}"}

    first = await async_client.post("/api/v1/logout", headers=headers)
    second = await async_client.post("/api/v1/logout", headers=headers)

    assert first.status_code == 200
    assert first.json()["message"] == "Logged out successfully"
    assert second.status_code == 403
    assert account_id not in credential_store.tokens


@pytest.mark.asyncio
async def test_logout_without_token(async_client):
    response = await async_client.post("/api/v1/logout")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_missing_account_id(app, async_client, credential_store, token_service):
    await _create_account(credential_store, token_service)
    token = next(iter(credential_store.tokens.values()))
    auth_service = AsyncMock()

    auth_service.logout.side_effect = MissingAccountIdError()
    app.dependency_overrides[get_authentication_service] = lambda: auth_service

    response = await async_client.post("/api/v1/logout", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 418


@pytest.mark.asyncio
async def test_secret_store_outage_during_login(app, async_client):
    auth_service = AsyncMock()
    auth_service.login.side_effect = ServiceUnavailableError()
    app.dependency_overrides[get_authentication_service] = lambda: auth_service

    response = await async_client.post(LOGIN_URL, json={"username": "alice", "password": "s3cret!"})

    assert response.status_code == 503
