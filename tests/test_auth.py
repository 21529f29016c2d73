import pytest
from fastapi import HTTPException, status

from dashboard_rbac.api.v1.schemas.login import SignupRequest
from dashboard_rbac.api.v1.services.auth import INVALID_CREDENTIALS, AuthService
from dashboard_rbac.api.v1.services.user import UserService
from helpers import STRONG_PASSWORD, auth_headers, make_user


@pytest.fixture
async def member(seeded_session):
    return await make_user(seeded_session, "member@example.com", role="user", name="Member")


# --- AuthService ---

def test_auth_service_requires_session():
    with pytest.raises(ValueError):
        AuthService(db=None)


@pytest.mark.asyncio
async def test_signup_creates_active_user(seeded_session):
    user = await AuthService(seeded_session).signup(
        SignupRequest(email="Linus@Example.com", name="Linus", password=STRONG_PASSWORD)
    )
    assert user.email == "linus@example.com"
    assert user.role == "user"
    assert user.status == "active"


@pytest.mark.asyncio
async def test_authenticate_success(seeded_session, member):
    user = await AuthService(seeded_session).authenticate("MEMBER@example.com", STRONG_PASSWORD)
    assert user.id == member.id


@pytest.mark.asyncio
async def test_authenticate_errors_do_not_reveal_which_part_failed(seeded_session, member):
    service = AuthService(seeded_session)

    with pytest.raises(HTTPException) as unknown:
        await service.authenticate("nobody@example.com", STRONG_PASSWORD)
    with pytest.raises(HTTPException) as wrong:
        await service.authenticate("member@example.com", "Wr0ng!Pass")

    assert unknown.value.status_code == wrong.value.status_code == status.HTTP_401_UNAUTHORIZED
    assert unknown.value.detail == wrong.value.detail == INVALID_CREDENTIALS


@pytest.mark.asyncio
async def test_authenticate_inactive_user(seeded_session):
    await make_user(seeded_session, "idle@example.com", status="inactive")
    with pytest.raises(HTTPException) as exc:
        await AuthService(seeded_session).authenticate("idle@example.com", STRONG_PASSWORD)
    assert exc.value.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
async def test_token_response_round_trips(seeded_session, member):
    service = AuthService(seeded_session)
    token_response = service.create_token_response(member)

    claims = service.codec.verify(token_response.access_token)
    assert token_response.token_type == "bearer"
    assert claims.id == member.id
    assert claims.role == "user"
    assert claims.expires_at == token_response.expires_at


# --- Routes ---

@pytest.mark.asyncio
async def test_signup_route(async_client, seeded_session):
    response = await async_client.post(
        "/api/v1/auth/signup",
        json={"email": "new@example.com", "name": "New", "password": STRONG_PASSWORD},
    )
    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["email"] == "new@example.com"
    assert body["role"] == "user"
    assert "password" not in body


@pytest.mark.asyncio
async def test_signup_weak_password(async_client, seeded_session):
    response = await async_client.post(
        "/api/v1/auth/signup", json={"email": "new@example.com", "name": "New", "password": "password"}
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_login_sets_session_cookie(async_client, member):
    response = await async_client.post(
        "/api/v1/auth/login", json={"email": "member@example.com", "password": STRONG_PASSWORD}
    )
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["token_type"] == "bearer"

    cookie = response.headers["set-cookie"].lower()
    assert cookie.startswith(f"token={body['access_token']}".lower())
    assert "httponly" in cookie
    assert "samesite=strict" in cookie

    # The cookie alone authenticates follow-up requests
    response = await async_client.get("/api/v1/auth/session")
    assert response.status_code == status.HTTP_200_OK
    claims = response.json()
    assert claims["id"] == member.id
    assert claims["email"] == "member@example.com"
    assert claims["role"] == "user"


@pytest.mark.asyncio
async def test_login_failures_are_generic(async_client, member):
    unknown = await async_client.post(
        "/api/v1/auth/login", json={"email": "nobody@example.com", "password": STRONG_PASSWORD}
    )
    wrong = await async_client.post(
        "/api/v1/auth/login", json={"email": "member@example.com", "password": "Wr0ng!Pass"}
    )
    assert unknown.status_code == wrong.status_code == status.HTTP_401_UNAUTHORIZED
    assert unknown.json() == wrong.json() == {"detail": INVALID_CREDENTIALS}
    assert "set-cookie" not in wrong.headers


@pytest.mark.asyncio
async def test_logout_clears_cookie(async_client, member):
    await async_client.post(
        "/api/v1/auth/login", json={"email": "member@example.com", "password": STRONG_PASSWORD}
    )
    response = await async_client.post("/api/v1/auth/logout")
    assert response.status_code == status.HTTP_200_OK
    assert "max-age=0" in response.headers["set-cookie"].lower()

    response = await async_client.get("/api/v1/auth/session")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_logout_without_session(async_client):
    response = await async_client.post("/api/v1/auth/logout")
    assert response.status_code == status.HTTP_200_OK


@pytest.mark.asyncio
async def test_session_requires_token(async_client):
    response = await async_client.get("/api/v1/auth/session")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

    response = await async_client.get("/api/v1/auth/session", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_deactivated_user_loses_access(async_client, seeded_session, member):
    headers = auth_headers(member)
    assert (await async_client.get("/api/v1/users/me", headers=headers)).status_code == status.HTTP_200_OK

    await UserService.change_status(seeded_session, member.id, "inactive")

    response = await async_client.get("/api/v1/users/me", headers=headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
async def test_permissions_follow_current_role_not_token(async_client, seeded_session, member):
    headers = auth_headers(member)
    response = await async_client.get("/api/v1/access/me", headers=headers)
    assert response.json()["role"] == "user"

    await UserService.change_role(seeded_session, member.id, "manager")

    response = await async_client.get("/api/v1/access/me", headers=headers)
    assert response.json()["role"] == "manager"
    assert "manage_users" in response.json()["permissions"]


@pytest.mark.asyncio
async def test_deleted_user_token_rejected(async_client, seeded_session, member):
    headers = auth_headers(member)
    await seeded_session.delete(member)
    await seeded_session.commit()

    response = await async_client.get("/api/v1/users/me", headers=headers)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
