import pytest
from datetime import datetime, timedelta, timezone
from fastapi import Depends, FastAPI, status
from httpx import AsyncClient
from httpx._transports.asgi import ASGITransport

from dashboard_rbac.api.v1.dependencies import (
    get_current_user,
    get_session_claims,
    require_all_permissions,
    require_any_permission,
    require_permission,
)
from dashboard_rbac.api.v1.schemas.session import SessionPrincipal
from dashboard_rbac.api.v1.security.jwt import SessionTokenCodec
from dashboard_rbac.core.config import ALGORITHM, SECRET_KEY
from dashboard_rbac.core.db.session import get_db
from helpers import auth_headers, make_user


@pytest.fixture
def app():
    app = FastAPI()

    @app.get("/whoami")
    async def whoami(claims=Depends(get_session_claims)):
        return {"id": claims.id, "email": claims.email}

    @app.get("/me")
    async def me(user=Depends(get_current_user)):
        return {"id": user.id, "role": user.role}

    @app.get("/reports")
    async def reports(user=Depends(require_permission("view_reports"))):
        return {"id": user.id}

    @app.get("/any")
    async def any_of(user=Depends(require_any_permission("manage_roles", "edit_settings"))):
        return {"id": user.id}

    @app.get("/all")
    async def all_of(user=Depends(require_all_permissions("view_dashboard", "view_reports"))):
        return {"id": user.id}

    @app.get("/none-required")
    async def none_required(user=Depends(require_all_permissions())):
        return {"id": user.id}

    return app


@pytest.fixture
async def client(app, session_maker):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def member(seeded_session):
    return await make_user(seeded_session, "member@example.com", role="user")


@pytest.fixture
async def manager(seeded_session):
    return await make_user(seeded_session, "manager@example.com", role="manager")


@pytest.mark.asyncio
async def test_missing_token(client):
    response = await client.get("/whoami")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_bearer_token(client, member):
    response = await client.get("/whoami", headers=auth_headers(member))
    assert response.json() == {"id": member.id, "email": "member@example.com"}


@pytest.mark.asyncio
async def test_cookie_preferred_over_bearer(client, member, manager):
    client.cookies.set("token", auth_headers(manager)["Authorization"].split(" ", 1)[1])
    response = await client.get("/whoami", headers=auth_headers(member))
    assert response.json()["id"] == manager.id


@pytest.mark.asyncio
async def test_invalid_cookie_falls_back_to_bearer(client, member):
    client.cookies.set("token", "not-a-session-token")
    response = await client.get("/whoami", headers=auth_headers(member))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["id"] == member.id


@pytest.mark.asyncio
async def test_expired_cookie_falls_back_to_bearer(client, member, manager):
    def two_days_ago():
        return datetime.now(timezone.utc) - timedelta(days=2)

    stale_codec = SessionTokenCodec(str(SECRET_KEY), ALGORITHM, clock=two_days_ago)
    client.cookies.set("token", stale_codec.issue(SessionPrincipal.model_validate(manager)))

    response = await client.get("/whoami", headers=auth_headers(member))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["id"] == member.id


@pytest.mark.asyncio
async def test_invalid_cookie_without_bearer(client):
    client.cookies.set("token", "not-a-session-token")
    response = await client.get("/whoami")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_require_permission(client, member, manager):
    assert (await client.get("/reports", headers=auth_headers(manager))).status_code == status.HTTP_200_OK

    response = await client.get("/reports", headers=auth_headers(member))
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json() == {"detail": "Permission denied"}


@pytest.mark.asyncio
async def test_require_any_permission(client, member):
    assert (await client.get("/any", headers=auth_headers(member))).status_code == status.HTTP_200_OK


@pytest.mark.asyncio
async def test_require_all_permissions(client, member, manager):
    assert (await client.get("/all", headers=auth_headers(manager))).status_code == status.HTTP_200_OK
    assert (await client.get("/all", headers=auth_headers(member))).status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
async def test_empty_requirement_denies(client, manager):
    response = await client.get("/none-required", headers=auth_headers(manager))
    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
async def test_user_without_role_is_denied(client, seeded_session):
    nobody = await make_user(seeded_session, "norole@example.com", role=None)
    headers = auth_headers(nobody)

    assert (await client.get("/me", headers=headers)).json() == {"id": nobody.id, "role": None}
    assert (await client.get("/any", headers=headers)).status_code == status.HTTP_403_FORBIDDEN
