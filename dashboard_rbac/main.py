from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from starlette.middleware.base import BaseHTTPMiddleware

from dashboard_rbac.api.v1.routes.api import router as api_router
from dashboard_rbac.api.v1.routes.auth import router as auth_router
from dashboard_rbac.api.v1.routes.user import router as user_router
from dashboard_rbac.api.v1.routes.role import router as role_router
from dashboard_rbac.api.v1.routes.permission import router as permission_router
from dashboard_rbac.api.v1.routes.access import router as access_router
from dashboard_rbac.api.v1.routes.dashboard import router as dashboard_router

from dashboard_rbac.core.config import (
    PROJECT_NAME,
    VERSION,
    DESCRIPTION,
    DEBUG,
    DOCS_URL,
    API_PREFIX,
    SESSION_COOKIE_NAME,
    HOST,
    PORT,
    RELOAD,
)
from dashboard_rbac.core.events import create_start_app_handler
from dashboard_rbac.core.exceptions import register_exception_handlers
from dashboard_rbac.core.middleware.route_guard import route_guard_middleware


def custom_openapi(app: FastAPI):
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )

    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "SessionCookie": {
            "type": "apiKey",
            "in": "cookie",
            "name": SESSION_COOKIE_NAME,
        },
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT"
        }
    }

    # Either the session cookie or a bearer token authenticates a request
    for path in openapi_schema["paths"].values():
        for operation in path.values():
            operation["security"] = [
                {"SessionCookie": []},
                {"BearerAuth": []}
            ]

    app.openapi_schema = openapi_schema
    return app.openapi_schema


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_start_app_handler(app)()
    yield


def get_application() -> FastAPI:
    app = FastAPI(
        title=PROJECT_NAME,
        debug=DEBUG,
        version=VERSION,
        description=DESCRIPTION,
        docs_url=DOCS_URL,
        lifespan=lifespan,
    )

    # Page route guard: protected pages need a session, the auth page does not
    app.add_middleware(BaseHTTPMiddleware, dispatch=route_guard_middleware)
    register_exception_handlers(app)

    # Public health endpoint
    app.include_router(api_router, prefix=API_PREFIX)

    # Authentication endpoints
    app.include_router(auth_router, prefix=f"{API_PREFIX}/auth")

    # Protected endpoints
    app.include_router(user_router, prefix=f"{API_PREFIX}/users")
    app.include_router(role_router, prefix=f"{API_PREFIX}/roles")
    app.include_router(permission_router, prefix=f"{API_PREFIX}/permissions")
    app.include_router(access_router, prefix=f"{API_PREFIX}/access")
    app.include_router(dashboard_router, prefix=f"{API_PREFIX}/dashboard")

    app.openapi = lambda: custom_openapi(app)

    return app


app = get_application()


def run() -> None:
    import uvicorn

    uvicorn.run("dashboard_rbac.main:app", host=HOST, port=PORT, reload=RELOAD)


if __name__ == "__main__":
    run()
