from loguru import logger
from starlette.responses import RedirectResponse

from dashboard_rbac.api.v1.security.guard import guard_route, redirect_target
from dashboard_rbac.core.config import SESSION_COOKIE_NAME


async def route_guard_middleware(request, call_next):
    decision = guard_route(request.url.path, request.cookies.get(SESSION_COOKIE_NAME))
    target = redirect_target(decision)
    if target is not None:
        logger.debug(f"Route guard redirecting {request.url.path} -> {target}")
        return RedirectResponse(url=target, status_code=307)
    return await call_next(request)
