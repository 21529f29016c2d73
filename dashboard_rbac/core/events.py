from typing import Callable

from fastapi import FastAPI
from loguru import logger

from dashboard_rbac.api.v1.models import Permission, Role, RolePermission, User  # noqa: F401  registers tables
from dashboard_rbac.api.v1.services.seeder import seed_defaults
from dashboard_rbac.core.config import CREATE_TABLES_ON_STARTUP, SEED_ON_STARTUP
from dashboard_rbac.core.db import Base
from dashboard_rbac.core.db.session import AsyncSessionLocal, engine


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_default_access() -> None:
    """
    Make sure the default roles and permissions exist before serving requests.
    """
    async with AsyncSessionLocal() as session:
        report = await seed_defaults(session)
    if not report.changed:
        logger.debug("Default roles and permissions already present")


def create_start_app_handler(app: FastAPI) -> Callable:
    async def start_app() -> None:
        if CREATE_TABLES_ON_STARTUP:
            await create_tables()
        if SEED_ON_STARTUP:
            await seed_default_access()

    return start_app
