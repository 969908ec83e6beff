"""
Seed the system roles, the default location, the bootstrap administrator
and the default menu.

Usage:
    python -m scripts.seed_rbac
    python -m scripts.seed_rbac --create-tables --no-admin
"""
import argparse
import asyncio

from scoped_rbac.application.services.rbac_initialization_service import RbacInitializationService
from scoped_rbac.infrastructure.persistence.database import Base, engine, session_scope
from scoped_rbac.infrastructure.persistence.repositories import LocationRepository, UserRepository
from scoped_rbac.presentation.api.dependencies import (build_ledger, build_menu_service,
                                                     build_registry)
from scoped_rbac.shared.telemetry.logging import get_logger, setup_logging

# Register every model on Base.metadata
import scoped_rbac.infrastructure.persistence.models  # noqa: F401

logger = get_logger(__name__)


async def seed(create_tables: bool, with_admin: bool) -> None:
    if create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async with session_scope() as session:
        service = RbacInitializationService(
            registry=build_registry(session),
            ledger=build_ledger(session),
            location_repo=LocationRepository(session),
            user_repo=UserRepository(session),
            menu_service=build_menu_service(session),
        )
        result = await service.initialize(with_admin=with_admin)

    logger.info(
        "RBAC seeding complete: %d roles created, %d updated, admin assigned=%s, %d menu items",
        result["roles_created"],
        result["roles_updated"],
        result["admin_role_assigned"],
        result["menu_items_created"],
    )
    await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed system roles and the bootstrap admin")
    parser.add_argument("--create-tables", action="store_true", help="Create missing tables first")
    parser.add_argument("--no-admin", action="store_true", help="Skip the bootstrap admin user")
    args = parser.parse_args()

    setup_logging()
    asyncio.run(seed(create_tables=args.create_tables, with_admin=not args.no_admin))


if __name__ == "__main__":
    main()
