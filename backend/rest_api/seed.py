"""
Seed data for development.
Creates the roles every deployment needs and one super admin user.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Role, User
from shared.config.constants import Roles
from shared.config.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SUPER_ADMIN_USERNAME = "superadmin"


def seed_roles(db: Session) -> dict[str, int]:
    """
    Insert missing roles.
    Idempotent: existing roles are left untouched.

    Returns:
        Role name to role id.
    """
    existing = {role.name: role for role in db.scalars(select(Role))}
    for name in Roles.ALL:
        if name not in existing:
            role = Role(name=name)
            db.add(role)
            existing[name] = role
    db.flush()
    return {name: role.id for name, role in existing.items()}


def seed(db: Session) -> None:
    """Seed roles and a super admin user if none exists."""
    role_ids = seed_roles(db)

    super_admin = db.scalar(
        select(User).where(User.role_id == role_ids[Roles.SUPER_ADMIN]).limit(1)
    )
    if super_admin is None:
        db.add(
            User(
                name="Super Admin",
                username=DEFAULT_SUPER_ADMIN_USERNAME,
                role_id=role_ids[Roles.SUPER_ADMIN],
            )
        )
        logger.info("Super admin user created", username=DEFAULT_SUPER_ADMIN_USERNAME)

    db.commit()
    logger.info("Seed completed", roles=len(role_ids))
