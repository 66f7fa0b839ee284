"""Database seeding helpers."""

import logging

from sqlalchemy.orm import Session

from bakery.core.config import settings
from bakery.core.security import get_password_hash
from bakery.services.user_service import create_user, get_user_by_username

logger = logging.getLogger(__name__)


def ensure_admin_user(session: Session) -> bool:
    """Ensure a default admin user exists in development only.

    Returns whether an admin with the configured username is present afterwards.
    """
    existing_user = get_user_by_username(db=session, username=settings.admin_username)
    if existing_user is not None:
        return True
    if settings.app_env != "dev":
        return False

    try:
        hashed_password = get_password_hash(settings.admin_password)
    except ValueError as exc:
        logger.warning("[BOOTSTRAP] Skipping admin seed: %s", exc)
        return False

    create_user(
        db=session,
        username=settings.admin_username,
        email=settings.admin_email,
        hashed_password=hashed_password,
        role="ADMIN",
    )
    logger.info("[BOOTSTRAP] Created default admin user %s", settings.admin_username)
    return True
