"""Account bootstrap and credential checks."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from tailor_shop.core.config import settings
from tailor_shop.core.security import get_password_hash, verify_password
from tailor_shop.models import User
from tailor_shop.services.user_service import get_user_by_email

logger = logging.getLogger(__name__)


def ensure_default_admin(db: Session) -> bool:
    """Ensure an active admin exists in development.

    Returns:
        bool: True when an admin account already existed before this call.
    """
    existing_admin = db.scalar(select(User).where(User.role == "ADMIN").limit(1))
    if existing_admin is not None:
        if not existing_admin.is_active and existing_admin.email == settings.admin_email:
            existing_admin.is_active = True
            db.commit()
            logger.info("[BOOTSTRAP] Admin exists but was inactive; account re-activated.")
        logger.info("[BOOTSTRAP] Admin exists")
        return True

    if settings.app_env != "dev":
        logger.warning("[BOOTSTRAP] No admin account and APP_ENV=%s; skipping default admin.", settings.app_env)
        return False

    admin = User(
        name=settings.admin_name,
        email=settings.admin_email,
        password_hash=get_password_hash(settings.admin_password),
        role="ADMIN",
        branch_id=None,
        is_active=True,
    )
    db.add(admin)
    db.commit()
    logger.warning(
        "[SECURITY] Default admin account created: %s. Change default password immediately.",
        settings.admin_email,
    )
    return False


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    user = get_user_by_email(db, email)
    if user is None or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    return user
