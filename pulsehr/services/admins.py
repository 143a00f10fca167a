import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from pulsehr.core.security import hash_password, password_bytes_ok
from pulsehr.db.models import AdminUser

logger = logging.getLogger(__name__)


def admin_count(db: Session) -> int:
    return int(db.execute(select(func.count(AdminUser.id))).scalar_one())


def get_admin(db: Session, username: str) -> Optional[AdminUser]:
    return db.execute(select(AdminUser).where(AdminUser.username == username)).scalar_one_or_none()


def create_admin(db: Session, username: str, password: str) -> AdminUser:
    admin = AdminUser(username=username, password_hash=hash_password(password))
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("Admin account %r created", username)
    return admin


def ensure_default_admin(db: Session, username: str, password: Optional[str]) -> Optional[AdminUser]:
    """
    Create the configured admin on startup if it does not exist yet.
    """
    if not password:
        return None
    if not password_bytes_ok(password):
        logger.warning("DEFAULT_ADMIN_PASSWORD is longer than 72 bytes, default admin not created")
        return None

    existing = get_admin(db, username)
    if existing:
        return existing
    return create_admin(db, username, password)
