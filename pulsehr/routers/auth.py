import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Security, status
from sqlalchemy.orm import Session

from pulsehr.core.config import get_settings
from pulsehr.core.security import api_key_header, verify_password
from pulsehr.db.database import get_db
from pulsehr.schemas.auth import AdminLoginIn, AdminRegisterIn, AuthResult
from pulsehr.services.admins import admin_count, create_admin, get_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth/admin", tags=["auth"])


@router.post("/register", response_model=AuthResult, status_code=status.HTTP_201_CREATED)
def register(
    payload: AdminRegisterIn,
    api_key: str | None = Security(api_key_header),
    db: Session = Depends(get_db),
):
    # 1) The very first admin can register freely, later ones need the API key
    if admin_count(db) > 0 and api_key != get_settings().API_KEY:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")

    # 2) Unique username
    if get_admin(db, payload.username):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")

    # 3) Create
    admin = create_admin(db, payload.username, payload.password)
    return AuthResult(success=True, username=admin.username)


@router.post("/login", response_model=AuthResult)
def login(payload: AdminLoginIn, db: Session = Depends(get_db)):
    admin = get_admin(db, payload.username)
    if not admin or not verify_password(payload.password, admin.password_hash):
        logger.warning("Failed admin login for %r", payload.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    admin.last_login_at = datetime.utcnow()
    db.commit()

    return AuthResult(success=True, username=admin.username)
