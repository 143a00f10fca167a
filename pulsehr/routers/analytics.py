from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pulsehr.core.deps import require_admin
from pulsehr.db.database import get_db
from pulsehr.services.analytics import build_dashboard

router = APIRouter(prefix="/admin", tags=["analytics"])


@router.get("/analytics")
def analytics(
    days: int = Query(30, ge=1, le=3650, description="Window on attempt start and evaluation dates"),
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    return build_dashboard(db, days)
