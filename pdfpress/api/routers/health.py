from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from pdfpress.models import get_db

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict:
    return {"status": "healthy", "service": "pdfpress"}


@router.get("/health/ready")
def readiness_check(db: Session = Depends(get_db)) -> dict:
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ready", "database": "connected"}
    except Exception:
        return {"status": "not_ready", "database": "disconnected"}
