"""Health check endpoint; reports credential store connectivity."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(request: Request, db: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    """
    Service status for load balancers and monitoring. Always 200; a
    disconnected store is reported in the body, not as an error.
    """
    return HealthResponse(
        version=request.app.version,
        environment=settings.APP_ENV,
        database="connected" if check_db_connected(db) else "disconnected",
    )
