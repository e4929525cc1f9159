"""
Health Check Router
Service status plus a DynamoDB connectivity probe
"""
from datetime import datetime, timezone

from fastapi import APIRouter

from app.core.config import settings
from app.db import dynamo

router = APIRouter()


@router.get("/health")
def health_check():
    """
    Returns API status and whether the transactions table is reachable.
    """
    table = dynamo.check_table()
    return {
        "status": "healthy" if table["status"] == "accessible" else "degraded",
        "service": settings.PROJECT_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "dynamodb": table,
    }
