"""
Admin Analytics endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_admin
from app.schemas.admin import AdminAnalyticsResponse
from app.services.analytics_service import get_admin_analytics

router = APIRouter()


@router.get("", response_model=AdminAnalyticsResponse)
async def get_analytics(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Order and revenue KPIs, recent orders and the last 7 days of revenue"""
    return await get_admin_analytics(db)
