from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.schemas.admin import UserDashboardResponse
from app.services.analytics_service import get_user_dashboard

router = APIRouter()


@router.get("", response_model=UserDashboardResponse)
async def get_dashboard(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Order counts, total spent and the latest orders of the current user"""
    return await get_user_dashboard(db, current_user)
