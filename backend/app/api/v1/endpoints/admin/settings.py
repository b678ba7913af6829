"""
Admin pricing settings endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_admin
from app.schemas.report import PricingResponse, PricingUpdate
from app.services.pricing_service import get_pricing, update_pricing

router = APIRouter()


@router.get("/pricing", response_model=PricingResponse)
async def get_pricing_config(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Current sale price and production cost per page"""
    rates = await get_pricing(db)
    return rates.to_dict()


@router.put("/pricing", response_model=PricingResponse)
async def update_pricing_config(
    data: PricingUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Update any of the per-page rates"""
    rates = await update_pricing(db, data.model_dump(exclude_none=True))
    await db.commit()
    return rates.to_dict()
