from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.core.exceptions import AddressNotFoundError
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.schemas.profile import (
    AddressUpdate,
    AddressResponse,
    ProfileSetupRequest,
    ProfileSetupResponse,
)
from app.services import account_service

router = APIRouter()


@router.get("/address", response_model=Optional[AddressResponse])
async def get_address(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Saved delivery address, null when none is set"""
    return await account_service.get_address(db, current_user)


@router.put("/address", response_model=AddressResponse)
async def update_address(
    address_data: AddressUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create or replace the delivery address"""
    address = await account_service.upsert_address(db, current_user, address_data)
    await db.commit()
    return address


@router.post("/setup", response_model=ProfileSetupResponse)
async def setup_profile(
    form: ProfileSetupRequest,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """First-run profile form: saves the address plus name, phone and role"""
    address, created = await account_service.setup_profile(db, current_user, form)
    await db.commit()

    if created:
        response.status_code = status.HTTP_201_CREATED
    return {
        "message": "Address created" if created else "Address updated",
        "address": address,
    }


@router.get("/setup", response_model=ProfileSetupResponse)
async def get_profile_setup(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    address = await account_service.get_address(db, current_user)
    if not address:
        raise AddressNotFoundError(current_user.id)
    return {"message": "Address found", "address": address}
