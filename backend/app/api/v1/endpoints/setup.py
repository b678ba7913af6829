"""
First-run setup endpoints.

Outside production these are open. In production every call must carry
ADMIN_SETUP_KEY, and without a configured key they are disabled.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import InvalidSetupKeyError
from app.core.logging_config import logger
from app.core.rate_limiter import limiter, AUTH_RATE_LIMIT
from app.models.user import User, UserRole
from app.modules.auth.dependencies import get_current_user
from app.schemas.admin import AdminSetupRequest, SetupKeyRequest, SetupResponse
from app.services import account_service

router = APIRouter()


def _setup_response(message: str, user: User) -> dict:
    return {
        "success": True,
        "message": message,
        "user": {"email": user.email, "full_name": user.full_name, "role": user.role},
    }


@router.get("/admin")
async def get_setup_info(db: AsyncSession = Depends(get_db)):
    """Whether an admin exists yet and whether setup calls need a key"""
    admin_count = await db.scalar(
        select(func.count(User.id)).where(User.role == UserRole.ADMIN)
    )
    return {
        "admin_exists": bool(admin_count),
        "setup_key_required": settings.is_production,
        "setup_enabled": not settings.is_production or bool(settings.ADMIN_SETUP_KEY),
    }


@router.post("/admin", response_model=SetupResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def setup_admin(
    request: Request,
    data: AdminSetupRequest,
    db: AsyncSession = Depends(get_db)
):
    """Create (or reset) the admin account and seed the default pricing row"""
    if not settings.setup_key_valid(data.setup_key):
        client_ip = request.client.host if request.client else "unknown"
        logger.log_auth_event(
            event="admin_setup",
            success=False,
            user_email=data.email,
            reason="Invalid setup key",
            client_ip=client_ip
        )
        raise InvalidSetupKeyError()

    user = await account_service.bootstrap_admin(db, data.email, data.password, data.name)
    await db.commit()

    return _setup_response("Admin account is ready", user)


@router.post("/upgrade-me", response_model=SetupResponse)
async def upgrade_me(
    data: SetupKeyRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Promote the logged-in user to admin"""
    if not settings.setup_key_valid(data.setup_key):
        raise InvalidSetupKeyError()

    user = await account_service.promote_to_admin(db, current_user)
    await db.commit()

    return _setup_response(f"{user.email} is now an admin", user)
