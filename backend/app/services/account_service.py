"""
Account Service - users, delivery addresses and admin bootstrap

Handles:
- Email/password registration and login checks
- Delivery address CRUD and the first-run profile form
- Admin bootstrap / self-promotion
- Admin user listing
"""

from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import EmailAlreadyRegisteredError, ValidationError
from app.core.logging_config import logger
from app.core.security import get_password_hash, verify_password
from app.models.address import Address, AddressType, TYPE_FIELDS
from app.models.order import Order
from app.models.user import User, UserRole
from app.schemas.auth import UserRegister
from app.schemas.profile import AddressUpdate, ProfileSetupRequest
from app.services.pricing_service import ensure_pricing_config
from app.utils.pagination import build_pagination, clamp_page


ADDRESS_FIELDS = (
    "hostel_name", "room_number",
    "department_name", "cabin_number",
    "building_name", "floor_number",
)


# ==================== USERS ====================

async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, data: UserRegister) -> User:
    if data.role == UserRole.ADMIN:
        raise ValidationError("Admin accounts cannot be self-registered", field="role")

    if await get_user_by_email(db, data.email):
        raise EmailAlreadyRegisteredError()

    user = User(
        email=data.email.lower(),
        hashed_password=get_password_hash(data.password),
        full_name=data.full_name,
        phone=data.phone,
        role=data.role,
    )
    db.add(user)
    await db.flush()
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> Optional[User]:
    """User for valid credentials, None otherwise"""
    user = await get_user_by_email(db, email)
    if not user or not user.hashed_password:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


# ==================== ADDRESSES ====================

async def get_address(db: AsyncSession, user: User) -> Optional[Address]:
    result = await db.execute(select(Address).where(Address.user_id == user.id))
    return result.scalar_one_or_none()


def clean_address_fields(address_type: AddressType, values: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the fields that belong to the address type, null the rest"""
    keep = TYPE_FIELDS[AddressType(address_type)]
    cleaned = {name: (values.get(name) if name in keep else None) for name in ADDRESS_FIELDS}
    cleaned["landmark"] = values.get("landmark") or None
    cleaned["notes"] = values.get("notes") or None
    return cleaned


async def _save_address(db: AsyncSession, user: User, address_type: AddressType, fields: Dict[str, Any]) -> Tuple[Address, bool]:
    address = await get_address(db, user)
    created = address is None
    if created:
        address = Address(user_id=user.id, type=address_type)
        db.add(address)

    address.type = address_type
    for name, value in fields.items():
        setattr(address, name, value)

    await db.flush()
    return address, created


async def upsert_address(db: AsyncSession, user: User, data: AddressUpdate) -> Address:
    fields = clean_address_fields(data.type, data.model_dump())
    address, _ = await _save_address(db, user, data.type, fields)
    logger.info(f"[Accounts] Address saved for {user.email} ({data.type.value})")
    return address


def address_from_profile(form: ProfileSetupRequest) -> Tuple[AddressType, Dict[str, Any]]:
    """
    Map the role-specific profile form onto an address.

    Students in a block whose name mentions "hostel" get a Hostel address;
    other students and everyone else's block is stored as a building.
    """
    fields: Dict[str, Any] = {name: None for name in ADDRESS_FIELDS}
    fields["notes"] = None

    if form.role == UserRole.STUDENT.value:
        is_hostel = "hostel" in form.block.lower()
        address_type = AddressType.HOSTEL if is_hostel else AddressType.CUSTOM
        fields.update(
            hostel_name=form.block if is_hostel else None,
            room_number=form.room_location,
            department_name=form.branch,
            cabin_number=form.class_number,
            building_name=None if is_hostel else form.block,
            landmark=f"Semester {form.semester}",
        )
    elif form.role == UserRole.FACULTY.value:
        address_type = AddressType.DEPARTMENT
        fields.update(
            department_name=form.department,
            cabin_number=form.office_number,
            building_name=form.block,
            landmark=form.room_location,
        )
    else:
        address_type = AddressType.CUSTOM
        fields.update(
            building_name=form.block,
            landmark=form.room_location,
        )

    return address_type, fields


async def setup_profile(db: AsyncSession, user: User, form: ProfileSetupRequest) -> Tuple[Address, bool]:
    """Save the profile form: address plus the user's name, phone and role"""
    address_type, fields = address_from_profile(form)
    address, created = await _save_address(db, user, address_type, fields)

    user.full_name = form.full_name
    user.phone = form.phone_number
    if user.role != UserRole.ADMIN:
        user.role = UserRole(form.role)
    await db.flush()

    logger.info(f"[Accounts] Profile {'created' if created else 'updated'} for {user.email} as {form.role}")
    return address, created


# ==================== SETUP ====================

async def bootstrap_admin(
    db: AsyncSession,
    email: Optional[str] = None,
    password: Optional[str] = None,
    name: Optional[str] = None,
) -> User:
    """Create or reset the admin account and make sure the rate card exists"""
    email = (email or settings.DEFAULT_ADMIN_EMAIL).lower()
    password = password or settings.DEFAULT_ADMIN_PASSWORD
    name = name or "Admin"

    user = await get_user_by_email(db, email)
    if user is None:
        user = User(email=email)
        db.add(user)

    user.full_name = name
    user.hashed_password = get_password_hash(password)
    user.role = UserRole.ADMIN
    user.is_active = True

    await ensure_pricing_config(db)
    await db.flush()

    logger.warning(f"[Setup] Admin account ready: {email}")
    return user


async def promote_to_admin(db: AsyncSession, user: User) -> User:
    user.role = UserRole.ADMIN
    await ensure_pricing_config(db)
    await db.flush()
    logger.warning(f"[Setup] {user.email} promoted to admin")
    return user


async def record_login(db: AsyncSession, user: User) -> None:
    user.last_login = datetime.utcnow()
    await db.flush()


# ==================== ADMIN USERS ====================

async def list_users(
    db: AsyncSession,
    page: int = 1,
    limit: int = 20,
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
) -> Dict[str, Any]:
    """Users with their order counts, newest first"""
    page, limit = clamp_page(page, limit)

    orders_count = (
        select(func.count(Order.id))
        .where(Order.user_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )

    query = select(User, orders_count.label("orders_count"))
    count_query = select(func.count(User.id))

    if search:
        pattern = f"%{search.strip()}%"
        condition = or_(
            User.email.ilike(pattern),
            User.full_name.ilike(pattern),
            User.phone.ilike(pattern),
        )
        query = query.where(condition)
        count_query = count_query.where(condition)
    if role:
        query = query.where(User.role == role)
        count_query = count_query.where(User.role == role)

    total = (await db.execute(count_query)).scalar() or 0
    rows = (await db.execute(
        query.order_by(User.created_at.desc()).offset((page - 1) * limit).limit(limit)
    )).all()

    users = [
        {
            "id": user.id,
            "email": user.email,
            "full_name": user.full_name,
            "phone": user.phone,
            "role": user.role,
            "is_active": user.is_active,
            "created_at": user.created_at,
            "last_login": user.last_login,
            "orders_count": count or 0,
        }
        for user, count in rows
    ]

    return {"users": users, "pagination": build_pagination(total, page, limit)}
