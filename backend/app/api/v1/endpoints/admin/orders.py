"""
Admin order management endpoints.
"""
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date
from typing import Optional

from app.core.database import get_db
from app.models.order import OrderStatus, PaymentStatus
from app.models.user import User, UserRole
from app.modules.auth.dependencies import get_current_admin
from app.schemas.order import AdminOrderListResponse, AdminOrderUpdate, OrderDetailResponse
from app.services.excel_export import refresh_daily_workbook
from app.services.order_service import order_service
from app.utils.dates import local_date_of

router = APIRouter()


@router.get("", response_model=AdminOrderListResponse)
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[OrderStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
    user_role: Optional[UserRole] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """List all orders with filtering and pagination"""
    result = await order_service.admin_list_orders(
        db,
        page=page,
        limit=limit,
        status=status,
        payment_status=payment_status,
        user_role=user_role,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )
    return {"orders": result["items"], "pagination": result["pagination"]}


@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(
    order_id: str,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Order with customer, items and status history"""
    return await order_service.load_order(db, order_id)


@router.patch("/{order_id}", response_model=OrderDetailResponse)
async def update_order(
    order_id: str,
    update_data: AdminOrderUpdate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Change order status and/or payment status"""
    order = await order_service.admin_update_order(db, current_admin, order_id, update_data)
    await db.commit()

    background_tasks.add_task(refresh_daily_workbook, local_date_of(order.created_at))
    return order
