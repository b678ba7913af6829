"""
Analytics Service - admin KPIs and the customer dashboard
"""

from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.order import Order, OrderItem, OrderStatus, PaymentStatus, PENDING_STATUSES, DELIVERY_STATUSES
from app.models.user import User
from app.utils.dates import day_bounds, local_today

REVENUE_DAYS = 7
ADMIN_RECENT_ORDERS = 10
DASHBOARD_RECENT_ORDERS = 5


async def _count(db: AsyncSession, *conditions) -> int:
    query = select(func.count(Order.id))
    if conditions:
        query = query.where(*conditions)
    return (await db.execute(query)).scalar() or 0


async def _revenue(db: AsyncSession, *conditions) -> float:
    query = select(func.coalesce(func.sum(Order.total_amount), 0.0)).where(
        Order.payment_status == PaymentStatus.COMPLETED, *conditions
    )
    return float((await db.execute(query)).scalar() or 0.0)


async def _recent_orders(db: AsyncSession, limit: int, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
    item_count = (
        select(func.count(OrderItem.id))
        .where(OrderItem.order_id == Order.id)
        .correlate(Order)
        .scalar_subquery()
    )
    query = select(Order, item_count.label("item_count")).options(selectinload(Order.user))
    if user_id:
        query = query.where(Order.user_id == user_id)
    query = query.order_by(Order.created_at.desc()).limit(limit)

    rows = (await db.execute(query)).all()
    return [
        {
            "id": order.id,
            "order_number": order.order_number,
            "total_amount": order.total_amount,
            "status": order.status,
            "payment_status": order.payment_status,
            "created_at": order.created_at,
            "item_count": count or 0,
            "user": {
                "full_name": order.user.full_name,
                "email": order.user.email,
                "role": order.user.role,
            } if order.user else None,
        }
        for order, count in rows
    ]


async def get_admin_analytics(db: AsyncSession) -> Dict[str, Any]:
    """Headline numbers for the admin dashboard"""
    today = local_today()
    today_start, today_end = day_bounds(today)

    status_rows = (await db.execute(
        select(Order.status, func.count(Order.id)).group_by(Order.status)
    )).all()
    orders_by_status = {OrderStatus(status).value: count for status, count in status_rows}

    # Revenue per local day, oldest first
    revenue_by_day = []
    for i in range(REVENUE_DAYS - 1, -1, -1):
        day = today - timedelta(days=i)
        day_start, day_end = day_bounds(day)
        amount = await _revenue(db, Order.created_at >= day_start, Order.created_at < day_end)
        revenue_by_day.append({"date": day.isoformat(), "amount": amount})

    return {
        "total_orders": await _count(db),
        "total_revenue": await _revenue(db),
        "pending_orders": await _count(db, Order.status.in_(PENDING_STATUSES)),
        "pending_deliveries": await _count(db, Order.status.in_(DELIVERY_STATUSES)),
        "today_orders": await _count(db, Order.created_at >= today_start, Order.created_at < today_end),
        "today_revenue": await _revenue(db, Order.created_at >= today_start, Order.created_at < today_end),
        "recent_orders": await _recent_orders(db, ADMIN_RECENT_ORDERS),
        "orders_by_status": orders_by_status,
        "revenue_by_day": revenue_by_day,
    }


async def get_user_dashboard(db: AsyncSession, user: User) -> Dict[str, Any]:
    """Order counts and spend for one customer"""
    mine = Order.user_id == user.id
    return {
        "stats": {
            "total_orders": await _count(db, mine),
            "pending_orders": await _count(db, mine, Order.status.in_(PENDING_STATUSES)),
            "completed_orders": await _count(db, mine, Order.status == OrderStatus.DELIVERED),
            "total_spent": await _revenue(db, mine),
        },
        "recent_orders": await _recent_orders(db, DASHBOARD_RECENT_ORDERS, user_id=user.id),
    }
