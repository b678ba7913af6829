from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Dict
from datetime import datetime

from app.models.order import OrderStatus, PaymentStatus
from app.models.user import UserRole
from app.utils.pagination import Pagination


# ==================== Analytics Schemas ====================

class RecentOrderCustomer(BaseModel):
    full_name: Optional[str] = None
    email: str
    role: UserRole


class RecentOrder(BaseModel):
    """Compact order row for dashboards"""
    id: str
    order_number: str
    total_amount: float
    status: OrderStatus
    payment_status: PaymentStatus
    created_at: datetime
    item_count: int = 0
    user: Optional[RecentOrderCustomer] = None


class RevenuePoint(BaseModel):
    date: str
    amount: float


class AdminAnalyticsResponse(BaseModel):
    total_orders: int
    total_revenue: float
    pending_orders: int
    pending_deliveries: int
    today_orders: int
    today_revenue: float
    recent_orders: List[RecentOrder]
    orders_by_status: Dict[str, int]
    revenue_by_day: List[RevenuePoint]


class DashboardStats(BaseModel):
    total_orders: int
    pending_orders: int
    completed_orders: int
    total_spent: float


class UserDashboardResponse(BaseModel):
    stats: DashboardStats
    recent_orders: List[RecentOrder]


# ==================== User Management Schemas ====================

class AdminUserResponse(BaseModel):
    """User row for the admin users page"""
    id: str
    email: str
    full_name: Optional[str]
    phone: Optional[str]
    role: UserRole
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime]
    orders_count: int = 0


class AdminUsersResponse(BaseModel):
    users: List[AdminUserResponse]
    pagination: Pagination


# ==================== Setup Schemas ====================

class AdminSetupRequest(BaseModel):
    setup_key: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8)
    name: Optional[str] = None


class SetupKeyRequest(BaseModel):
    setup_key: Optional[str] = None


class SetupUserSummary(BaseModel):
    email: str
    full_name: Optional[str] = None
    role: UserRole


class SetupResponse(BaseModel):
    success: bool = True
    message: str
    user: SetupUserSummary
