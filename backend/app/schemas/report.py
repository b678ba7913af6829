from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import date as Day, datetime

from app.models.expense import ExpenseCategory
from app.models.order import OrderStatus, PaymentStatus


# ==================== Pricing ====================

class PricingResponse(BaseModel):
    bw_price_per_page: float
    color_price_per_page: float
    bw_cost_per_page: float
    color_cost_per_page: float


class PricingUpdate(BaseModel):
    bw_price_per_page: Optional[float] = Field(None, ge=0)
    color_price_per_page: Optional[float] = Field(None, ge=0)
    bw_cost_per_page: Optional[float] = Field(None, ge=0)
    color_cost_per_page: Optional[float] = Field(None, ge=0)


# ==================== Expenses ====================

class ExpenseCreate(BaseModel):
    date: Day
    category: ExpenseCategory
    amount: float = Field(..., ge=0)
    description: Optional[str] = Field(None, max_length=1000)


class ExpenseResponse(BaseModel):
    id: str
    date: Day
    category: ExpenseCategory
    amount: float
    description: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


# ==================== Daily report ====================

class ReportSummary(BaseModel):
    total_orders: int
    total_copies: int
    total_pages: int
    bw_pages: int
    color_pages: int
    gross_revenue: float
    payments_received: float
    payments_pending: float
    production_cost: float
    other_expenses: float
    net_profit: float
    profit_margin: float


class ReportOrderLine(BaseModel):
    order_id: str
    order_number: str
    customer_name: str
    customer_email: str
    copies: int
    pages: int
    bw_pages: int
    color_pages: int
    amount: float
    status: OrderStatus
    payment_status: PaymentStatus
    created_at: datetime


class DailyReportResponse(BaseModel):
    date: Day
    summary: ReportSummary
    orders: List[ReportOrderLine]
    expenses: List[ExpenseResponse]
    status_breakdown: Dict[str, int]
    pricing: PricingResponse


# ==================== Stored workbooks ====================

class StoredReportList(BaseModel):
    reports: List[str]


class RegenerateReportRequest(BaseModel):
    date: Optional[Day] = None


class RegenerateReportResponse(BaseModel):
    success: bool = True
    message: str
    file_name: str
    date: Day
