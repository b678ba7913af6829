from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

from app.models.order import OrderStatus, PaymentStatus, PrintType, PaperSize, PrintSide
from app.models.user import UserRole
from app.utils.pagination import Pagination


# ==================== Placement ====================

class PrintOptions(BaseModel):
    """Print options for one uploaded file"""
    copies: int = Field(1, ge=1, le=100)
    print_type: PrintType = PrintType.BW
    paper_size: PaperSize = PaperSize.A4
    print_side: PrintSide = PrintSide.SINGLE
    page_range: Optional[str] = Field(None, max_length=255, description="e.g. '1-3,5'; blank prints all pages")

    @field_validator('page_range')
    @classmethod
    def validate_page_range(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        allowed = set("0123456789,- ")
        if not set(value) <= allowed:
            raise ValueError("Page range may only contain digits, commas and dashes")
        return value.strip()


# ==================== Responses ====================

class OrderItemResponse(BaseModel):
    id: str
    file_name: str
    file_url: str
    page_count: int
    page_range: Optional[str] = None
    pages_to_print: int
    copies: int
    print_type: PrintType
    paper_size: PaperSize
    print_side: PrintSide
    price: float

    class Config:
        from_attributes = True


class StatusHistoryResponse(BaseModel):
    id: str
    status: OrderStatus
    changed_by: Optional[str] = None
    notes: Optional[str] = None
    changed_at: datetime

    class Config:
        from_attributes = True


class OrderCustomer(BaseModel):
    """Customer fields shown alongside an order"""
    id: str
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: str
    order_number: str
    status: OrderStatus
    payment_status: PaymentStatus
    total_amount: float
    payment_id: Optional[str] = None
    delivery_address: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    items: List[OrderItemResponse] = []

    class Config:
        from_attributes = True


class OrderDetailResponse(OrderResponse):
    status_history: List[StatusHistoryResponse] = []
    user: Optional[OrderCustomer] = None


class OrderListResponse(BaseModel):
    orders: List[OrderResponse]
    pagination: Pagination


class AdminOrderListItem(OrderResponse):
    user: OrderCustomer
    item_count: int = 0


class AdminOrderListResponse(BaseModel):
    orders: List[AdminOrderListItem]
    pagination: Pagination


# ==================== Updates ====================

class OrderUpdate(BaseModel):
    """Customer-side update (payment confirmation); admins may set any status"""
    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    payment_id: Optional[str] = Field(None, max_length=255)
    note: Optional[str] = Field(None, max_length=1000)


class AdminOrderUpdate(BaseModel):
    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    notes: Optional[str] = Field(None, max_length=1000)


# ==================== Payment ====================

class PaymentDetailsResponse(BaseModel):
    """UPI payment instructions for an order"""
    order_id: str
    order_number: str
    amount: float
    payment_status: PaymentStatus
    upi_id: str
    payee_name: str
    upi_link: str
    qr_code: str  # base64 PNG
