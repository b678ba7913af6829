# Re-export all models for convenient imports
from app.models.user import User, UserRole, CUSTOMER_ROLES
from app.models.address import Address, AddressType
from app.models.order import (
    Order,
    OrderItem,
    OrderStatusHistory,
    OrderStatus,
    PaymentStatus,
    PrintType,
    PaperSize,
    PrintSide,
)
from app.models.expense import DailyExpense, ExpenseCategory
from app.models.report import PricingConfig, DailyReport, DEFAULT_PRICING_ID

__all__ = [
    # User
    "User",
    "UserRole",
    "CUSTOMER_ROLES",
    "Address",
    "AddressType",
    # Orders
    "Order",
    "OrderItem",
    "OrderStatusHistory",
    "OrderStatus",
    "PaymentStatus",
    "PrintType",
    "PaperSize",
    "PrintSide",
    # Reporting
    "DailyExpense",
    "ExpenseCategory",
    "PricingConfig",
    "DailyReport",
    "DEFAULT_PRICING_ID",
]
