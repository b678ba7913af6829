# Pydantic schemas
from app.schemas.auth import (
    UserRegister,
    UserLogin,
    RefreshTokenRequest,
    Token,
    UserResponse,
    LoginResponse,
)
from app.schemas.profile import (
    AddressUpdate,
    AddressResponse,
    ProfileSetupRequest,
    ProfileSetupResponse,
)
from app.schemas.order import (
    PrintOptions,
    OrderItemResponse,
    StatusHistoryResponse,
    OrderCustomer,
    OrderResponse,
    OrderDetailResponse,
    OrderListResponse,
    AdminOrderListItem,
    AdminOrderListResponse,
    OrderUpdate,
    AdminOrderUpdate,
    PaymentDetailsResponse,
)
from app.schemas.report import (
    PricingResponse,
    PricingUpdate,
    ExpenseCreate,
    ExpenseResponse,
    ReportSummary,
    ReportOrderLine,
    DailyReportResponse,
    StoredReportList,
    RegenerateReportRequest,
    RegenerateReportResponse,
)
from app.schemas.admin import (
    RecentOrder,
    RevenuePoint,
    AdminAnalyticsResponse,
    DashboardStats,
    UserDashboardResponse,
    AdminUserResponse,
    AdminUsersResponse,
    AdminSetupRequest,
    SetupKeyRequest,
    SetupResponse,
)
