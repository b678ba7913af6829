"""
Admin API endpoints for the FlashPrint admin panel.
All endpoints require an ADMIN account.
"""
from fastapi import APIRouter

from app.api.v1.endpoints.admin import orders, reports, analytics, users, settings

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

admin_router.include_router(orders.router, prefix="/orders", tags=["Admin Orders"])
admin_router.include_router(reports.router, prefix="/reports", tags=["Admin Reports"])
admin_router.include_router(analytics.router, prefix="/analytics", tags=["Admin Analytics"])
admin_router.include_router(users.router, prefix="/users", tags=["Admin Users"])
admin_router.include_router(settings.router, prefix="/settings", tags=["Admin Settings"])
