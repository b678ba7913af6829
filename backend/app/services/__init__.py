from app.services.document_service import DocumentService, document_service
from app.services.order_service import OrderService, order_service

__all__ = [
    # Core services
    "DocumentService",
    "document_service",
    "OrderService",
    "order_service",
]
