from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import ValidationError as PydanticValidationError
from typing import List, Optional
import json

from app.core.database import get_db
from app.core.exceptions import DocumentNotFoundError, ValidationError
from app.core.logging_config import logger, set_order_id
from app.models.order import OrderStatus
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.schemas.order import (
    PrintOptions,
    OrderDetailResponse,
    OrderListResponse,
    OrderUpdate,
    PaymentDetailsResponse,
)
from app.services.document_service import document_service
from app.services.excel_export import refresh_daily_workbook
from app.services.order_service import order_service
from app.services.payment_service import payment_details
from app.utils.dates import local_date_of

router = APIRouter()


def parse_print_options(raw: Optional[str]) -> List[PrintOptions]:
    """Decode the JSON array of per-file print options sent with the upload"""
    if not raw or not raw.strip():
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError("Print options must be a JSON array", field="options")

    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ValidationError("Print options must be a JSON array", field="options")

    try:
        return [PrintOptions.model_validate(entry) for entry in data]
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(f"Invalid print options: {location} {first.get('msg')}".strip(), field="options")


@router.post("", response_model=OrderDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    background_tasks: BackgroundTasks,
    files: Optional[List[UploadFile]] = File(None),
    options: Optional[str] = Form(None, description="JSON array of print options, one per file"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Place a print order.

    Multipart form with one or more PDF ``files`` and an ``options`` JSON array
    holding copies, print_type, paper_size, print_side and page_range per file.
    """
    print_options = parse_print_options(options)
    order = await order_service.create_order(db, current_user, files or [], print_options)
    try:
        await db.commit()
    except Exception:
        document_service.discard(order.items)
        raise

    set_order_id(order.id)
    background_tasks.add_task(refresh_daily_workbook, local_date_of(order.created_at))
    return order


@router.get("", response_model=OrderListResponse)
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[OrderStatus] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Current user's orders, newest first"""
    result = await order_service.list_orders(db, current_user, page=page, limit=limit, status=status)
    return {"orders": result["items"], "pagination": result["pagination"]}


@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(
    order_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Order with items and status history (owner or admin)"""
    return await order_service.get_order_for_user(db, current_user, order_id)


@router.patch("/{order_id}", response_model=OrderDetailResponse)
async def update_order(
    order_id: str,
    update_data: OrderUpdate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Update an order. Customers use this to confirm their UPI payment
    (status PAYMENT_CONFIRMED, payment_status COMPLETED, payment_id).
    """
    order = await order_service.update_order(db, current_user, order_id, update_data)
    await db.commit()

    background_tasks.add_task(refresh_daily_workbook, local_date_of(order.created_at))
    return order


@router.get("/{order_id}/payment", response_model=PaymentDetailsResponse)
async def get_payment_details(
    order_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """UPI link and QR code for paying an order"""
    order = await order_service.get_order_for_user(db, current_user, order_id)
    return payment_details(order)


@router.get("/{order_id}/items/{item_id}/file")
async def download_item_file(
    order_id: str,
    item_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Uploaded PDF of one order item (owner or admin)"""
    order = await order_service.get_order_for_user(db, current_user, order_id)
    item = next((i for i in order.items if i.id == item_id), None)
    if item is None:
        raise DocumentNotFoundError(item_id)

    path = document_service.path_for(item.file_url)
    if not path.is_file():
        logger.warning(f"[Documents] Missing file for item {item_id} of order {order.order_number}")
        raise DocumentNotFoundError(item_id)

    return FileResponse(path, media_type="application/pdf", filename=item.file_name)
