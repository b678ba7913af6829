"""
Order Service - Business logic for print orders

Handles:
- Order placement (upload validation, pricing, address snapshot)
- Customer and admin order listings
- Status and payment updates with an append-only status history
"""

from datetime import datetime, date
from typing import Any, Dict, List, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import logging

from app.core.config import settings
from app.core.exceptions import (
    AddressRequiredError,
    AuthorizationError,
    NoFilesUploadedError,
    OrderNotFoundError,
    ValidationError,
)
from app.core.logging_config import logger
from app.models.address import Address
from app.models.order import (
    Order,
    OrderItem,
    OrderStatus,
    OrderStatusHistory,
    PaymentStatus,
    is_forward_transition,
)
from app.models.user import User, UserRole
from app.schemas.order import AdminOrderUpdate, OrderUpdate, PrintOptions
from app.services.document_service import StoredDocument, document_service
from app.services.pricing_service import calculate_print_cost, count_pages_to_print, get_pricing
from app.utils.dates import day_bounds
from app.utils.orders import generate_order_number
from app.utils.pagination import paginate


ORDER_PLACED_NOTE = "Order placed successfully"
ADMIN_STATUS_NOTE = "Status updated by admin"
ADMIN_PAYMENT_NOTE = "Payment confirmed by admin"


def _order_query():
    return select(Order).options(
        selectinload(Order.items),
        selectinload(Order.status_history),
        selectinload(Order.user),
    )


class OrderService:
    """Service for placing and tracking print orders"""

    # ==================== LOADING ====================

    async def load_order(self, db: AsyncSession, order_id: str, refresh: bool = False) -> Order:
        """Order with items, history and customer; raises OrderNotFoundError"""
        query = _order_query().where(Order.id == order_id)
        if refresh:
            query = query.execution_options(populate_existing=True)
        order = (await db.execute(query)).scalar_one_or_none()
        if not order:
            raise OrderNotFoundError(order_id)
        return order

    # ==================== PLACEMENT ====================

    async def create_order(
        self,
        db: AsyncSession,
        user: User,
        files: List[UploadFile],
        options: List[PrintOptions],
    ) -> Order:
        """
        Place an order for the uploaded files.

        Args:
            db: Database session
            user: Customer placing the order
            files: Uploaded PDFs, in order
            options: Print options, one per file

        Returns:
            The created Order with items and history loaded
        """
        address = (await db.execute(
            select(Address).where(Address.user_id == user.id)
        )).scalar_one_or_none()
        if not address:
            raise AddressRequiredError()

        if not files:
            raise NoFilesUploadedError()

        if len(files) > settings.MAX_FILES_PER_ORDER:
            raise ValidationError(
                f"At most {settings.MAX_FILES_PER_ORDER} files can be uploaded per order",
                field="files",
            )

        if len(options) != len(files):
            raise ValidationError(
                f"Expected print options for {len(files)} file(s), got {len(options)}",
                field="options",
            )

        rates = await get_pricing(db)

        # Validate every file before anything touches the disk
        documents = []
        prices = []
        for upload, opts in zip(files, options):
            document = await document_service.read_upload(upload)
            pages = count_pages_to_print(opts.page_range, document.page_count)
            if pages == 0:
                raise ValidationError(
                    f"Page range '{opts.page_range}' selects no pages of {document.file_name}",
                    field="page_range",
                )
            documents.append(document)
            prices.append((pages, calculate_print_cost(pages, opts.copies, opts.print_type, opts.print_side, rates)))

        stored = await document_service.store_all(documents)
        try:
            order = await self._insert_order(db, user, address, stored, options, prices)
        except Exception:
            document_service.discard(stored)
            raise

        logger.log_order_event(
            order.order_number, "placed",
            user_id=user.id, item_count=len(stored), total_amount=order.total_amount,
        )
        return await self.load_order(db, order.id, refresh=True)

    async def _insert_order(
        self,
        db: AsyncSession,
        user: User,
        address: Address,
        stored: List[StoredDocument],
        options: List[PrintOptions],
        prices: List[Tuple[int, float]],
    ) -> Order:
        items = [
            OrderItem(
                position=position,
                file_name=document.file_name,
                file_url=document.file_url,
                page_count=document.page_count,
                page_range=opts.page_range,
                pages_to_print=pages,
                copies=opts.copies,
                print_type=opts.print_type,
                paper_size=opts.paper_size,
                print_side=opts.print_side,
                price=price,
            )
            for position, (document, opts, (pages, price)) in enumerate(zip(stored, options, prices))
        ]

        order = Order(
            order_number=generate_order_number(),
            user_id=user.id,
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            total_amount=sum(price for _, price in prices),
            delivery_address=address.to_snapshot(),
            items=items,
            status_history=[
                OrderStatusHistory(
                    status=OrderStatus.PENDING,
                    changed_by=user.id,
                    notes=ORDER_PLACED_NOTE,
                )
            ],
        )
        db.add(order)
        await db.flush()
        return order

    # ==================== CUSTOMER ====================

    async def list_orders(
        self,
        db: AsyncSession,
        user: User,
        page: int = 1,
        limit: int = 20,
        status: Optional[OrderStatus] = None,
    ) -> Dict[str, Any]:
        """Customer's own orders, newest first"""
        query = (
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.user_id == user.id)
        )
        if status:
            query = query.where(Order.status == status)
        query = query.order_by(Order.created_at.desc())

        return await paginate(db, query, page=page, limit=limit)

    async def get_order_for_user(self, db: AsyncSession, user: User, order_id: str) -> Order:
        order = await self.load_order(db, order_id)
        if order.user_id != user.id and user.role != UserRole.ADMIN:
            raise AuthorizationError("Not authorized to view this order")
        return order

    async def update_order(
        self,
        db: AsyncSession,
        user: User,
        order_id: str,
        data: OrderUpdate,
    ) -> Order:
        """
        Owner/admin update. Customers may only move the order to
        PAYMENT_CONFIRMED; admins may set any status.
        """
        order = await self.load_order(db, order_id)

        is_admin = user.role == UserRole.ADMIN
        if order.user_id != user.id and not is_admin:
            raise AuthorizationError("Not authorized to update this order")

        now = datetime.utcnow()

        if data.status:
            if not is_admin and data.status != OrderStatus.PAYMENT_CONFIRMED:
                raise AuthorizationError("Unauthorized to update status")
            self._check_transition(order, data.status)
            order.status = data.status
            if data.status == OrderStatus.DELIVERED:
                order.delivered_at = now

        if data.payment_status:
            order.payment_status = data.payment_status
            if data.payment_status == PaymentStatus.COMPLETED:
                order.paid_at = now
                if data.payment_id:
                    order.payment_id = data.payment_id

        if data.status:
            self._append_history(db, order, data.status, user.id, data.note)

        await db.flush()

        logger.log_order_event(
            order.order_number, "updated",
            status=order.status.value, payment_status=order.payment_status.value, actor=user.id,
        )
        return await self.load_order(db, order.id, refresh=True)

    # ==================== ADMIN ====================

    async def admin_list_orders(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 20,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
        user_role: Optional[UserRole] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        """All orders with filters, newest first"""
        query = (
            select(Order)
            .join(User, Order.user_id == User.id)
            .options(selectinload(Order.items), selectinload(Order.user))
        )

        if status:
            query = query.where(Order.status == status)
        if payment_status:
            query = query.where(Order.payment_status == payment_status)
        if user_role:
            query = query.where(User.role == user_role)
        if date_from:
            query = query.where(Order.created_at >= day_bounds(date_from)[0])
        if date_to:
            # inclusive of the whole end day
            query = query.where(Order.created_at < day_bounds(date_to)[1])
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(
                    Order.order_number.ilike(pattern),
                    User.full_name.ilike(pattern),
                    User.email.ilike(pattern),
                )
            )

        count_query = select(func.count()).select_from(query.order_by(None).subquery())
        query = query.order_by(Order.created_at.desc())

        return await paginate(db, query, page=page, limit=limit, count_query=count_query)

    async def admin_update_order(
        self,
        db: AsyncSession,
        admin: User,
        order_id: str,
        data: AdminOrderUpdate,
    ) -> Order:
        """
        Apply an admin status/payment change.

        A status is applied only when it differs from the current one. Marking
        payment COMPLETED on a PENDING order with no explicit status change
        also moves it to PAYMENT_CONFIRMED.
        """
        order = await self.load_order(db, order_id)
        now = datetime.utcnow()

        status_changed = bool(data.status) and data.status != order.status
        if status_changed:
            self._check_transition(order, data.status)
            order.status = data.status
            if data.status == OrderStatus.DELIVERED:
                order.delivered_at = now
            self._append_history(db, order, data.status, admin.id, data.notes or ADMIN_STATUS_NOTE)

        if data.payment_status and data.payment_status != order.payment_status:
            order.payment_status = data.payment_status
            if data.payment_status == PaymentStatus.COMPLETED:
                order.paid_at = now
                if not status_changed and order.status == OrderStatus.PENDING:
                    order.status = OrderStatus.PAYMENT_CONFIRMED
                    self._append_history(
                        db, order, OrderStatus.PAYMENT_CONFIRMED, admin.id, ADMIN_PAYMENT_NOTE
                    )

        await db.flush()

        logger.log_order_event(
            order.order_number, "admin update",
            status=order.status.value, payment_status=order.payment_status.value, admin=admin.email,
        )
        return await self.load_order(db, order.id, refresh=True)

    # ==================== HELPERS ====================

    def _append_history(
        self,
        db: AsyncSession,
        order: Order,
        status: OrderStatus,
        actor_id: Optional[str],
        notes: Optional[str],
    ) -> OrderStatusHistory:
        entry = OrderStatusHistory(
            order_id=order.id,
            status=status,
            changed_by=actor_id,
            notes=notes or None,
        )
        db.add(entry)
        return entry

    def _check_transition(self, order: Order, target: OrderStatus) -> None:
        """Any transition is allowed; backwards moves are only logged"""
        if not is_forward_transition(order.status, target):
            logger.log_order_event(
                order.order_number,
                f"non-forward status change {order.status.value} -> {target.value}",
                level=logging.WARNING,
            )


order_service = OrderService()
