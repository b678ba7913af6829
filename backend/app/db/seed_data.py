"""
Database Seed Data Module

Demo accounts, delivery addresses, the default rate card and a spread of
sample orders over the last week.
Run with: python -m app.db.seed_data
"""
import asyncio
import random
from datetime import datetime, timedelta
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import AsyncSessionLocal, init_db
from app.core.security import get_password_hash
from app.models.address import Address, AddressType
from app.models.expense import DailyExpense, ExpenseCategory
from app.models.order import (
    Order, OrderItem, OrderStatus, OrderStatusHistory, PaymentStatus,
    PaperSize, PrintSide, PrintType, STATUS_SEQUENCE,
)
from app.models.report import DailyReport
from app.models.user import User, UserRole
from app.services.pricing_service import calculate_print_cost, ensure_pricing_config, rates_from_config
from app.utils.dates import local_date_of
from app.utils.orders import generate_order_number


# ==================== Sample Data Constants ====================

DEMO_PASSWORD = "demo1234"

SAMPLE_USERS = [
    {"email": "admin@college.edu", "full_name": "FlashPrint Admin", "role": UserRole.ADMIN, "phone": "9000000001"},
    {"email": "student1@college.edu", "full_name": "Rahul Sharma", "role": UserRole.STUDENT, "phone": "9876500001"},
    {"email": "student2@college.edu", "full_name": "Priya Patel", "role": UserRole.STUDENT, "phone": "9876500002"},
    {"email": "student3@college.edu", "full_name": "Amit Kumar", "role": UserRole.STUDENT, "phone": "9876500003"},
    {"email": "faculty1@college.edu", "full_name": "Dr. Srinivas Kumar", "role": UserRole.FACULTY, "phone": "9876500010"},
    {"email": "staff1@college.edu", "full_name": "Kavya Nair", "role": UserRole.OTHERS, "phone": "9876500020"},
]

SAMPLE_ADDRESSES = {
    UserRole.STUDENT: {"type": AddressType.HOSTEL, "hostel_name": "Ganga Hostel", "room_number": "214"},
    UserRole.FACULTY: {"type": AddressType.DEPARTMENT, "department_name": "Computer Science", "cabin_number": "C-12"},
    UserRole.OTHERS: {"type": AddressType.CUSTOM, "building_name": "Admin Block", "floor_number": "2"},
}

SAMPLE_FILES = [
    ("DBMS_Unit3_Notes.pdf", 24),
    ("OS_Lab_Record.pdf", 40),
    ("Resume.pdf", 2),
    ("Mini_Project_Report.pdf", 58),
    ("Question_Bank.pdf", 12),
]


# ==================== Seed Functions ====================

async def seed_users(db: AsyncSession) -> List[User]:
    """Create demo users (skips emails that already exist)"""
    users = []
    hashed = get_password_hash(DEMO_PASSWORD)

    for data in SAMPLE_USERS:
        existing = (await db.execute(select(User).where(User.email == data["email"]))).scalar_one_or_none()
        if existing:
            users.append(existing)
            continue

        user = User(hashed_password=hashed, is_active=True, **data)
        db.add(user)
        users.append(user)

    await db.flush()
    print(f"  Users: {len(users)}")
    return users


async def seed_addresses(db: AsyncSession, users: List[User]) -> List[Address]:
    """One delivery address per customer"""
    addresses = []
    for user in users:
        template = SAMPLE_ADDRESSES.get(user.role)
        if not template:
            continue
        existing = (await db.execute(select(Address).where(Address.user_id == user.id))).scalar_one_or_none()
        if existing:
            addresses.append(existing)
            continue

        address = Address(user_id=user.id, landmark="Near main gate", **template)
        db.add(address)
        addresses.append(address)

    await db.flush()
    print(f"  Addresses: {len(addresses)}")
    return addresses


async def seed_orders(db: AsyncSession, users: List[User], addresses: List[Address], days: int = 7) -> List[Order]:
    """Random orders spread across the last few days, at assorted pipeline stages"""
    rates = rates_from_config(await ensure_pricing_config(db))
    admin = next(u for u in users if u.role == UserRole.ADMIN)
    address_by_user = {a.user_id: a for a in addresses}
    customers = [u for u in users if u.id in address_by_user]
    orders = []

    for _ in range(days * 3):
        user = random.choice(customers)
        created_at = datetime.utcnow() - timedelta(days=random.randint(0, days - 1), minutes=random.randint(0, 600))

        items = []
        for position, (file_name, page_count) in enumerate(random.sample(SAMPLE_FILES, random.randint(1, 3))):
            copies = random.randint(1, 3)
            print_type = random.choice([PrintType.BW, PrintType.BW, PrintType.COLOR])
            print_side = random.choice(list(PrintSide))
            items.append(OrderItem(
                position=position,
                file_name=file_name,
                file_url=f"/uploads/sample-{file_name}",
                page_count=page_count,
                pages_to_print=page_count,
                copies=copies,
                print_type=print_type,
                paper_size=PaperSize.A4,
                print_side=print_side,
                price=calculate_print_cost(page_count, copies, print_type, print_side, rates),
            ))

        status = random.choice(STATUS_SEQUENCE + [OrderStatus.CANCELLED])
        reached = STATUS_SEQUENCE[: STATUS_SEQUENCE.index(status) + 1] if status in STATUS_SEQUENCE else [OrderStatus.PENDING, status]
        history = [
            OrderStatusHistory(
                status=step,
                changed_by=user.id if step == OrderStatus.PENDING else admin.id,
                notes="Order placed successfully" if step == OrderStatus.PENDING else "Status updated by admin",
                changed_at=created_at + timedelta(minutes=15 * index),
            )
            for index, step in enumerate(reached)
        ]

        paid = status not in (OrderStatus.PENDING, OrderStatus.CANCELLED)
        order = Order(
            order_number=generate_order_number(),
            user_id=user.id,
            status=status,
            payment_status=PaymentStatus.COMPLETED if paid else PaymentStatus.PENDING,
            payment_id=f"UPI{random.randint(10 ** 9, 10 ** 10 - 1)}" if paid else None,
            total_amount=sum(item.price for item in items),
            delivery_address=address_by_user[user.id].to_snapshot(),
            created_at=created_at,
            paid_at=created_at + timedelta(minutes=10) if paid else None,
            delivered_at=created_at + timedelta(hours=3) if status == OrderStatus.DELIVERED else None,
            items=items,
            status_history=history,
        )
        db.add(order)
        orders.append(order)

    await db.flush()
    print(f"  Orders: {len(orders)}")
    return orders


async def seed_expenses(db: AsyncSession, users: List[User], orders: List[Order]) -> List[DailyExpense]:
    """A paper and an ink expense for every day that has orders"""
    admin = next(u for u in users if u.role == UserRole.ADMIN)
    expenses = []
    for day in sorted({local_date_of(o.created_at) for o in orders}):
        for category, amount in ((ExpenseCategory.PAPER, 250.0), (ExpenseCategory.INK, 120.0)):
            expense = DailyExpense(
                date=day, category=category, amount=amount,
                description=f"{category.value.title()} restock", created_by=admin.email,
            )
            db.add(expense)
            expenses.append(expense)

    await db.flush()
    print(f"  Expenses: {len(expenses)}")
    return expenses


async def seed_all():
    """Seed all sample data"""
    print("=" * 50)
    print("Starting database seeding...")
    print("=" * 50)

    await init_db()

    async with AsyncSessionLocal() as db:
        users = await seed_users(db)
        addresses = await seed_addresses(db, users)
        orders = await seed_orders(db, users, addresses)
        await seed_expenses(db, users, orders)
        await db.commit()

    print("=" * 50)
    print(f"Seeding complete. Demo password for every account: {DEMO_PASSWORD}")
    print("=" * 50)


async def clear_all():
    """Clear all data from database"""
    print("Clearing all data...")
    async with AsyncSessionLocal() as db:
        # Delete in reverse order of dependencies
        for model in (OrderStatusHistory, OrderItem, Order, DailyExpense, DailyReport, Address, User):
            await db.execute(delete(model))
        await db.commit()
    print("All data cleared")


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1 and sys.argv[1] == "clear":
        asyncio.run(clear_all())
    else:
        asyncio.run(seed_all())
