"""
Reporting models: the per-page rate card and cached daily aggregates
"""

from sqlalchemy import Column, String, Date, DateTime, Integer, Float
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid


DEFAULT_PRICING_ID = "default"


class PricingConfig(Base):
    """Rate card; a single row keyed 'default'"""
    __tablename__ = "pricing_config"

    id = Column(String(50), primary_key=True, default=DEFAULT_PRICING_ID)

    bw_price_per_page = Column(Float, nullable=False)
    color_price_per_page = Column(Float, nullable=False)
    double_sided_discount = Column(Float, default=0.0, nullable=False)

    # Production cost (paper + toner) per printed page
    bw_cost_per_page = Column(Float, nullable=False)
    color_cost_per_page = Column(Float, nullable=False)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class DailyReport(Base):
    """Last computed aggregate for a calendar day"""
    __tablename__ = "daily_reports"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    date = Column(Date, unique=True, nullable=False, index=True)

    total_orders = Column(Integer, default=0, nullable=False)
    total_copies = Column(Integer, default=0, nullable=False)
    total_pages = Column(Integer, default=0, nullable=False)
    bw_pages = Column(Integer, default=0, nullable=False)
    color_pages = Column(Integer, default=0, nullable=False)

    gross_revenue = Column(Float, default=0.0, nullable=False)
    production_cost = Column(Float, default=0.0, nullable=False)
    other_expenses = Column(Float, default=0.0, nullable=False)
    net_profit = Column(Float, default=0.0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<DailyReport {self.date} net={self.net_profit}>"
