"""
Pricing Service - per-page rate card and print cost calculation

Prices are per printed side of paper:
    sheets = ceil(pages / 2) for double-sided, else pages
    price  = sheets x copies x rate(print type)
"""

import math
from dataclasses import dataclass, asdict
from typing import List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.logging_config import logger
from app.models.order import PrintSide, PrintType
from app.models.report import PricingConfig, DEFAULT_PRICING_ID


@dataclass
class PriceRates:
    """Sale price and production cost per page, in INR"""
    bw_price_per_page: float
    color_price_per_page: float
    bw_cost_per_page: float
    color_cost_per_page: float

    def price_for(self, print_type: Union[PrintType, str]) -> float:
        return self.bw_price_per_page if PrintType(print_type) == PrintType.BW else self.color_price_per_page

    def to_dict(self) -> dict:
        return asdict(self)


def default_rates() -> PriceRates:
    return PriceRates(
        bw_price_per_page=settings.BW_PRICE_PER_PAGE,
        color_price_per_page=settings.COLOR_PRICE_PER_PAGE,
        bw_cost_per_page=settings.BW_COST_PER_PAGE,
        color_cost_per_page=settings.COLOR_COST_PER_PAGE,
    )


def parse_page_range(page_range: Optional[str], total_pages: int) -> List[int]:
    """
    Expand a page selection like "1-3, 5" into sorted, unique page numbers.

    Blank selects every page. Pages outside 1..total_pages and unparseable
    parts are ignored.
    """
    if not page_range or not page_range.strip():
        return list(range(1, total_pages + 1))

    pages = set()
    for part in page_range.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start_str, _, end_str = part.partition("-")
            try:
                start, end = int(start_str), int(end_str)
            except ValueError:
                continue
            for page in range(max(start, 1), min(end, total_pages) + 1):
                pages.add(page)
        else:
            try:
                page = int(part)
            except ValueError:
                continue
            if 1 <= page <= total_pages:
                pages.add(page)

    return sorted(pages)


def count_pages_to_print(page_range: Optional[str], total_pages: int) -> int:
    return len(parse_page_range(page_range, total_pages))


def calculate_print_cost(
    pages: int,
    copies: int,
    print_type: Union[PrintType, str],
    print_side: Union[PrintSide, str],
    rates: Optional[PriceRates] = None,
) -> float:
    """Price of printing ``pages`` pages ``copies`` times"""
    rates = rates or default_rates()
    sheets = math.ceil(pages / 2) if PrintSide(print_side) == PrintSide.DOUBLE else pages
    return float(sheets * copies * rates.price_for(print_type))


def rates_from_config(config: Optional[PricingConfig]) -> PriceRates:
    """Rate card from the stored row, falling back to configured defaults"""
    defaults = default_rates()
    if config is None:
        return defaults
    return PriceRates(
        bw_price_per_page=config.bw_price_per_page if config.bw_price_per_page is not None else defaults.bw_price_per_page,
        color_price_per_page=config.color_price_per_page if config.color_price_per_page is not None else defaults.color_price_per_page,
        bw_cost_per_page=config.bw_cost_per_page if config.bw_cost_per_page is not None else defaults.bw_cost_per_page,
        color_cost_per_page=config.color_cost_per_page if config.color_cost_per_page is not None else defaults.color_cost_per_page,
    )


async def get_pricing(db: AsyncSession) -> PriceRates:
    config = await db.get(PricingConfig, DEFAULT_PRICING_ID)
    return rates_from_config(config)


async def ensure_pricing_config(db: AsyncSession) -> PricingConfig:
    """Create the default rate card row if it does not exist yet"""
    config = await db.get(PricingConfig, DEFAULT_PRICING_ID)
    if config is None:
        defaults = default_rates()
        config = PricingConfig(
            id=DEFAULT_PRICING_ID,
            bw_price_per_page=defaults.bw_price_per_page,
            color_price_per_page=defaults.color_price_per_page,
            double_sided_discount=0.0,
            bw_cost_per_page=defaults.bw_cost_per_page,
            color_cost_per_page=defaults.color_cost_per_page,
        )
        db.add(config)
        await db.flush()
        logger.info("Created default pricing config")
    return config


async def update_pricing(db: AsyncSession, changes: dict) -> PriceRates:
    """Apply non-null rate changes to the default row"""
    config = await ensure_pricing_config(db)
    for field, value in changes.items():
        if value is not None and hasattr(config, field):
            setattr(config, field, value)
    await db.flush()
    rates = rates_from_config(config)
    logger.info("Pricing config updated", extra={"event_type": "pricing_update", **rates.to_dict()})
    return rates
