"""
Offer engine and day-scoped catalog lookups used at checkout.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from django.db.models import Q

from apps.core.utils import local_today, round_money, weekday_number

from .models import Offer, SpecialNumber, TodaysMenu

logger = logging.getLogger(__name__)


def get_active_offers(user_id, day: Optional[date] = None) -> List[Offer]:
    """
    Return the user's offers running on ``day`` (the local today by default).

    Recurring offers must match the weekday. One-off offers must have started
    and not yet ended.
    """
    day = day or local_today()
    candidates = Offer.objects.filter(user_id=user_id, is_active=True).filter(
        Q(end_date__isnull=True) | Q(end_date__gte=day)
    )

    dow = weekday_number(day)
    active = []
    for offer in candidates:
        if offer.is_recurring:
            if offer.day_of_week == dow:
                active.append(offer)
        elif (offer.start_date is None or offer.start_date <= day) and (
            offer.end_date is None or offer.end_date >= day
        ):
            active.append(offer)
    return active


def _line_discount(offer: Offer, price: Decimal, quantity: int) -> Decimal:
    if offer.discount_type == Offer.PERCENTAGE:
        pct = Decimal(str(offer.discount_value or 0))
        return price * quantity * pct / Decimal("100")
    if offer.discount_type == Offer.BOGO and quantity >= 2:
        return (quantity // 2) * price
    return Decimal("0")


def calculate_offer_discount(
    lines: Iterable[Dict], offers: Iterable[Offer]
) -> Tuple[Decimal, List[int], List[str]]:
    """
    Pick the best single offer for each bill line and total the discounts.

    Each line is a dict with ``product_id``, ``quantity`` and ``price`` (unit
    price). An offer only replaces the current best for a line when its
    discount is strictly greater, so among equal offers the first one wins.

    Returns:
        (total_discount, applied_offer_ids, applied_offer_names), with each
        applied offer listed once in first-applied order.
    """
    offers = list(offers)
    total = Decimal("0")
    applied: Dict[int, str] = {}

    for line in lines:
        price = Decimal(str(line["price"]))
        quantity = int(line["quantity"])
        best_discount = Decimal("0")
        best_offer = None

        for offer in offers:
            if not offer.applies_to(line["product_id"]):
                continue
            discount = _line_discount(offer, price, quantity)
            if discount > best_discount:
                best_discount = discount
                best_offer = offer

        if best_offer is not None and best_discount > 0:
            total += best_discount
            applied.setdefault(best_offer.id, best_offer.name)

    return round_money(total), list(applied.keys()), list(applied.values())


def get_menu_prices(user_id, day: Optional[date] = None) -> Dict[int, Decimal]:
    """Map product id to the price on that day's menu."""
    day = day or local_today()
    entries = TodaysMenu.objects.filter(user_id=user_id, menu_date=day).values_list(
        "product_id", "price"
    )
    return {product_id: price for product_id, price in entries}


def get_special_number(user_id, day: Optional[date] = None) -> Optional[int]:
    day = day or local_today()
    special = SpecialNumber.objects.filter(user_id=user_id, date=day).first()
    return special.number if special else None
