"""
Pytest configuration and fixtures for the Babuji Chaay POS backend.
"""

import uuid
from decimal import Decimal

from django.core.cache import cache
from django.utils import timezone

import pytest

from apps.core.authentication import SupabaseUser


@pytest.fixture(autouse=True)
def clear_cache():
    """Verified tokens are cached, so every test starts with an empty cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def user_id():
    return uuid.UUID("11111111-1111-4111-8111-111111111111")


@pytest.fixture
def other_user_id():
    return uuid.UUID("22222222-2222-4222-8222-222222222222")


@pytest.fixture
def platform_user(user_id):
    """The authenticated shop owner as returned by the auth service."""
    return SupabaseUser({"id": str(user_id), "email": "owner@babujichaay.test"})


@pytest.fixture
def anon_client():
    """
    Fixture for Django REST framework API client without credentials.
    """
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def api_client(platform_user):
    """
    Fixture for an API client authenticated as the shop owner.
    """
    from rest_framework.test import APIClient

    client = APIClient()
    client.force_authenticate(user=platform_user, token="test-token")
    return client


@pytest.fixture
def product_factory(db, user_id):
    """
    Fixture for creating products owned by the test user.
    """
    from apps.catalog.models import Product

    def create(name="Masala Chai", price="20.00", quantity=50, category="Tea", owner=None):
        return Product.objects.create(
            user_id=owner or user_id,
            name=name,
            category=category,
            price=Decimal(price),
            quantity=quantity,
        )

    return create


@pytest.fixture
def offer_factory(db, user_id):
    """
    Fixture for creating offers. Defaults to a one-off offer running today.
    """
    from apps.catalog.models import Offer

    def create(products, name="Chai Happy Hour", discount_type="percentage", value="10", **kwargs):
        defaults = {
            "user_id": user_id,
            "name": name,
            "product_ids": [product.id for product in products],
            "discount_type": discount_type,
            "discount_value": Decimal(value),
            "is_active": True,
            "is_recurring": False,
        }
        defaults.update(kwargs)
        return Offer.objects.create(**defaults)

    return create


@pytest.fixture
def transaction_factory(db, user_id):
    """
    Fixture for writing a bill straight to the database, with its SALE items
    and billing rows, without going through checkout.
    """
    from apps.sales.models import BillingItem, Transaction, TransactionItem

    def create(lines, bill_no=1, discount="0.00", cash="0.00", upi="0.00", created_at=None,
               owner=None):
        owner = owner or user_id
        created_at = created_at or timezone.now()
        subtotal = sum((product.price * qty for product, qty in lines), Decimal("0.00"))
        total = subtotal - Decimal(discount)
        sale = Transaction.objects.create(
            user_id=owner,
            daily_bill_no=bill_no,
            total_amount=total,
            discount=Decimal(discount),
            cash_paid=Decimal(cash) if Decimal(cash) or Decimal(upi) else total,
            upi_paid=Decimal(upi),
            products=[
                {
                    "product_id": product.id,
                    "name": product.name,
                    "quantity": qty,
                    "price": float(product.price),
                }
                for product, qty in lines
            ],
            created_at=created_at,
        )
        for product, qty in lines:
            TransactionItem.objects.create(
                transaction=sale,
                user_id=owner,
                product=product,
                quantity=qty,
                unit_price=product.price,
                item_type=TransactionItem.SALE,
                created_at=created_at,
            )
            BillingItem.objects.create(
                transaction=sale, menu_item=product, quantity=qty, price=product.price * qty
            )
        return sale

    return create


@pytest.fixture
def checkout(api_client):
    """
    Fixture that completes a sale through the checkout endpoint.
    """

    def post(items, cash="0.00", upi="0.00"):
        payload = {
            "items": [{"product_id": product.id, "quantity": qty} for product, qty in items],
            "cash_paid": cash,
            "upi_paid": upi,
        }
        return api_client.post("/api/transactions/checkout/", payload, format="json")

    return post
