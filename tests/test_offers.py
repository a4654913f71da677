"""
Tests for the offer engine.

Tests cover:
- Which offers are running on a given day
- Percentage and buy-one-get-one line discounts
- Best-offer selection per line
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from apps.catalog.models import Offer
from apps.catalog.services import calculate_offer_discount, get_active_offers


def _line(product, quantity, price=None):
    return {"product_id": product.id, "quantity": quantity, "price": price or product.price}


@pytest.mark.django_db
class TestActiveOffers:
    """Test which offers run on a given day."""

    def test_recurring_offer_matches_weekday(self, user_id, product_factory, offer_factory):
        chai = product_factory()
        # 2026-10-18 is a Sunday
        sunday = date(2026, 10, 18)
        offer = offer_factory([chai], is_recurring=True, day_of_week=0)

        assert get_active_offers(user_id, sunday) == [offer]
        assert get_active_offers(user_id, sunday + timedelta(days=1)) == []

    def test_one_off_offer_respects_date_window(self, user_id, product_factory, offer_factory):
        chai = product_factory()
        offer = offer_factory(
            [chai], start_date=date(2026, 10, 10), end_date=date(2026, 10, 12)
        )

        assert get_active_offers(user_id, date(2026, 10, 9)) == []
        assert get_active_offers(user_id, date(2026, 10, 10)) == [offer]
        assert get_active_offers(user_id, date(2026, 10, 12)) == [offer]
        assert get_active_offers(user_id, date(2026, 10, 13)) == []

    def test_open_ended_offer_is_active(self, user_id, product_factory, offer_factory):
        chai = product_factory()
        offer = offer_factory([chai])

        assert get_active_offers(user_id, date(2026, 10, 17)) == [offer]

    def test_inactive_offer_is_ignored(self, user_id, product_factory, offer_factory):
        chai = product_factory()
        offer_factory([chai], is_active=False)

        assert get_active_offers(user_id, date(2026, 10, 17)) == []

    def test_other_users_offers_are_ignored(
        self, user_id, other_user_id, product_factory, offer_factory
    ):
        chai = product_factory()
        offer_factory([chai], user_id=other_user_id)

        assert get_active_offers(user_id, date(2026, 10, 17)) == []


@pytest.mark.django_db
class TestOfferDiscount:
    """Test discount calculation over bill lines."""

    def test_percentage_discount(self, product_factory, offer_factory):
        chai = product_factory(price="20.00")
        offer = offer_factory([chai], value="10")

        total, ids, names = calculate_offer_discount([_line(chai, 3)], [offer])

        assert total == Decimal("6.00")
        assert ids == [offer.id]
        assert names == ["Chai Happy Hour"]

    def test_bogo_discount_gives_every_second_item_free(self, product_factory, offer_factory):
        samosa = product_factory(name="Samosa", price="15.00")
        offer = offer_factory([samosa], name="Samosa BOGO", discount_type="bogo", value="0")

        total, ids, _ = calculate_offer_discount([_line(samosa, 5)], [offer])

        assert total == Decimal("30.00")
        assert ids == [offer.id]

    def test_bogo_needs_two_items(self, product_factory, offer_factory):
        samosa = product_factory(name="Samosa", price="15.00")
        offer = offer_factory([samosa], discount_type="bogo", value="0")

        total, ids, names = calculate_offer_discount([_line(samosa, 1)], [offer])

        assert total == Decimal("0.00")
        assert ids == []
        assert names == []

    def test_best_offer_wins_per_line(self, product_factory, offer_factory):
        chai = product_factory(price="20.00")
        small = offer_factory([chai], name="Small", value="5")
        big = offer_factory([chai], name="Big", value="25")

        total, ids, names = calculate_offer_discount([_line(chai, 2)], [small, big])

        assert total == Decimal("10.00")
        assert ids == [big.id]
        assert names == ["Big"]

    def test_first_offer_wins_a_tie(self, product_factory, offer_factory):
        chai = product_factory(price="20.00")
        first = offer_factory([chai], name="First", value="50")
        second = offer_factory([chai], name="Second", discount_type="bogo", value="0")

        _, ids, _ = calculate_offer_discount([_line(chai, 2)], [first, second])

        assert ids == [first.id]

    def test_offer_only_applies_to_listed_products(self, product_factory, offer_factory):
        chai = product_factory(price="20.00")
        bun = product_factory(name="Bun Maska", price="30.00")
        offer = offer_factory([chai], value="10")

        total, ids, _ = calculate_offer_discount([_line(chai, 1), _line(bun, 2)], [offer])

        assert total == Decimal("2.00")
        assert ids == [offer.id]

    def test_offer_listed_once_across_lines(self, product_factory, offer_factory):
        chai = product_factory(price="20.00")
        coffee = product_factory(name="Filter Coffee", price="30.00")
        offer = offer_factory([chai, coffee], value="10")

        total, ids, names = calculate_offer_discount(
            [_line(chai, 1), _line(coffee, 1)], [offer]
        )

        assert total == Decimal("5.00")
        assert ids == [offer.id]
        assert names == [offer.name]

    def test_discount_rounds_half_up(self, product_factory, offer_factory):
        chai = product_factory(price="0.25")
        offer = offer_factory([chai], value="10")

        total, _, _ = calculate_offer_discount([_line(chai, 1)], [offer])

        # 0.025 rounds to 0.03
        assert total == Decimal("0.03")

    def test_no_offers(self, product_factory):
        chai = product_factory()

        assert calculate_offer_discount([_line(chai, 2)], []) == (Decimal("0.00"), [], [])


@pytest.mark.django_db
class TestOfferEndpoints:
    """Test the offer API."""

    def test_create_percentage_offer(self, api_client, user_id, product_factory):
        chai = product_factory()

        response = api_client.post(
            "/api/offers/",
            {
                "name": "Monsoon Special",
                "product_ids": [chai.id],
                "discount_type": "percentage",
                "discount_value": "15.00",
                "start_date": "2026-10-01",
                "end_date": "2026-10-31",
            },
            format="json",
        )

        assert response.status_code == 201
        offer = Offer.objects.get(id=response.json()["id"])
        assert offer.user_id == user_id
        assert offer.product_ids == [chai.id]

    def test_percentage_over_100_rejected(self, api_client, product_factory):
        chai = product_factory()

        response = api_client.post(
            "/api/offers/",
            {
                "name": "Too Generous",
                "product_ids": [chai.id],
                "discount_type": "percentage",
                "discount_value": "150",
            },
            format="json",
        )

        assert response.status_code == 400
        assert "discount_value" in response.json()["details"]

    def test_recurring_offer_needs_day_of_week(self, api_client, product_factory):
        chai = product_factory()

        response = api_client.post(
            "/api/offers/",
            {
                "name": "Weekly",
                "product_ids": [chai.id],
                "discount_type": "bogo",
                "discount_value": "0",
                "is_recurring": True,
            },
            format="json",
        )

        assert response.status_code == 400
        assert "day_of_week" in response.json()["details"]

    def test_recurring_offer_clears_dates(self, api_client, product_factory):
        chai = product_factory()

        response = api_client.post(
            "/api/offers/",
            {
                "name": "Sunday BOGO",
                "product_ids": [chai.id],
                "discount_type": "bogo",
                "discount_value": "0",
                "is_recurring": True,
                "day_of_week": 0,
                "start_date": "2026-10-01",
            },
            format="json",
        )

        assert response.status_code == 201
        assert response.json()["start_date"] is None

    def test_unknown_product_rejected(self, api_client, other_user_id, product_factory):
        foreign = product_factory(owner=other_user_id)

        response = api_client.post(
            "/api/offers/",
            {
                "name": "Sneaky",
                "product_ids": [foreign.id],
                "discount_type": "percentage",
                "discount_value": "10",
            },
            format="json",
        )

        assert response.status_code == 400
        assert "product_ids" in response.json()["details"]

    def test_active_offers_endpoint(self, api_client, product_factory, offer_factory):
        chai = product_factory()
        running = offer_factory([chai], name="Running")
        offer_factory([chai], name="Paused", is_active=False)

        response = api_client.get("/api/offers/active/")

        assert response.status_code == 200
        assert [row["id"] for row in response.json()] == [running.id]
