"""
Views for products, offers, today's menu and special numbers.

Every queryset is scoped to the authenticated shop owner.
"""

import logging
import random

from django.db.models import Q
from django.shortcuts import get_object_or_404

from rest_framework import generics, status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from apps.core.utils import local_today

from .models import Offer, Product, SpecialNumber, TodaysMenu
from .serializers import (
    MenuAddSerializer,
    OfferSerializer,
    ProductSerializer,
    SpecialNumberSerializer,
    TodaysMenuSerializer,
)
from .services import get_active_offers

logger = logging.getLogger(__name__)


# Products


class ProductListCreateAPIView(generics.ListCreateAPIView):
    """
    API endpoint for listing and creating products.

    Query parameters:
    - category: Exact category
    - search: Name contains
    """

    serializer_class = ProductSerializer

    def get_queryset(self):
        queryset = Product.objects.filter(user_id=self.request.user.id)

        category = self.request.query_params.get("category")
        if category:
            queryset = queryset.filter(category=category)

        search = self.request.query_params.get("search", "").strip()
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(category__icontains=search))

        return queryset.order_by("id")

    def perform_create(self, serializer):
        serializer.save(user_id=self.request.user.id)


class ProductRetrieveUpdateDestroyAPIView(generics.RetrieveUpdateDestroyAPIView):
    """
    API endpoint for retrieving, updating, and deleting products.
    """

    serializer_class = ProductSerializer

    def get_queryset(self):
        return Product.objects.filter(user_id=self.request.user.id)


# Offers


class OfferListCreateAPIView(generics.ListCreateAPIView):
    """
    API endpoint for listing (newest first) and creating offers.
    """

    serializer_class = OfferSerializer

    def get_queryset(self):
        return Offer.objects.filter(user_id=self.request.user.id).order_by("-created_at", "-id")

    def perform_create(self, serializer):
        offer = serializer.save(user_id=self.request.user.id)
        logger.info(f"Offer {offer.id} '{offer.name}' created by {self.request.user.id}")


class OfferRetrieveUpdateDestroyAPIView(generics.RetrieveUpdateDestroyAPIView):
    """
    API endpoint for retrieving, updating, and deleting offers.
    """

    serializer_class = OfferSerializer

    def get_queryset(self):
        return Offer.objects.filter(user_id=self.request.user.id)


@api_view(["GET"])
def active_offers(request):
    """
    Offers running today in the shop's time zone.
    """
    offers = get_active_offers(request.user.id)
    return Response(OfferSerializer(offers, many=True).data)


# Today's menu


@api_view(["GET", "POST"])
def todays_menu(request):
    """
    List or add to the caller's menu for the local today.

    Request body (POST):
    {
        "product_id": 1,
        "price": "20.00" (optional, defaults to the product price),
        "quantity": 10 (optional, defaults to the product stock)
    }
    """
    today = local_today()

    if request.method == "GET":
        entries = TodaysMenu.objects.filter(user_id=request.user.id, menu_date=today)
        return Response({"todays_menu": TodaysMenuSerializer(entries, many=True).data})

    serializer = MenuAddSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    product = get_object_or_404(Product, id=data["product_id"], user_id=request.user.id)

    entry, created = TodaysMenu.objects.update_or_create(
        user_id=request.user.id,
        product=product,
        menu_date=today,
        defaults={
            "name": product.name,
            "category": product.category,
            "price": data.get("price", product.price),
            "quantity": data.get("quantity", product.quantity),
            "is_available": data.get("is_available", True),
        },
    )
    logger.info(f"{'Added' if created else 'Updated'} {product.name} on menu for {today}")

    return Response(
        TodaysMenuSerializer(entry).data,
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
    )


@api_view(["DELETE"])
def remove_menu_entry(request, entry_id):
    entry = get_object_or_404(TodaysMenu, id=entry_id, user_id=request.user.id)
    entry.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Special numbers


@api_view(["GET", "PUT"])
def special_number_today(request):
    """
    Read or set the caller's special number for the local today.
    """
    today = local_today()

    if request.method == "GET":
        special = SpecialNumber.objects.filter(user_id=request.user.id, date=today).first()
        return Response({"date": today, "number": special.number if special else None})

    serializer = SpecialNumberSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    special, _ = SpecialNumber.objects.update_or_create(
        user_id=request.user.id,
        date=today,
        defaults={"number": serializer.validated_data["number"]},
    )
    logger.info(f"Special number for {today} set to {special.number}")
    return Response(SpecialNumberSerializer(special).data)


@api_view(["POST"])
def generate_special_number(request):
    """A random number from 1 to 100. Nothing is saved."""
    return Response({"number": random.randint(1, 100)})
