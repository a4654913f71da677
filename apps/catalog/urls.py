"""
URL configuration for catalog app.
"""

from django.urls import path

from . import views

app_name = "catalog"

urlpatterns = [
    path("products/", views.ProductListCreateAPIView.as_view(), name="product_list"),
    path(
        "products/<int:pk>/",
        views.ProductRetrieveUpdateDestroyAPIView.as_view(),
        name="product_detail",
    ),
    path("offers/", views.OfferListCreateAPIView.as_view(), name="offer_list"),
    path("offers/active/", views.active_offers, name="offer_active"),
    path(
        "offers/<int:pk>/",
        views.OfferRetrieveUpdateDestroyAPIView.as_view(),
        name="offer_detail",
    ),
    path("menu/today/", views.todays_menu, name="todays_menu"),
    path("menu/today/<int:entry_id>/", views.remove_menu_entry, name="todays_menu_remove"),
    path("special-numbers/today/", views.special_number_today, name="special_number_today"),
    path(
        "special-numbers/generate/",
        views.generate_special_number,
        name="special_number_generate",
    ),
]
