"""
Core views: liveness text and the shop owner's profile.
"""

import logging

from django.http import HttpResponse
from django.views.decorators.http import require_GET

from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from .models import Profile
from .serializers import ProfileSerializer

logger = logging.getLogger(__name__)


@require_GET
def hello(request):
    return HttpResponse("Hello World! Server is up and running.", content_type="text/plain")


@api_view(["GET", "PUT", "PATCH"])
def profile(request):
    """
    Read or upsert the caller's profile.

    The row is keyed by the platform user id and created empty on first read.
    """
    instance, created = Profile.objects.get_or_create(id=request.user.id)
    if created:
        logger.info(f"Created profile for user {request.user.id}")

    if request.method == "GET":
        return Response(ProfileSerializer(instance).data)

    serializer = ProfileSerializer(
        instance, data=request.data, partial=request.method == "PATCH"
    )
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data, status=status.HTTP_200_OK)
