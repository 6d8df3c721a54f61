"""URL routing for venues, courts and their operating hours."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import CourtViewSet, VenueViewSet

router = DefaultRouter()
router.register(r"courts", CourtViewSet, basename="court")
router.register(r"", VenueViewSet, basename="venue")

urlpatterns = [
    path("", include(router.urls)),
]
