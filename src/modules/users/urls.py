"""User URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.users.views import UserViewSet

router = DefaultRouter(trailing_slash=True)
router.register("users", UserViewSet, basename="user")

urlpatterns = router.urls
