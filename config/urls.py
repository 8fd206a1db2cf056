"""URL configuration for the vendor ops notification backend."""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("notifications/", include("apps.notifications.urls")),
    path("push/", include("apps.push.urls")),
]
