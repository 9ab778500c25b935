from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("service_orders.urls", namespace="service_orders")),
    path("api/notifications/", include("notifications.urls", namespace="notifications")),
]
