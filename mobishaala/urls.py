from django.contrib import admin
from django.urls import include, path

from . import views

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/health", views.health_view, name="health"),
    path("api/payments/", include("payments.urls")),
]

handler404 = "mobishaala.views.error_404_view"
handler500 = "mobishaala.views.error_500_view"
