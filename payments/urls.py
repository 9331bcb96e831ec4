from django.urls import path

from . import views

app_name = "payments"
urlpatterns = [
    path("", views.order_list_view, name="order_list"),
    path("order", views.create_order_view, name="create_order"),
    path("order/<str:order_id>", views.order_status_view, name="order_status"),
    path("institute/<str:institute_id>", views.institute_orders_view, name="institute_orders"),
    path("callback", views.paytm_callback_view, name="callback"),
    # Alias matching the callback URL registered with Paytm
    path("paytm/callback", views.paytm_callback_view, name="paytm_callback"),
]
