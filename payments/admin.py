from django.contrib import admin

from .models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_id", "institute_id", "course_title", "status", "amount", "created_at", "updated_at")
    search_fields = ("order_id", "institute_id", "student_email", "student_phone")
    list_filter = ("status", "payment_mode", "created_at")
    readonly_fields = ("order_id", "amount", "gateway_details", "version", "created_at", "updated_at")
    ordering = ("-created_at",)
