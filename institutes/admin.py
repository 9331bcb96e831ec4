from django.contrib import admin

from .models import Institute


@admin.register(Institute)
class InstituteAdmin(admin.ModelAdmin):
    list_display = ("institute_id", "business_name", "city", "status", "paytm_enabled", "created_at")
    search_fields = ("institute_id", "business_name", "business_email")
    list_filter = ("status", "paytm_enabled")
