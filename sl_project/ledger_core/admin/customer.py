from django.contrib import admin

from ledger_core.models import Customer, SackType


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "area", "phone_number", "created_at")
    search_fields = ("name", "area", "phone_number")
    list_filter = ("area",)


@admin.register(SackType)
class SackTypeAdmin(admin.ModelAdmin):
    # price changes only affect future sales
    list_display = ("id", "name", "price")
    search_fields = ("name",)
