from django.contrib import admin

from ledger_core.models import CashBalance, CustomerBalance

from .ReadOnly import ReadOnlyAdmin


@admin.register(CustomerBalance)
class CustomerBalanceAdmin(ReadOnlyAdmin):
    list_display = (
        "customer",
        "season",
        "total_sales",
        "total_payments",
        "display_balance",
        "last_transaction_date",
        "last_payment_date",
    )
    list_filter = ("season",)
    search_fields = ("customer__name", "customer__phone_number", "season__name")
    ordering = ("season", "-balance")

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("customer", "season")


@admin.register(CashBalance)
class CashBalanceAdmin(ReadOnlyAdmin):
    list_display = ("__str__", "season", "amount", "last_updated")
    list_filter = ("last_updated",)
