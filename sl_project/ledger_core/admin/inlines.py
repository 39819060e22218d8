from django.contrib import admin

from ledger_core.models import Payment, TransactionItem

# ---------- Helpful inline admin classes ----------


class TransactionItemInline(admin.TabularInline):
    """Shows sack-type lines under a Transaction page"""

    model = TransactionItem
    extra = 0  # don’t show “empty” rows by default (prevents clutter)
    fields = ("sack_type", "quantity", "unit_price", "total_price")
    show_change_link = False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("sack_type")

    # Lines are fixed once the sale has payments
    def get_readonly_fields(self, request, obj=None):
        if obj and obj.payments.exists():
            return self.fields
        return ("total_price",)

    def has_add_permission(self, request, obj=None):
        if obj and obj.payments.exists():
            return False
        return super().has_add_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj and obj.payments.exists():
            return False
        return super().has_delete_permission(request, obj)


class PaymentInline(admin.TabularInline):
    """Payments settling a Transaction, always read-only"""

    model = Payment
    extra = 0
    fields = ("payment_date", "amount", "received_by", "notes")
    readonly_fields = fields
    can_delete = False
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        # payments go through the Payment admin so balances follow
        return False
