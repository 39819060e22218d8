from django.contrib import admin

from ledger_core.models import Payment, Transaction
from ..services import (delete_transaction, log_action, record_payment,
                        update_transaction)
from .inlines import PaymentInline, TransactionItemInline


# Register `Transaction` model
@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "customer",
        "season",
        "transaction_date",
        "total_amount",
        "paid_amount",
        "due_amount",
        "payment_status",
    )
    list_filter = ("season", "payment_status", "transaction_date")
    search_fields = ("customer__name", "customer__phone_number", "notes")
    date_hierarchy = "transaction_date"
    inlines = [TransactionItemInline, PaymentInline]
    # derived from lines and payments, never typed in
    readonly_fields = (
        "total_amount",
        "paid_amount",
        "due_amount",
        "payment_status",
        "created_at",
        "updated_at",
    )

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("customer", "season")

    """
        Lines are saved after the parent. Header edits on an existing
        sale are held back and applied by update_transaction once the
        lines are in, so totals, payments and both balance pairs follow.
    """
    def save_model(self, request, obj, form, change):
        if change:
            form.sale_changes = {
                field: form.cleaned_data[field] for field in form.changed_data}
            return
        super().save_model(request, obj, form, change)
        log_action(action="create", instance=obj, user=request.user,
                   changes={"customer": obj.customer_id, "season": obj.season.name})

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        update_transaction(
            form.instance, user=request.user, **getattr(form, "sale_changes", {}))

    def delete_model(self, request, obj):
        delete_transaction(obj, user=request.user)

    def delete_queryset(self, request, queryset):
        for obj in queryset:
            delete_transaction(obj, user=request.user)


# Register `Payment` model
@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "customer",
        "transaction",
        "season",
        "payment_date",
        "amount",
        "received_by",
    )
    list_filter = ("season", "payment_date")
    search_fields = ("customer__name", "received_by", "notes")
    raw_id_fields = ("transaction",)

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("customer", "season", "transaction")

    # Payments are immutable once recorded
    def has_change_permission(self, request, obj=None):
        return obj is None and super().has_change_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        return False

    # route through the ledger so the sale, balances and cash follow
    def save_model(self, request, obj, form, change):
        payment = record_payment(
            obj.customer,
            obj.amount,
            transaction=obj.transaction,
            season=obj.season,
            payment_date=obj.payment_date,
            notes=obj.notes,
            received_by=obj.received_by,
            user=request.user,
        )
        obj.pk = payment.pk
        obj.created_at = payment.created_at
        obj._state.adding = False
