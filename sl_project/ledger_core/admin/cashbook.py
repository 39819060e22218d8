from django.contrib import admin

from ledger_core.models import AdditionalIncome, Expense, ExpenseCategory, FundInput
from ..services import add_cash_entry, delete_cash_entry, update_cash_entry


class CashEntryAdmin(admin.ModelAdmin):
    """Adds, edits and deletes go through the cash book services."""
    list_filter = ("season",)
    readonly_fields = ("created_at",)

    def save_model(self, request, obj, form, change):
        if not change:
            add_cash_entry(obj, user=request.user)
            return
        # only what the form actually changed
        changes = {field: form.cleaned_data[field] for field in form.changed_data}
        stored = type(obj).objects.get(pk=obj.pk)
        update_cash_entry(stored, user=request.user, **changes)

    def delete_model(self, request, obj):
        delete_cash_entry(obj, user=request.user)

    def delete_queryset(self, request, queryset):
        for obj in queryset:
            delete_cash_entry(obj, user=request.user)


@admin.register(FundInput)
class FundInputAdmin(CashEntryAdmin):
    list_display = ("id", "season", "date", "source", "amount")
    search_fields = ("source", "description")
    date_hierarchy = "date"


@admin.register(AdditionalIncome)
class AdditionalIncomeAdmin(CashEntryAdmin):
    list_display = ("id", "season", "date", "income_source", "amount")
    search_fields = ("income_source", "description")
    date_hierarchy = "date"


@admin.register(Expense)
class ExpenseAdmin(CashEntryAdmin):
    list_display = ("id", "season", "expense_date", "category", "amount")
    list_filter = ("season", "category")
    search_fields = ("description", "category__name")
    date_hierarchy = "expense_date"


@admin.register(ExpenseCategory)
class ExpenseCategoryAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "description")
    search_fields = ("name",)
