from django.contrib import admin

from ledger_core.models import Season

from .actions import recompute_balances


# Register `Season` model
@admin.register(Season)
class SeasonAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "created_at")
    search_fields = ("name",)
    actions = [recompute_balances]

    # Seasons are opened by the ledger itself; the name is fixed once in use
    def get_readonly_fields(self, request, obj=None):
        if obj is not None:
            return ("name", "created_at")
        return ("created_at",)
