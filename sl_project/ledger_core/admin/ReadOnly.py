from django.contrib import admin


class ReadOnlyAdmin(admin.ModelAdmin):
    """
    View-only pages for rows the ledger writes itself
    (balances and the audit trail). Fix the source entries
    or run "Recompute balances" instead of editing these.
    """
    list_per_page = 50

    def has_add_permission(self, request):
        return False

    # view permission still shows the detail page, all fields read-only
    def has_change_permission(self, request, obj=None):
        return False

    # also drops the bulk delete action
    def has_delete_permission(self, request, obj=None):
        return False
