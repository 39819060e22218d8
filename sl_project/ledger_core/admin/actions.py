from django.contrib import admin, messages
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from ..services import recompute_season

# ---------- Admin actions ----------


@admin.action(description="Recompute balances")
# Rebuild customer and cash balances of the selected seasons
def recompute_balances(
    modeladmin,  # `ModelAdmin` class for Season
    request,  # HTTP request object
    queryset,  # seasons the admin selected from list view
):
    """
    Admin action: rebuild every CustomerBalance and the CashBalance
    of each selected season from source rows.
    - Each season runs in its own transaction (see recompute_season).
    - Reports success / per-season failures via admin messages.
    """
    total = queryset.count()
    success = 0
    failures = 0

    for season in queryset:
        try:
            count = recompute_season(season, user=request.user)
            success += 1
            modeladmin.message_user(
                request,
                _("%(season)s: %(count)d customer balances rebuilt")
                % {"season": season, "count": count},
            )
        except ValidationError as exc:
            failures += 1
            modeladmin.message_user(
                request,
                _("Could not recompute %(season)s: %(err)s")
                % {"season": season, "err": exc},
                level=messages.ERROR,
            )

    # Final summary message
    modeladmin.message_user(
        request,
        _("Recomputed %(success)d of %(total)d seasons. %(failures)d failed.") % {
            "success": success,
            "total": total,
            "failures": failures,
        },
        level=messages.SUCCESS if failures == 0 else messages.WARNING,
    )
