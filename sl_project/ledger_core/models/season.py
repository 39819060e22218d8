from django.db import models        # ORM base classes to define database tables as Python classes
from ..managers import SeasonManager


# ---------- Season (accounting period) ----------
class Season(models.Model):  # Each Season groups the sales, payments and cash movements of one trading year

    # Human-readable label for the season
    name = models.CharField(max_length=50, unique=True)  # Example: "Eiri2025"
    """
        One row per name.
        Rows are created lazily by the season resolver the first time
        a sale or payment lands in that period.
    """

    created_at = models.DateTimeField(auto_now_add=True)

    objects = SeasonManager()

    class Meta:
        # Default query ordering: seasons are returned by name
        ordering = ("name",)

    def __str__(self):
        return self.name  # Example: "Eiri2026"
