from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models


# ---------- Sack types (priced inventory category) ----------
class SackType(models.Model):  # Represents a kind of sack the business sells

    # Required human-readable name, e.g. "Feed", "Gom", "Chot", "Vushi"
    name = models.CharField(max_length=255, unique=True)

    # Current price per sack
    """ Changing the price only affects future line items:
        each TransactionItem copies the price at the time of sale. """
    price = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )

    class Meta:
        ordering = ("name",)

        # Ensure price is never negative
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="sack_type_non_negative_price",
            ),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if self.price is not None and self.price < 0:
            raise ValidationError({"price": "Price must be >= 0"})

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
