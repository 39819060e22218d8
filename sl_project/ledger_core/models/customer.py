from django.core.exceptions import \
    ValidationError  # Built-in way to raise validation errors
from django.db import \
    models  # ORM base classes to define database tables as Python classes


# ---------- Customer ----------
# Represents the counterparty who buys sacks and pays for them
class Customer(models.Model):

    # The customer’s name as written in the ledger book
    name = models.CharField(max_length=255)

    # Village / market area, used to group customers in lists
    area = models.CharField(max_length=255)

    phone_number = models.CharField(max_length=20, unique=True)

    # Optional photo reference (path or URL), display only
    image = models.CharField(max_length=255, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:

        indexes = [
            models.Index(fields=["name"], name="customer_name_idx"),
            models.Index(fields=["area"], name="customer_area_idx"),
        ]
        ordering = ("name",)

    # Display customer name in admin/UI
    def __str__(self):
        return f"{self.name} ({self.area})"

    def clean(self):
        # Phone numbers are stored as digits with an optional leading "+"
        digits = (self.phone_number or "").lstrip("+")
        if not digits.isdigit() or len(digits) < 10:
            raise ValidationError(
                {"phone_number": "Phone number must have at least 10 digits"}
            )
        return super().clean()

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
