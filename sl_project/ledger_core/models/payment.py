from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import LedgerManager
from .customer import Customer
from .season import Season
from .transaction import Transaction


class Payment(models.Model):  # Money received from a customer

    customer = models.ForeignKey(
        Customer, on_delete=models.CASCADE, related_name="payments"
    )

    # Optionally settles a specific sale; blocks deleting that sale
    # unless the whole customer is being deleted
    """ A payment without a transaction still counts
        towards the customer's season balance. """
    transaction = models.ForeignKey(
        Transaction,
        null=True,
        blank=True,
        on_delete=models.RESTRICT,
        related_name="payments",
    )

    season = models.ForeignKey(
        Season, on_delete=models.PROTECT, related_name="payments"
    )

    payment_date = models.DateField()
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    notes = models.TextField(blank=True, default="")
    # Who took the cash
    received_by = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    objects = LedgerManager()

    class Meta:
        ordering = ("-payment_date", "-id")
        indexes = [
            models.Index(fields=["season", "payment_date"], name="payment_season_date_idx"),
            models.Index(fields=["customer", "season"], name="payment_customer_season_idx"),
        ]

        # Ensure amount is always positive
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="payment_positive_amount",
            ),
        ]

    def __str__(self):
        return f"Payment {self.pk} - {self.customer.name} - {self.amount}"

    def clean(self):
        if self.amount is not None and self.amount <= Decimal("0.00"):
            raise ValidationError({"amount": "Payment amount must be positive"})

        # A payment can only settle the paying customer's own sale
        if (
            self.transaction_id
            and self.customer_id
            and self.transaction.customer_id != self.customer_id
        ):
            raise ValidationError(
                {"transaction": "Transaction belongs to a different customer."}
            )

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
