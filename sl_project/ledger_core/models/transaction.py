from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import LedgerManager, TransactionItemSackTypeManager
from ..utils import ZERO, money
from .customer import Customer
from .sack_type import SackType
from .season import Season

PAYMENT_STATUS_CHOICES = [
    ("paid", "Paid"),
    ("partial", "Partial"),
    ("due", "Due"),
]


class Transaction(models.Model):  # Represents one sale to a customer

    # Deleting a customer removes their sales history with them
    customer = models.ForeignKey(
        Customer, on_delete=models.CASCADE, related_name="transactions"
    )

    # Seasons are never deleted while they hold entries
    season = models.ForeignKey(
        Season, on_delete=models.PROTECT, related_name="transactions"
    )

    transaction_date = models.DateField()

    # Sum of all line totals
    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    # Sum of payments applied so far
    paid_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    # total_amount - paid_amount, negative when overpaid
    due_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    payment_status = models.CharField(
        max_length=10, choices=PAYMENT_STATUS_CHOICES, default="due"
    )
    """ Derived, never set by hand:
        paid    = nothing left to pay (due <= 0)
        partial = something paid, something still due
        due     = nothing paid yet """

    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = LedgerManager()

    class Meta:
        ordering = ("-transaction_date", "-id")
        indexes = [
            models.Index(fields=["season", "transaction_date"], name="txn_season_date_idx"),
            models.Index(fields=["customer", "season"], name="txn_customer_season_idx"),
            models.Index(fields=["season", "payment_status"], name="txn_season_status_idx"),
        ]

        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=0) &
                models.Q(paid_amount__gte=0),
                name="txn_non_negative_amounts",
            ),
        ]

    def __str__(self):
        return f"Txn {self.pk} - {self.customer.name} - {self.total_amount}"

    """ Keep paid/due/status consistent on every save """

    def recalc_payment_state(self):
        # evaluated from scratch every time, never incrementally
        self.total_amount = money(self.total_amount or ZERO)
        self.paid_amount = money(self.paid_amount or ZERO)
        self.due_amount = self.total_amount - self.paid_amount

        if self.due_amount <= ZERO:
            self.payment_status = "paid"
        elif self.paid_amount > ZERO:
            self.payment_status = "partial"
        else:
            self.payment_status = "due"

    def recalc_totals(self):
        # guard if no pk: there are no lines yet
        if not getattr(self, "pk", None):
            self.total_amount = ZERO
        else:
            self.total_amount = sum(
                (line.total_price for line in self.items.all()), ZERO
            )
        self.recalc_payment_state()

    @property
    def overpaid_amount(self):
        # surplus kept on the sale when a payment exceeds what was due
        return max(-self.due_amount, ZERO)

    def clean(self):
        if self.total_amount is not None and self.total_amount < 0:
            raise ValidationError({"total_amount": "Total must be >= 0"})
        if self.paid_amount is not None and self.paid_amount < 0:
            raise ValidationError({"paid_amount": "Paid amount must be >= 0"})

    def save(self, *args, **kwargs):
        self.recalc_payment_state()
        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            # derived fields always travel with any amount change
            kwargs["update_fields"] = set(update_fields) | {
                "due_amount", "payment_status", "updated_at"}
        self.full_clean()
        return super().save(*args, **kwargs)


class TransactionItem(models.Model):  # One sack-type line within a sale

    transaction = models.ForeignKey(
        Transaction, on_delete=models.CASCADE, related_name="items")

    # You can’t delete a sack type that has been sold
    sack_type = models.ForeignKey(
        SackType, on_delete=models.PROTECT, related_name="transaction_items")

    # Core pricing logic: quantity × unit_price = total_price
    quantity = models.DecimalField(max_digits=10, decimal_places=2)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(
        max_digits=12, decimal_places=2, blank=True)

    objects = models.Manager()
    from_sack_type = TransactionItemSackTypeManager()  # autofill unit_price

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0) &
                models.Q(unit_price__gte=0) &
                models.Q(total_price__gte=0),
                name="txn_item_non_negative_amounts",
            ),
        ]

    def __str__(self):
        return f"{self.sack_type} x {self.quantity} = {self.total_price}"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._stored_pricing = instance._pricing()
        return instance

    def refresh_from_db(self, *args, **kwargs):
        super().refresh_from_db(*args, **kwargs)
        self._stored_pricing = self._pricing()

    def _pricing(self):
        # __dict__ so deferred fields don't trigger a query
        return tuple(self.__dict__.get(f) for f in ("quantity", "unit_price", "total_price"))

    def clean(self):
        if self.quantity is not None and self.quantity <= 0:
            raise ValidationError({"quantity": "Quantity must be > 0"})
        if self.unit_price is not None and self.unit_price < 0:
            raise ValidationError({"unit_price": "Unit price must be >= 0"})

    def _needs_total(self):
        if self.total_price is None:
            return True
        stored = getattr(self, "_stored_pricing", None)
        if stored is None:
            return False
        quantity, unit_price, total_price = stored
        # quantity or price edited while the total was left alone
        repriced = (self.quantity, self.unit_price) != (quantity, unit_price)
        return repriced and self.total_price == total_price

    def save(self, *args, **kwargs):
        # total follows unit_price x quantity unless the caller set its own
        if self._needs_total():
            self.total_price = money(
                money(self.unit_price, "unit_price") * money(self.quantity, "quantity"),
                "total_price",
            )
        self.full_clean()
        result = super().save(*args, **kwargs)
        self._stored_pricing = self._pricing()
        return result
