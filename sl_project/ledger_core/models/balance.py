from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Value
from django.db.models.functions import Coalesce
from ..managers import LedgerManager
from ..utils import format_money
from .customer import Customer
from .season import Season


# ---------- Customer Balance (per customer, per season) ----------
class CustomerBalance(
    models.Model
):  # Materialized roll-up of one customer's sales and payments in one season
    """
    Maintained by services.balances.refresh_customer_balance().
    Always recomputed from Transaction / Payment rows, so a missed
    update heals on the next refresh.
    """

    customer = models.ForeignKey(
        Customer, on_delete=models.CASCADE, related_name="customer_balances"
    )
    season = models.ForeignKey(
        Season, on_delete=models.PROTECT, related_name="customer_balances"
    )

    total_sales = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00")
    )
    total_payments = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00")
    )
    # What the customer still owes (0 when in advance)
    balance = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00")
    )
    # What the customer paid beyond their sales (0 when owing)
    advance_payment = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00")
    )
    """ Example:
            sales 1000, payments 500  -> balance 500, advance 0
            sales 1000, payments 1200 -> balance 0,   advance 200 """

    last_transaction_date = models.DateField(null=True, blank=True)
    last_payment_date = models.DateField(null=True, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    objects = LedgerManager()

    class Meta:
        # “All customers with dues this season, largest first.”
        indexes = [models.Index(fields=["season", "balance"], name="cust_bal_season_balance_idx")]

        constraints = [
            models.UniqueConstraint(
                fields=["customer", "season"],
                name="uq_customer_balance_customer_season",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(balance__gte=0) &
                    models.Q(advance_payment__gte=0)
                ),
                name="cust_bal_non_negative_amounts",
            ),
        ]

    def __str__(self):
        return f"{self.customer.name} {self.season} | {self.display_balance}"

    @property
    def status(self):
        if self.balance > 0:
            return "due"
        if self.advance_payment > 0:
            return "advance"
        return "clear"

    @property
    def display_balance(self):
        if self.balance > 0:
            return f"Due: {format_money(self.balance)}"
        if self.advance_payment > 0:
            return f"Advance: {format_money(self.advance_payment)}"
        return "Clear"

    def clean(self):
        # never owing and in advance at the same time
        if self.balance > 0 and self.advance_payment > 0:
            raise ValidationError(
                "Balance and advance payment cannot both be positive.")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)


# ---------- Cash Balance (cash on hand) ----------
class CashBalance(models.Model):
    # season=None is the all-seasons (global) row
    season = models.OneToOneField(
        Season,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="cash_balance",
    )
    # payments + fund inputs + additional incomes - expenses
    amount = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00")
    )
    last_updated = models.DateField()

    class Meta:
        verbose_name_plural = "cash balances"
        constraints = [
            # NULLs never collide in a unique index; 0 stands in for the global row
            models.UniqueConstraint(
                Coalesce("season", Value(0), output_field=models.BigIntegerField()),
                name="cash_balance_one_per_season",
            ),
        ]

    def __str__(self):
        return f"{self.season or 'All seasons'}: {format_money(self.amount)}"
