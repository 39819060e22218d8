from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import LedgerManager
from .season import Season


# ---------- Cash book rows ----------
# Flat, season-scoped facts. No derived fields; each one moves the
# season's CashBalance (see services.balances.refresh_cash_balance).
class CashEntry(models.Model):
    amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00"))
    description = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    objects = LedgerManager()

    class Meta:
        abstract = True

    def clean(self):
        if self.amount is not None and self.amount < 0:
            raise ValidationError({"amount": "Amount must be >= 0"})

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)


class FundInput(CashEntry):  # Capital brought into the business
    season = models.ForeignKey(
        Season, on_delete=models.PROTECT, related_name="fund_inputs")
    source = models.CharField(max_length=255)  # e.g. "Owner", "Bank loan"
    date = models.DateField()

    class Meta:
        ordering = ("-date", "-id")
        indexes = [models.Index(fields=["season", "date"], name="fund_input_season_date_idx")]

    def __str__(self):
        return f"{self.source} {self.date}: {self.amount}"


class AdditionalIncome(CashEntry):  # Income that is not a sack sale
    season = models.ForeignKey(
        Season, on_delete=models.PROTECT, related_name="additional_incomes")
    income_source = models.CharField(max_length=255)
    date = models.DateField()

    class Meta:
        ordering = ("-date", "-id")
        indexes = [models.Index(fields=["season", "date"], name="add_income_season_date_idx")]

    def __str__(self):
        return f"{self.income_source} {self.date}: {self.amount}"


class ExpenseCategory(models.Model):
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True, default="")

    class Meta:
        ordering = ("name",)
        verbose_name_plural = "expense categories"

    def __str__(self):
        return self.name


class Expense(CashEntry):  # Cash going out
    season = models.ForeignKey(
        Season, on_delete=models.PROTECT, related_name="expenses")
    category = models.ForeignKey(
        ExpenseCategory, on_delete=models.PROTECT, related_name="expenses")
    expense_date = models.DateField()

    class Meta:
        ordering = ("-expense_date", "-id")
        indexes = [models.Index(fields=["season", "expense_date"], name="expense_season_date_idx")]

    def __str__(self):
        return f"{self.category} {self.expense_date}: {self.amount}"
