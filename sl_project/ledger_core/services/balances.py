import datetime
import logging

from django.db import transaction
from django.db.models import Max, Sum
from django.utils import timezone

from ..models import (AdditionalIncome, CashBalance, Customer, CustomerBalance,
                      Expense, FundInput, Payment, Season, Transaction)
from ..utils import ZERO, money
from .audit_helper import log_action

logger = logging.getLogger(__name__)

# Cash in / out sources and the column holding their date
CASH_IN_SOURCES = (
    ("payments", Payment, "payment_date"),
    ("fund_inputs", FundInput, "date"),
    ("additional_incomes", AdditionalIncome, "date"),
)
CASH_OUT_SOURCES = (
    ("expenses", Expense, "expense_date"),
)


def _sum(qs, field="amount"):
    # Sum() over no rows is None -> fall back to 0
    return money(qs.aggregate(total=Sum(field))["total"] or ZERO)


# ------------------------------------
# Customer balance workflows
# ------------------------------------
def refresh_customer_balance(customer, season) -> CustomerBalance:
    """
    Upsert the (customer, season) roll-up from source rows.
    Call inside the same atomic block as the mutation that changed them.
    """
    with transaction.atomic():
        # Grab the row for (customer, season) or create one if missing,
        # locked until the surrounding transaction finishes
        cb, created = CustomerBalance.objects.select_for_update().get_or_create(
            customer=customer,
            season=season,
        )

        sales = Transaction.objects.for_customer(customer, season).aggregate(
            total=Sum("total_amount"),
            last=Max("transaction_date"),
        )
        payments = Payment.objects.for_customer(customer, season).aggregate(
            total=Sum("amount"),
            last=Max("payment_date"),
        )

        cb.total_sales = money(sales["total"] or ZERO)
        cb.total_payments = money(payments["total"] or ZERO)
        net = cb.total_sales - cb.total_payments
        # owing and advance are two halves of the same signed number
        cb.balance = max(net, ZERO)
        cb.advance_payment = max(-net, ZERO)
        cb.last_transaction_date = sales["last"]
        cb.last_payment_date = payments["last"]
        cb.save()

    logger.debug(
        "Customer %s season %s: sales=%s payments=%s status=%s",
        customer.pk, season, cb.total_sales, cb.total_payments, cb.status,
    )
    return cb


def customer_balance_summary(customer, season) -> dict:
    """Read-only view of a customer's season balance."""
    cb = CustomerBalance.objects.filter(customer=customer, season=season).first()
    if cb is None:
        return {
            "total_sales": ZERO,
            "total_payments": ZERO,
            "balance": ZERO,
            "advance_payment": ZERO,
            "status": "no_transaction",
            "last_transaction_date": None,
            "last_payment_date": None,
        }
    return {
        "total_sales": cb.total_sales,
        "total_payments": cb.total_payments,
        "balance": cb.balance,
        "advance_payment": cb.advance_payment,
        "status": cb.status,
        "last_transaction_date": cb.last_transaction_date,
        "last_payment_date": cb.last_payment_date,
    }


# ------------------------------------
# Cash balance workflows
# ------------------------------------
def cash_movements(season=None, *, on=None, until=None) -> dict:
    """
    Totals of every cash source, optionally for one day (on=)
    or up to and including a day (until=). season=None spans all seasons.
    """
    totals = {}
    for key, model, date_field in CASH_IN_SOURCES + CASH_OUT_SOURCES:
        qs = model.objects.all()
        if season is not None:
            qs = qs.for_season(season)
        if on is not None:
            qs = qs.filter(**{date_field: on})
        if until is not None:
            qs = qs.filter(**{f"{date_field}__lte": until})
        totals[key] = _sum(qs)

    totals["cash_in"] = sum((totals[k] for k, _, _ in CASH_IN_SOURCES), ZERO)
    totals["cash_out"] = sum((totals[k] for k, _, _ in CASH_OUT_SOURCES), ZERO)
    totals["net"] = totals["cash_in"] - totals["cash_out"]
    return totals


def refresh_cash_balance(season, today: datetime.date | None = None) -> CashBalance:
    """Recompute cash on hand for one season (or all seasons when season is None)."""
    if today is None:
        today = timezone.localdate()

    with transaction.atomic():
        cash, _ = CashBalance.objects.select_for_update().get_or_create(
            season=season,
            defaults={"last_updated": today},
        )
        cash.amount = cash_movements(season)["net"]
        cash.last_updated = today
        cash.save(update_fields=["amount", "last_updated"])

    logger.debug("Cash balance %s -> %s", season or "all seasons", cash.amount)
    return cash


def refresh_global_cash_balance(today: datetime.date | None = None) -> CashBalance:
    return refresh_cash_balance(None, today=today)


# ------------------------------------
# Full rebuild
# ------------------------------------
def recompute_season(season: Season, user=None, today: datetime.date | None = None) -> int:
    """
    Rebuild every customer balance of a season and its cash balance.
    Returns the number of customer balances refreshed.
    """
    with transaction.atomic():
        customer_ids = set(
            Transaction.objects.for_season(season).values_list("customer_id", flat=True)
        )
        customer_ids |= set(
            Payment.objects.for_season(season).values_list("customer_id", flat=True)
        )
        # rows whose source entries are gone get zeroed, not left stale
        customer_ids |= set(
            CustomerBalance.objects.for_season(season).values_list("customer_id", flat=True)
        )

        for customer in Customer.objects.filter(pk__in=customer_ids):
            refresh_customer_balance(customer, season)

        cash = refresh_cash_balance(season, today=today)
        refresh_global_cash_balance(today=today)

        log_action(
            action="recompute",
            instance=season,
            user=user,
            changes={
                "customer_balances": len(customer_ids),
                "cash_balance": str(cash.amount),
            },
        )

    logger.info("Recomputed %d customer balances for %s", len(customer_ids), season)
    return len(customer_ids)
