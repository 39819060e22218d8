"""
Read-only reports over the ledger.

Every function returns plain dicts/lists (Decimals and dates included)
ready for JsonResponse. Nothing here writes to the database.
"""
import calendar
import datetime
from collections import defaultdict

from django.db.models import Sum

from ..models import (CashBalance, Customer, CustomerBalance, Expense,
                      Payment, SackType, Transaction, TransactionItem)
from ..utils import ZERO, money
from .balances import CASH_IN_SOURCES, CASH_OUT_SOURCES, cash_movements


def _total(qs, field):
    return money(qs.aggregate(total=Sum(field))["total"] or ZERO)


def _sack_type_breakdown(items_qs, include_all=False) -> dict:
    """{sack type name: {"quantity": q, "total": t}}"""
    data = {}
    if include_all:
        # season report lists every sack type, sold or not
        for name in SackType.objects.order_by("name").values_list("name", flat=True):
            data[name] = {"quantity": ZERO, "total": ZERO}

    rows = (
        items_qs.values("sack_type__name")
        .annotate(quantity=Sum("quantity"), total=Sum("total_price"))
        .order_by("sack_type__name")
    )
    for row in rows:
        data[row["sack_type__name"]] = {
            "quantity": money(row["quantity"] or ZERO),
            "total": money(row["total"] or ZERO),
        }
    return data


def _transaction_rows(qs):
    return [
        {
            "id": t.pk,
            "customer": t.customer.name,
            "season": t.season.name,
            "transaction_date": t.transaction_date,
            "total_amount": t.total_amount,
            "paid_amount": t.paid_amount,
            "due_amount": t.due_amount,
            "payment_status": t.payment_status,
        }
        for t in qs.select_related("customer", "season")
    ]


def _payment_rows(qs):
    return [
        {
            "id": p.pk,
            "customer": p.customer.name,
            "transaction": p.transaction_id,
            "payment_date": p.payment_date,
            "amount": p.amount,
            "received_by": p.received_by,
            "notes": p.notes,
        }
        for p in qs.select_related("customer")
    ]


# ----------------------------
# Sales reports
# ----------------------------
def daily_report(day: datetime.date) -> dict:
    transactions = Transaction.objects.filter(transaction_date=day)
    payments = Payment.objects.filter(payment_date=day)
    items = TransactionItem.objects.filter(transaction__transaction_date=day)

    return {
        "date": day,
        "transactions": _transaction_rows(transactions),
        "payments": _payment_rows(payments),
        "total_transactions": _total(transactions, "total_amount"),
        "total_paid": _total(payments, "amount"),
        "sack_types": _sack_type_breakdown(items),
    }


def season_report(season) -> dict:
    transactions = Transaction.objects.for_season(season)
    payments = Payment.objects.for_season(season)
    items = TransactionItem.objects.filter(transaction__season=season)

    # per customer: sales and due from sales, paid from payments
    customers = defaultdict(lambda: {
        "total_transactions": ZERO, "total_due": ZERO, "total_paid": ZERO})
    names = {}
    for row in transactions.values("customer_id", "customer__name").annotate(
        total=Sum("total_amount"), due=Sum("due_amount")
    ):
        names[row["customer_id"]] = row["customer__name"]
        customers[row["customer_id"]]["total_transactions"] = money(row["total"] or ZERO)
        customers[row["customer_id"]]["total_due"] = money(row["due"] or ZERO)
    for row in payments.filter(customer_id__in=names).values("customer_id").annotate(
        paid=Sum("amount")
    ):
        customers[row["customer_id"]]["total_paid"] = money(row["paid"] or ZERO)

    return {
        "season": season.name,
        "total_transactions": _total(transactions, "total_amount"),
        "total_paid": _total(payments, "amount"),
        "total_due": _total(transactions, "due_amount"),
        "sack_types": _sack_type_breakdown(items, include_all=True),
        "customers": [
            {"id": pk, "name": names[pk], **customers[pk]}
            for pk in sorted(names, key=lambda pk: names[pk])
        ],
    }


def customer_report(customer: Customer, season=None) -> dict:
    transactions = Transaction.objects.for_customer(customer, season)
    payments = Payment.objects.for_customer(customer, season)
    items = TransactionItem.objects.filter(transaction__in=transactions)

    return {
        "customer": {"id": customer.pk, "name": customer.name, "area": customer.area},
        "season": season.name if season is not None else None,
        "transactions": _transaction_rows(transactions),
        "payments": _payment_rows(payments),
        "total_transactions": _total(transactions, "total_amount"),
        "total_paid": _total(payments, "amount"),
        "total_due": _total(transactions, "due_amount"),
        "sack_types": _sack_type_breakdown(items),
    }


# ----------------------------
# Cash reports
# ----------------------------
def _daily_totals(sources, season, start, end) -> dict:
    per_day = defaultdict(lambda: ZERO)
    for _, model, date_field in sources:
        rows = (
            model.objects.for_season(season)
            .filter(**{f"{date_field}__range": (start, end)})
            .values(date_field)
            .annotate(total=Sum("amount"))
        )
        for row in rows:
            per_day[row[date_field]] += money(row["total"] or ZERO)
    return per_day


def cash_report(season, year: int, month: int) -> dict:
    """Day-by-day cash in/out with a running balance for one month."""
    start = datetime.date(year, month, 1)
    end = datetime.date(year, month, calendar.monthrange(year, month)[1])

    # everything before the 1st carries over
    opening = cash_movements(season, until=start - datetime.timedelta(days=1))["net"]

    cash_in = _daily_totals(CASH_IN_SOURCES, season, start, end)
    cash_out = _daily_totals(CASH_OUT_SOURCES, season, start, end)

    days = []
    running = opening
    day = start
    while day <= end:
        net = cash_in[day] - cash_out[day]
        running += net
        days.append({
            "date": day,
            "day_name": day.strftime("%A"),
            "cash_in": cash_in[day],
            "cash_out": cash_out[day],
            "net_amount": net,
            "balance": running,
        })
        day += datetime.timedelta(days=1)

    return {
        "season": season.name,
        "month": start.strftime("%B %Y"),
        "opening_balance": opening,
        "closing_balance": running,
        "total_cash_in": sum((d["cash_in"] for d in days), ZERO),
        "total_cash_out": sum((d["cash_out"] for d in days), ZERO),
        "daily_data": days,
    }


def dashboard_summary(season, today: datetime.date) -> dict:
    season_sales = _total(Transaction.objects.for_season(season), "total_amount")
    season_payments = _total(Payment.objects.for_season(season), "amount")
    movements = cash_movements(season)
    balances = CustomerBalance.objects.for_season(season)
    cash = CashBalance.objects.filter(season=season).first()

    return {
        "season": season.name,
        "today": {
            "date": today,
            "sales": _total(Transaction.objects.filter(transaction_date=today), "total_amount"),
            "payments": _total(Payment.objects.filter(payment_date=today), "amount"),
            "expenses": _total(Expense.objects.filter(expense_date=today), "amount"),
        },
        "season_totals": {
            "sales": season_sales,
            "payments": season_payments,
            "fund_inputs": movements["fund_inputs"],
            "additional_incomes": movements["additional_incomes"],
            "expenses": movements["expenses"],
        },
        "customers": {
            "total": Customer.objects.count(),
            "total_due": _total(balances, "balance"),
            "total_advance": _total(balances, "advance_payment"),
            "with_due": balances.filter(balance__gt=0).count(),
        },
        "cash_balance": cash.amount if cash is not None else movements["net"],
        # sales are counted at face value, not as collected
        "season_profit": (
            season_sales
            + movements["additional_incomes"]
            + movements["fund_inputs"]
            - movements["expenses"]
        ),
    }
