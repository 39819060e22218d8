import datetime
import logging
from typing import Iterable, Mapping

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from ..exceptions import LedgerIntegrityError
from ..models import SackType, Transaction, TransactionItem
from ..utils import ZERO, money
from .audit_helper import log_action
from .balances import (refresh_cash_balance, refresh_customer_balance,
                       refresh_global_cash_balance)
from .seasons import resolve_season

logger = logging.getLogger(__name__)

SALE_PAYMENT_NOTE = "Payment during transaction"
UPDATE_PAYMENT_NOTE = "Payment during transaction update"


# ----------------------------
# Sale (transaction) workflows
# ----------------------------
def _normalize_items(items: Iterable[Mapping]) -> list[dict]:
    """Validate raw item mappings and fill in unit/total prices."""
    items = list(items or [])
    if not items:
        raise ValidationError({"items": "A transaction needs at least one item."})

    max_items = getattr(settings, "LEDGER_MAX_ITEMS_PER_TRANSACTION", 20)
    if len(items) > max_items:
        raise ValidationError(
            {"items": f"A transaction can hold at most {max_items} items."})

    lines = []
    for raw in items:
        sack_type = raw.get("sack_type")
        if sack_type is None:
            raise ValidationError({"sack_type": "This field is required."})
        if not isinstance(sack_type, SackType):
            sack_type = SackType.objects.get(pk=sack_type)

        quantity = money(raw.get("quantity"), "quantity")
        if quantity <= 0:
            raise ValidationError({"quantity": "Quantity must be > 0"})

        # price copied from the sack type when not given
        unit_price = raw.get("unit_price")
        unit_price = sack_type.price if unit_price in (None, "") else unit_price
        unit_price = money(unit_price, "unit_price")
        if unit_price < 0:
            raise ValidationError({"unit_price": "Unit price must be >= 0"})

        total_price = raw.get("total_price")
        if total_price in (None, ""):
            total_price = money(unit_price * quantity, "total_price")
        else:
            total_price = money(total_price, "total_price")

        lines.append({
            "sack_type": sack_type,
            "quantity": quantity,
            "unit_price": unit_price,
            "total_price": total_price,
        })
    return lines


def create_transaction(
    customer,
    items,
    season=None,
    transaction_date: datetime.date | None = None,
    notes: str = "",
    paid_amount=0,
    today: datetime.date | None = None,
    user=None,
) -> Transaction:
    """
    Record a sale with its line items.
    total = sum of line totals, nothing paid yet. A non-zero paid_amount
    is booked as a Payment against the new sale in the same unit of work.
    """
    if today is None:
        today = timezone.localdate()
    lines = _normalize_items(items)
    paid_amount = money(paid_amount or ZERO, "paid_amount")
    if paid_amount < 0:
        raise ValidationError({"paid_amount": "Paid amount must be >= 0"})

    with transaction.atomic():
        season = resolve_season(season, today)
        txn = Transaction.objects.create(
            customer=customer,
            season=season,
            transaction_date=transaction_date or today,
            notes=notes or "",
        )

        TransactionItem.objects.bulk_create(
            [TransactionItem(transaction=txn, **line) for line in lines])

        txn.total_amount = sum((line["total_price"] for line in lines), ZERO)
        txn.paid_amount = ZERO
        txn.save(update_fields=["total_amount", "paid_amount"])

        log_action(
            action="create",
            instance=txn,
            user=user,
            changes={
                "customer": customer.pk,
                "season": season.name,
                "total_amount": str(txn.total_amount),
                "items": len(lines),
            },
        )

        if paid_amount > 0:
            # imported here: payments depends on this module
            from .payments import record_payment

            record_payment(
                customer,
                paid_amount,
                transaction=txn,
                season=season,
                payment_date=txn.transaction_date,
                notes=SALE_PAYMENT_NOTE,
                today=today,
                user=user,
            )
            txn.refresh_from_db()
        else:
            refresh_customer_balance(customer, season)

    logger.info(
        "Transaction %s for customer %s in %s: total=%s paid=%s",
        txn.pk, customer.pk, season, txn.total_amount, txn.paid_amount,
    )
    return txn


def apply_payment(txn: Transaction, amount) -> Transaction:
    """
    Add a payment to a sale and re-derive due/status.
    Locks the sale row; due_amount is allowed to go negative.
    """
    amount = money(amount)
    with transaction.atomic():
        locked = Transaction.objects.select_for_update().get(pk=txn.pk)
        locked.paid_amount = locked.paid_amount + amount
        # save() re-runs recalc_payment_state from scratch
        locked.save(update_fields=["paid_amount"])

    if locked.due_amount < 0:
        logger.warning(
            "Transaction %s overpaid by %s", locked.pk, locked.overpaid_amount)
    return locked


def resync_transaction_payments(txn: Transaction, user=None) -> Transaction:
    """Set paid_amount to the sum of the payments linked to the sale."""
    with transaction.atomic():
        locked = Transaction.objects.select_for_update().get(pk=txn.pk)
        before = locked.paid_amount
        locked.paid_amount = money(
            locked.payments.aggregate(total=Sum("amount"))["total"] or ZERO)
        locked.save(update_fields=["paid_amount"])

        if locked.paid_amount != before:
            log_action(
                action="resync",
                instance=locked,
                user=user,
                changes={"paid_amount": [str(before), str(locked.paid_amount)]},
            )
            logger.info(
                "Transaction %s paid_amount %s -> %s",
                locked.pk, before, locked.paid_amount,
            )
    return locked


def _sale_snapshot(txn: Transaction) -> dict:
    return {
        "customer": txn.customer_id,
        "season": txn.season.name,
        "transaction_date": str(txn.transaction_date),
        "notes": txn.notes,
        "total_amount": str(txn.total_amount),
    }


def _refresh_after_change(pairs, today):
    """Rebuild customer balances for each (customer, season) and cash for each season."""
    seasons = {}
    for customer, season in set(pairs):
        refresh_customer_balance(customer, season)
        seasons[season.pk] = season
    for season in seasons.values():
        refresh_cash_balance(season, today=today)
    refresh_global_cash_balance(today=today)


def update_transaction(
    txn: Transaction,
    items=None,
    customer=None,
    season=None,
    transaction_date: datetime.date | None = None,
    notes: str | None = None,
    paid_amount=0,
    today: datetime.date | None = None,
    user=None,
) -> Transaction:
    """
    Correct a recorded sale.

    items=None keeps the stored lines (re-totalled from the database);
    otherwise they are replaced. Payments already made stay linked and
    follow the sale to a new customer or season. A non-zero paid_amount
    is booked as an extra payment. Balances are rebuilt for the old and
    the new (customer, season) pair, cash for both seasons.
    """
    if today is None:
        today = timezone.localdate()
    lines = None if items is None else _normalize_items(items)
    paid_amount = money(paid_amount or ZERO, "paid_amount")
    if paid_amount < 0:
        raise ValidationError({"paid_amount": "Paid amount must be >= 0"})

    with transaction.atomic():
        locked = (
            Transaction.objects.select_for_update()
            .select_related("customer", "season")
            .get(pk=txn.pk)
        )
        old_customer, old_season = locked.customer, locked.season
        before = _sale_snapshot(locked)

        if customer is not None:
            locked.customer = customer
        if season is not None:
            locked.season = resolve_season(season, today)
        if transaction_date is not None:
            locked.transaction_date = transaction_date
        if notes is not None:
            locked.notes = notes

        if lines is not None:
            locked.items.all().delete()
            TransactionItem.objects.bulk_create(
                [TransactionItem(transaction=locked, **line) for line in lines])

        if (locked.customer_id, locked.season_id) != (old_customer.pk, old_season.pk):
            # linked payments belong to whoever the sale belongs to
            locked.payments.update(customer=locked.customer, season=locked.season)

        locked.recalc_totals()
        locked.save()
        locked = resync_transaction_payments(locked, user=user)

        after = _sale_snapshot(locked)
        diff = {
            field: [before[field], after[field]]
            for field in before
            if before[field] != after[field]
        }
        if lines is not None:
            diff["items"] = len(lines)

        if paid_amount > 0:
            # imported here: payments depends on this module
            from .payments import record_payment

            record_payment(
                locked.customer,
                paid_amount,
                transaction=locked,
                season=locked.season,
                payment_date=locked.transaction_date,
                notes=UPDATE_PAYMENT_NOTE,
                today=today,
                user=user,
            )
            diff["paid_amount_added"] = str(paid_amount)
            locked.refresh_from_db()

        _refresh_after_change(
            [(old_customer, old_season), (locked.customer, locked.season)], today)

        if diff:
            log_action(action="update", instance=locked, user=user, changes=diff)

    logger.info(
        "Transaction %s updated: total=%s paid=%s due=%s",
        locked.pk, locked.total_amount, locked.paid_amount, locked.due_amount,
    )
    return locked


def delete_transaction(txn: Transaction, today: datetime.date | None = None, user=None) -> None:
    """Remove a sale together with its lines and payments, then rebuild balances."""
    if today is None:
        today = timezone.localdate()

    with transaction.atomic():
        locked = (
            Transaction.objects.select_for_update()
            .select_related("customer", "season")
            .get(pk=txn.pk)
        )
        customer, season, pk = locked.customer, locked.season, locked.pk
        payments = locked.payments.all()
        log_action(
            action="delete",
            instance=locked,
            user=user,
            changes={
                "customer": customer.pk,
                "season": season.name,
                "total_amount": str(locked.total_amount),
                "payments": [str(p.amount) for p in payments],
            },
        )
        # payments first: they hold the sale in place
        payments.delete()
        locked.delete()
        _refresh_after_change([(customer, season)], today)

    logger.info("Transaction %s deleted for customer %s in %s", pk, customer.pk, season)


def check_transaction_invariants(txn: Transaction) -> None:
    """Raise LedgerIntegrityError if stored amounts disagree with each other."""
    txn.refresh_from_db()

    if txn.due_amount != txn.total_amount - txn.paid_amount:
        raise LedgerIntegrityError(
            f"Transaction {txn.pk}: due {txn.due_amount} != "
            f"total {txn.total_amount} - paid {txn.paid_amount}"
        )

    if txn.due_amount <= 0:
        expected = "paid"
    elif txn.paid_amount > 0:
        expected = "partial"
    else:
        expected = "due"
    if txn.payment_status != expected:
        raise LedgerIntegrityError(
            f"Transaction {txn.pk}: status {txn.payment_status!r}, expected {expected!r}"
        )

    lines_total = txn.items.aggregate(total=Sum("total_price"))["total"] or ZERO
    if money(lines_total) != txn.total_amount:
        raise LedgerIntegrityError(
            f"Transaction {txn.pk}: total {txn.total_amount} != lines {lines_total}"
        )
