import datetime
import logging

from django.core.exceptions import ValidationError
from django.db import transaction as db_transaction
from django.utils import timezone

from ..models import Payment, Transaction
from ..utils import money
from .audit_helper import log_action
from .balances import refresh_cash_balance, refresh_global_cash_balance, refresh_customer_balance
from .seasons import resolve_season
from .transactions import apply_payment

logger = logging.getLogger(__name__)


# ----------------------------
# Payment workflows
# ----------------------------
def record_payment(
    customer,
    amount,
    transaction=None,
    season=None,
    payment_date: datetime.date | None = None,
    notes: str = "",
    received_by: str = "",
    today: datetime.date | None = None,
    user=None,
) -> Payment:
    """
    Record money received from a customer.

    Everything below succeeds as one unit or rolls back:
        1. the Payment row
        2. the linked sale's paid/due/status (if any)
        3. the customer's season balance
        4. the season and global cash balances
        5. the audit row
    """
    if today is None:
        today = timezone.localdate()
    amount = money(amount)
    if amount <= 0:
        raise ValidationError({"amount": "Payment amount must be positive"})

    with db_transaction.atomic():
        txn = None
        if transaction is not None:
            # a missing sale raises Transaction.DoesNotExist before any write
            pk = transaction.pk if isinstance(transaction, Transaction) else transaction
            txn = Transaction.objects.select_for_update().get(pk=pk)
            if txn.customer_id != customer.pk:
                raise ValidationError(
                    {"transaction": "Transaction belongs to a different customer."})

        season = resolve_season(season, today)

        payment = Payment.objects.create(
            customer=customer,
            transaction=txn,
            season=season,
            payment_date=payment_date or today,
            amount=amount,
            notes=notes or "",
            received_by=received_by or "",
        )

        if txn is not None:
            txn = apply_payment(txn, amount)

        refresh_customer_balance(customer, season)
        refresh_cash_balance(season, today=today)
        refresh_global_cash_balance(today=today)

        log_action(
            action="create",
            instance=payment,
            user=user,
            changes={
                "customer": customer.pk,
                "transaction": txn.pk if txn else None,
                "season": season.name,
                "amount": str(amount),
            },
        )

    logger.info(
        "Payment %s of %s from customer %s (transaction %s)",
        payment.pk, amount, customer.pk, txn.pk if txn else "-",
    )
    return payment
