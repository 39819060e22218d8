import datetime
from decimal import Decimal
from unittest import mock

from django.core.exceptions import ValidationError
from django.test import TestCase, TransactionTestCase

from ..models import (AuditLog, CashBalance, Customer, CustomerBalance, Payment,
                      SackType, Season, Transaction)
from ..services import create_transaction, record_payment

TODAY = datetime.date(2025, 3, 15)


class PaymentLedgerTests(TestCase):

    def setUp(self):
        self.season = Season.objects.create(name="Eiri2025")
        self.customer = Customer.objects.create(
            name="Rahim", area="Sadar", phone_number="01711000001")
        self.other = Customer.objects.create(
            name="Karim", area="Bazar", phone_number="01711000002")
        self.feed = SackType.objects.create(name="Feed", price=Decimal("500.00"))
        # Scenario: two sacks at 500 -> 1000 due
        self.txn = create_transaction(
            self.customer,
            [{"sack_type": self.feed, "quantity": 2}],
            season=self.season,
            today=TODAY,
        )

    def pay(self, amount, **kwargs):
        kwargs.setdefault("season", self.season)
        kwargs.setdefault("today", TODAY)
        return record_payment(self.customer, amount, **kwargs)

    def test_partial_then_full_payment(self):
        self.pay(Decimal("400.00"), transaction=self.txn)
        self.txn.refresh_from_db()
        self.assertEqual(self.txn.paid_amount, Decimal("400.00"))
        self.assertEqual(self.txn.due_amount, Decimal("600.00"))
        self.assertEqual(self.txn.payment_status, "partial")

        self.pay(Decimal("600.00"), transaction=self.txn)
        self.txn.refresh_from_db()
        self.assertEqual(self.txn.due_amount, Decimal("0.00"))
        self.assertEqual(self.txn.payment_status, "paid")

    def test_transaction_may_be_given_by_id(self):
        payment = self.pay("100", transaction=self.txn.pk)
        self.assertEqual(payment.transaction_id, self.txn.pk)
        self.txn.refresh_from_db()
        self.assertEqual(self.txn.paid_amount, Decimal("100.00"))

    def test_payment_updates_customer_and_cash_balances(self):
        self.pay(Decimal("400.00"), transaction=self.txn, received_by="Manager")

        balance = CustomerBalance.objects.get(customer=self.customer, season=self.season)
        self.assertEqual(balance.total_sales, Decimal("1000.00"))
        self.assertEqual(balance.total_payments, Decimal("400.00"))
        self.assertEqual(balance.balance, Decimal("600.00"))
        self.assertEqual(balance.advance_payment, Decimal("0.00"))
        self.assertEqual(balance.last_payment_date, TODAY)
        self.assertEqual(balance.status, "due")

        cash = CashBalance.objects.get(season=self.season)
        self.assertEqual(cash.amount, Decimal("400.00"))
        self.assertEqual(cash.last_updated, TODAY)
        self.assertEqual(CashBalance.objects.get(season=None).amount, Decimal("400.00"))

    def test_unlinked_payment_counts_toward_season_balance(self):
        payment = self.pay(Decimal("300.00"))

        self.assertIsNone(payment.transaction)
        self.txn.refresh_from_db()
        self.assertEqual(self.txn.paid_amount, Decimal("0.00"))
        balance = CustomerBalance.objects.get(customer=self.customer, season=self.season)
        self.assertEqual(balance.balance, Decimal("700.00"))

    def test_overpayment_is_accepted_and_becomes_advance(self):
        with self.assertLogs("ledger_core", level="WARNING"):
            self.pay(Decimal("1200.00"), transaction=self.txn)

        self.txn.refresh_from_db()
        self.assertEqual(self.txn.due_amount, Decimal("-200.00"))
        self.assertEqual(self.txn.payment_status, "paid")

        balance = CustomerBalance.objects.get(customer=self.customer, season=self.season)
        self.assertEqual(balance.balance, Decimal("0.00"))
        self.assertEqual(balance.advance_payment, Decimal("200.00"))
        self.assertEqual(balance.status, "advance")
        self.assertEqual(balance.display_balance, "Advance: 200.00")

    def test_missing_transaction_writes_nothing(self):
        with self.assertRaises(Transaction.DoesNotExist):
            self.pay(Decimal("100.00"), transaction=999999)

        self.assertEqual(Payment.objects.count(), 0)
        self.assertFalse(CashBalance.objects.exists())
        self.assertFalse(AuditLog.objects.filter(object_type="Payment").exists())

    def test_other_customers_transaction_is_rejected(self):
        with self.assertRaises(ValidationError):
            record_payment(self.other, Decimal("100.00"), transaction=self.txn,
                           season=self.season, today=TODAY)
        self.assertEqual(Payment.objects.count(), 0)

    def test_amount_must_be_positive(self):
        for amount in ("0", "-5"):
            with self.assertRaises(ValidationError):
                self.pay(amount, transaction=self.txn)
        self.assertEqual(Payment.objects.count(), 0)

    def test_non_finite_amount_is_a_field_error(self):
        for amount in ("NaN", "Infinity", Decimal("-Infinity")):
            with self.assertRaises(ValidationError) as ctx:
                self.pay(amount, transaction=self.txn)
            self.assertIn("amount", ctx.exception.message_dict)
        self.txn.refresh_from_db()
        self.assertEqual(self.txn.paid_amount, Decimal("0.00"))
        self.assertEqual(Payment.objects.count(), 0)

    def test_defaults_and_audit(self):
        payment = record_payment(self.customer, "50", today=datetime.date(2025, 9, 1))

        self.assertEqual(payment.season.name, "Eiri2026")
        self.assertEqual(payment.payment_date, datetime.date(2025, 9, 1))
        log = AuditLog.objects.get(object_type="Payment", object_id=str(payment.pk))
        self.assertEqual(log.changes["amount"], "50.00")


class PaymentRollbackTests(TransactionTestCase):
    """A failure half-way through record_payment leaves no trace."""
    reset_sequences = True

    def setUp(self):
        self.season = Season.objects.create(name="Eiri2025")
        self.customer = Customer.objects.create(
            name="Rahim", area="Sadar", phone_number="01711000001")
        feed = SackType.objects.create(name="Feed", price=Decimal("500.00"))
        self.txn = create_transaction(
            self.customer, [{"sack_type": feed, "quantity": 2}],
            season=self.season, today=TODAY,
        )

    def test_failure_after_payment_row_rolls_everything_back(self):
        with mock.patch(
            "ledger_core.services.payments.refresh_cash_balance",
            side_effect=RuntimeError("cash book unavailable"),
        ):
            with self.assertRaises(RuntimeError):
                record_payment(self.customer, Decimal("400.00"),
                               transaction=self.txn, season=self.season, today=TODAY)

        # payment row, transaction update and balance refresh are all undone
        self.assertEqual(Payment.objects.count(), 0)
        self.txn.refresh_from_db()
        self.assertEqual(self.txn.paid_amount, Decimal("0.00"))
        self.assertEqual(self.txn.payment_status, "due")
        balance = CustomerBalance.objects.get(customer=self.customer, season=self.season)
        self.assertEqual(balance.total_payments, Decimal("0.00"))
