import datetime
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from ..models import AuditLog, CashBalance, Expense, ExpenseCategory, FundInput, Season
from ..services import (delete_cash_entry, record_additional_income,
                        record_expense, record_fund_input, update_cash_entry)

TODAY = datetime.date(2025, 3, 15)


class CashBookTests(TestCase):

    def setUp(self):
        self.season = Season.objects.create(name="Eiri2025")
        self.next_season = Season.objects.create(name="Eiri2026")
        self.rent = ExpenseCategory.objects.create(name="Rent")

    def cash(self, season):
        return CashBalance.objects.get(season=season).amount

    def test_entries_default_to_current_season_and_today(self):
        fund = record_fund_input("Owner", "5000", today=datetime.date(2025, 9, 2))

        self.assertEqual(fund.season.name, "Eiri2026")
        self.assertEqual(fund.date, datetime.date(2025, 9, 2))
        self.assertEqual(self.cash(fund.season), Decimal("5000.00"))

    def test_expense_reduces_cash(self):
        record_fund_input("Owner", "5000", season=self.season, today=TODAY)
        expense = record_expense(self.rent, "1200", season=self.season,
                                 description="March rent", today=TODAY)

        self.assertEqual(expense.expense_date, TODAY)
        self.assertEqual(expense.category, self.rent)
        self.assertEqual(self.cash(self.season), Decimal("3800.00"))

    def test_expense_category_may_be_given_by_id(self):
        expense = record_expense(self.rent.pk, "10", season=self.season, today=TODAY)
        self.assertEqual(expense.category, self.rent)

    def test_negative_amount_is_rejected(self):
        with self.assertRaises(ValidationError):
            record_additional_income("Scrap", "-1", season=self.season, today=TODAY)
        self.assertFalse(CashBalance.objects.exists())

    def test_non_finite_amount_is_rejected(self):
        for amount in ("NaN", "Infinity"):
            with self.assertRaises(ValidationError) as ctx:
                record_fund_input("Owner", amount, season=self.season, today=TODAY)
            self.assertIn("amount", ctx.exception.message_dict)
        self.assertFalse(FundInput.objects.exists())

    def test_update_moves_cash_between_seasons(self):
        income = record_additional_income("Scrap", "300", season=self.season, today=TODAY)
        self.assertEqual(self.cash(self.season), Decimal("300.00"))

        income = update_cash_entry(income, season=self.next_season, amount="350")

        self.assertEqual(income.season, self.next_season)
        self.assertEqual(self.cash(self.season), Decimal("0.00"))
        self.assertEqual(self.cash(self.next_season), Decimal("350.00"))
        self.assertEqual(self.cash(None), Decimal("350.00"))
        log = AuditLog.objects.get(action="update")
        self.assertEqual(log.changes["amount"], ["300.00", "350.00"])

    def test_update_rejects_unknown_fields(self):
        fund = record_fund_input("Owner", "100", season=self.season, today=TODAY)
        with self.assertRaises(ValidationError):
            update_cash_entry(fund, expense_date=TODAY)

    def test_delete_refreshes_cash(self):
        record_fund_input("Owner", "1000", season=self.season, today=TODAY)
        expense = record_expense(self.rent, "400", season=self.season, today=TODAY)
        self.assertEqual(self.cash(self.season), Decimal("600.00"))

        delete_cash_entry(expense)

        self.assertFalse(Expense.objects.exists())
        self.assertEqual(self.cash(self.season), Decimal("1000.00"))
        self.assertTrue(
            AuditLog.objects.filter(action="delete", object_type="Expense").exists())

    def test_entries_are_scoped_by_season(self):
        record_fund_input("Owner", "100", season=self.season, today=TODAY)
        record_fund_input("Bank loan", "900", season=self.next_season, today=TODAY)

        self.assertEqual(FundInput.objects.for_season(self.season).count(), 1)
        self.assertEqual(self.cash(self.season), Decimal("100.00"))
        self.assertEqual(self.cash(self.next_season), Decimal("900.00"))
        self.assertEqual(self.cash(None), Decimal("1000.00"))
