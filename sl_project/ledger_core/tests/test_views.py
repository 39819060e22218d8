import datetime
import json
from decimal import Decimal

import pytest
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from ..models import Customer, Payment, SackType, Season, Transaction
from ..services import create_transaction, get_current_season


class LedgerApiTests(TestCase):

    def setUp(self):
        # views default to the season today belongs to
        self.season = get_current_season(timezone.localdate())
        self.customer = Customer.objects.create(
            name="Rahim", area="Sadar", phone_number="01711000001")
        self.feed = SackType.objects.create(name="Feed", price=Decimal("500.00"))

    def post_json(self, url, payload):
        return self.client.post(url, data=json.dumps(payload), content_type="application/json")

    def test_create_transaction(self):
        response = self.post_json(reverse("ledger_core:transactions"), {
            "customer": self.customer.pk,
            "items": [{"sack_type": self.feed.pk, "quantity": 2}],
            "notes": "first sale",
        })

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body["ok"])
        self.assertEqual(body["transaction"]["total_amount"], "1000.00")
        self.assertEqual(body["transaction"]["payment_status"], "due")
        self.assertEqual(body["transaction"]["season"], self.season.name)
        self.assertEqual(len(body["transaction"]["items"]), 1)

    def test_create_transaction_with_paid_amount(self):
        response = self.post_json(reverse("ledger_core:transactions"), {
            "customer": self.customer.pk,
            "items": [{"sack_type": self.feed.pk, "quantity": 2}],
            "paid_amount": "400",
        })

        body = response.json()
        self.assertEqual(response.status_code, 201)
        self.assertEqual(body["transaction"]["payment_status"], "partial")
        self.assertEqual(body["transaction"]["due_amount"], "600.00")
        self.assertEqual(len(body["transaction"]["payments"]), 1)

    def test_create_transaction_validation_errors(self):
        response = self.post_json(reverse("ledger_core:transactions"), {
            "customer": self.customer.pk,
            "items": [{"sack_type": self.feed.pk, "quantity": 0}],
        })

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body["ok"])
        self.assertIn("items.0.quantity", body["errors"])
        self.assertEqual(Transaction.objects.count(), 0)

    def test_create_transaction_requires_items(self):
        response = self.post_json(reverse("ledger_core:transactions"), {
            "customer": self.customer.pk,
        })
        self.assertEqual(response.status_code, 400)
        self.assertIn("items", response.json()["errors"])

    def test_invalid_json_body(self):
        response = self.client.post(
            reverse("ledger_core:transactions"), data="{not json",
            content_type="application/json")
        self.assertEqual(response.status_code, 400)

    @override_settings(LEDGER_PAGE_SIZE=2)
    def test_list_transactions_is_paginated_by_season(self):
        for _ in range(3):
            create_transaction(self.customer, [{"sack_type": self.feed, "quantity": 1}],
                               season=self.season)
        elsewhere = Season.objects.create(name="Eiri1999")
        create_transaction(self.customer, [{"sack_type": self.feed, "quantity": 1}],
                           season=elsewhere)

        response = self.client.get(reverse("ledger_core:transactions"), {"page": 2})

        body = response.json()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(body["count"], 3)
        self.assertEqual(body["num_pages"], 2)
        self.assertEqual(len(body["results"]), 1)

        response = self.client.get(
            reverse("ledger_core:transactions"), {"season": elsewhere.pk})
        self.assertEqual(response.json()["count"], 1)

    def test_transaction_detail_and_404(self):
        txn = create_transaction(self.customer, [{"sack_type": self.feed, "quantity": 1}],
                                 season=self.season)

        response = self.client.get(reverse("ledger_core:transaction-detail", args=[txn.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["transaction"]["items"][0]["sack_type"], "Feed")

        response = self.client.get(reverse("ledger_core:transaction-detail", args=[999999]))
        self.assertEqual(response.status_code, 404)

    def test_update_transaction_replaces_items_and_books_extra_payment(self):
        txn = create_transaction(self.customer, [{"sack_type": self.feed, "quantity": 1}],
                                 season=self.season, paid_amount="100")
        url = reverse("ledger_core:transaction-detail", args=[txn.pk])

        response = self.client.put(url, data=json.dumps({
            "items": [{"sack_type": self.feed.pk, "quantity": 3}],
            "paid_amount": "400",
        }), content_type="application/json")

        self.assertEqual(response.status_code, 200)
        body = response.json()["transaction"]
        self.assertEqual(body["total_amount"], "1500.00")
        self.assertEqual(body["paid_amount"], "500.00")
        self.assertEqual(body["due_amount"], "1000.00")
        self.assertEqual(body["notes"], "")
        self.assertEqual(len(body["payments"]), 2)

    def test_update_transaction_validation_errors(self):
        txn = create_transaction(self.customer, [{"sack_type": self.feed, "quantity": 1}],
                                 season=self.season)
        url = reverse("ledger_core:transaction-detail", args=[txn.pk])

        response = self.client.put(url, data=json.dumps({
            "items": [{"sack_type": self.feed.pk, "quantity": 0}],
            "customer": 999999,
        }), content_type="application/json")

        self.assertEqual(response.status_code, 400)
        errors = response.json()["errors"]
        self.assertIn("customer", errors)
        self.assertIn("items.0.quantity", errors)
        txn.refresh_from_db()
        self.assertEqual(txn.total_amount, Decimal("500.00"))

    def test_delete_transaction(self):
        txn = create_transaction(self.customer, [{"sack_type": self.feed, "quantity": 1}],
                                 season=self.season, paid_amount="100")
        url = reverse("ledger_core:transaction-detail", args=[txn.pk])

        response = self.client.delete(url)

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Transaction.objects.filter(pk=txn.pk).exists())
        self.assertFalse(Payment.objects.exists())
        self.assertEqual(self.client.delete(url).status_code, 404)

    def test_record_payment(self):
        txn = create_transaction(self.customer, [{"sack_type": self.feed, "quantity": 2}],
                                 season=self.season)

        response = self.post_json(reverse("ledger_core:payments"), {
            "customer": self.customer.pk,
            "transaction": txn.pk,
            "amount": "400.00",
            "received_by": "Manager",
        })

        self.assertEqual(response.status_code, 201)
        body = response.json()["payment"]
        self.assertEqual(body["amount"], "400.00")
        self.assertEqual(body["transaction_status"], "partial")
        self.assertEqual(body["transaction_due"], "600.00")

    def test_payment_for_missing_transaction_is_404(self):
        response = self.post_json(reverse("ledger_core:payments"), {
            "customer": self.customer.pk,
            "transaction": 999999,
            "amount": "10",
        })
        self.assertEqual(response.status_code, 404)
        self.assertEqual(Payment.objects.count(), 0)

    def test_payment_amount_must_be_positive(self):
        response = self.post_json(reverse("ledger_core:payments"), {
            "customer": self.customer.pk,
            "amount": "0",
        })
        self.assertEqual(response.status_code, 400)
        self.assertIn("amount", response.json()["errors"])

    def test_payment_against_other_customers_sale_is_400(self):
        other = Customer.objects.create(
            name="Karim", area="Bazar", phone_number="01711000002")
        txn = create_transaction(other, [{"sack_type": self.feed, "quantity": 1}],
                                 season=self.season)

        response = self.post_json(reverse("ledger_core:payments"), {
            "customer": self.customer.pk,
            "transaction": txn.pk,
            "amount": "10",
        })
        self.assertEqual(response.status_code, 400)
        self.assertIn("transaction", response.json()["errors"])

    def test_customer_balance(self):
        response = self.client.get(
            reverse("ledger_core:customer-balance", args=[self.customer.pk]))
        self.assertEqual(response.json()["balance"]["status"], "no_transaction")

        create_transaction(self.customer, [{"sack_type": self.feed, "quantity": 1}],
                           season=self.season)
        response = self.client.get(
            reverse("ledger_core:customer-balance", args=[self.customer.pk]),
            {"season": self.season.pk},
        )
        balance = response.json()["balance"]
        self.assertEqual(balance["status"], "due")
        self.assertEqual(balance["balance"], "500.00")


@pytest.mark.django_db
def test_report_endpoints(client):
    season = Season.objects.create(name="Eiri2025")
    customer = Customer.objects.create(
        name="Rahim", area="Sadar", phone_number="01711000001")
    feed = SackType.objects.create(name="Feed", price=Decimal("100.00"))
    day = datetime.date(2025, 3, 15)
    create_transaction(customer, [{"sack_type": feed, "quantity": 3}],
                       season=season, transaction_date=day, paid_amount="100", today=day)

    daily = client.get(reverse("ledger_core:report-daily"), {"date": "2025-03-15"})
    assert daily.status_code == 200
    assert daily.json()["report"]["total_transactions"] == "300.00"

    season_body = client.get(reverse("ledger_core:report-season"), {"season": season.pk}).json()
    assert season_body["report"]["total_due"] == "200.00"

    customer_body = client.get(
        reverse("ledger_core:report-customer"),
        {"customer": customer.pk, "season": season.pk},
    ).json()
    assert customer_body["report"]["total_paid"] == "100.00"

    cash = client.get(
        reverse("ledger_core:report-cash"),
        {"season": season.pk, "year": 2025, "month": 3},
    ).json()
    assert cash["report"]["closing_balance"] == "100.00"

    dashboard = client.get(
        reverse("ledger_core:dashboard"), {"season": season.pk, "date": "2025-03-15"}).json()
    assert dashboard["dashboard"]["season_profit"] == "300.00"


@pytest.mark.django_db
def test_customer_report_requires_customer(client):
    response = client.get(reverse("ledger_core:report-customer"))
    assert response.status_code == 400
    assert "customer" in response.json()["errors"]


@pytest.mark.django_db
def test_unknown_season_filter_is_400(client):
    response = client.get(reverse("ledger_core:report-season"), {"season": 424242})
    assert response.status_code == 400
    assert "season" in response.json()["errors"]
