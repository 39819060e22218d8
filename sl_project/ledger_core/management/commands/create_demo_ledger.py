import datetime
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from ledger_core.models import Customer, ExpenseCategory, SackType
from ledger_core.services import (create_transaction, get_current_season,
                                  record_expense, record_fund_input,
                                  record_payment)

User = get_user_model()

DEMO_SACK_TYPES = (
    ("Feed", Decimal("1200.00")),
    ("Gom", Decimal("950.00")),
    ("Bhusi", Decimal("700.00")),
)

DEMO_CUSTOMERS = (
    ("Rahim Traders", "Sadar", "01711000001"),
    ("Karim Store", "Bazar Road", "01711000002"),
    ("Hasan Poultry", "Char Area", "01711000003"),
)


class Command(BaseCommand):
    help = (
        "Create a demo user, sack types, customers and a few days of sales, "
        "payments and cash book entries in the current season."
    )

    # Define command-line arguments
    def add_arguments(self, parser):
        parser.add_argument(
            "--username", default="demo", help="Username for the demo user."
        )
        parser.add_argument(
            "--password", default="demo123", help="Password for the demo user."
        )

    @transaction.atomic
    def handle(self, *args, **options):
        # Read arguments from add_arguments()
        username = options["username"]
        password = options["password"]
        today = timezone.localdate()

        # 1. Create user
        user, created = User.objects.get_or_create(
            username=username,
            defaults={"email": f"{username}@example.com", "is_staff": True},
        )
        if created:  # if user newly created
            user.set_password(password)
            user.save()
        self.stdout.write(
            self.style.SUCCESS(f"Created user: {user.username} (pw={password})")
        )

        # 2. Season and price list
        season = get_current_season(today)
        sack_types = {}
        for name, price in DEMO_SACK_TYPES:
            sack_types[name], _ = SackType.objects.get_or_create(
                name=name, defaults={"price": price})
        self.stdout.write(self.style.SUCCESS(f"Season {season}, {len(sack_types)} sack types"))

        # 3. Customers
        customers = []
        for name, area, phone in DEMO_CUSTOMERS:
            customer, _ = Customer.objects.get_or_create(
                phone_number=phone, defaults={"name": name, "area": area})
            customers.append(customer)

        # 4. Sales: one fully paid, one partly paid, one unpaid
        day = today - datetime.timedelta(days=2)
        paid_sale = create_transaction(
            customers[0],
            [{"sack_type": sack_types["Feed"], "quantity": 2}],
            season=season, transaction_date=day, today=today, user=user,
        )
        record_payment(
            customers[0], paid_sale.total_amount, transaction=paid_sale,
            season=season, payment_date=day, received_by=username,
            today=today, user=user,
        )
        create_transaction(
            customers[1],
            [
                {"sack_type": sack_types["Gom"], "quantity": 3},
                {"sack_type": sack_types["Bhusi"], "quantity": 1},
            ],
            season=season, transaction_date=today, paid_amount=Decimal("1000.00"),
            today=today, user=user,
        )
        create_transaction(
            customers[2],
            [{"sack_type": sack_types["Feed"], "quantity": 1, "unit_price": "1150"}],
            season=season, transaction_date=today, today=today, user=user,
        )

        # 5. Cash book
        record_fund_input("Owner", Decimal("50000.00"), season=season, date=day,
                          today=today, user=user)
        transport, _ = ExpenseCategory.objects.get_or_create(name="Transport")
        record_expense(transport, Decimal("1500.00"), season=season,
                       expense_date=today, description="Truck rent",
                       today=today, user=user)

        self.stdout.write(self.style.SUCCESS("Demo ledger created successfully!"))
