from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Season",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=50, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ("name",),
            },
        ),
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("area", models.CharField(max_length=255)),
                ("phone_number", models.CharField(max_length=20, unique=True)),
                ("image", models.CharField(blank=True, max_length=255, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ("name",),
                "indexes": [
                    models.Index(fields=["name"], name="customer_name_idx"),
                    models.Index(fields=["area"], name="customer_area_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SackType",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, unique=True)),
                ("price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
            ],
            options={
                "ordering": ("name",),
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(price__gte=0),
                        name="sack_type_non_negative_price",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ExpenseCategory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, unique=True)),
                ("description", models.TextField(blank=True, default="")),
            ],
            options={
                "verbose_name_plural": "expense categories",
                "ordering": ("name",),
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("transaction_date", models.DateField()),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("paid_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("due_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("payment_status", models.CharField(
                    choices=[("paid", "Paid"), ("partial", "Partial"), ("due", "Due")],
                    default="due", max_length=10)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("customer", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="transactions", to="ledger_core.customer")),
                ("season", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="transactions", to="ledger_core.season")),
            ],
            options={
                "ordering": ("-transaction_date", "-id"),
                "indexes": [
                    models.Index(fields=["season", "transaction_date"], name="txn_season_date_idx"),
                    models.Index(fields=["customer", "season"], name="txn_customer_season_idx"),
                    models.Index(fields=["season", "payment_status"], name="txn_season_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(total_amount__gte=0) & models.Q(paid_amount__gte=0),
                        name="txn_non_negative_amounts",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="TransactionItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.DecimalField(decimal_places=2, max_digits=10)),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("total_price", models.DecimalField(blank=True, decimal_places=2, max_digits=12)),
                ("sack_type", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="transaction_items", to="ledger_core.sacktype")),
                ("transaction", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="items", to="ledger_core.transaction")),
            ],
            options={
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity__gt=0)
                        & models.Q(unit_price__gte=0)
                        & models.Q(total_price__gte=0),
                        name="txn_item_non_negative_amounts",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("payment_date", models.DateField()),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("notes", models.TextField(blank=True, default="")),
                ("received_by", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("customer", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="payments", to="ledger_core.customer")),
                ("season", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="payments", to="ledger_core.season")),
                ("transaction", models.ForeignKey(
                    blank=True, null=True,
                    on_delete=django.db.models.deletion.RESTRICT,
                    related_name="payments", to="ledger_core.transaction")),
            ],
            options={
                "ordering": ("-payment_date", "-id"),
                "indexes": [
                    models.Index(fields=["season", "payment_date"], name="payment_season_date_idx"),
                    models.Index(fields=["customer", "season"], name="payment_customer_season_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(amount__gt=0),
                        name="payment_positive_amount",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CustomerBalance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("total_sales", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("total_payments", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("advance_payment", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("last_transaction_date", models.DateField(blank=True, null=True)),
                ("last_payment_date", models.DateField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("customer", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="customer_balances", to="ledger_core.customer")),
                ("season", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="customer_balances", to="ledger_core.season")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["season", "balance"], name="cust_bal_season_balance_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["customer", "season"],
                        name="uq_customer_balance_customer_season",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(balance__gte=0) & models.Q(advance_payment__gte=0),
                        name="cust_bal_non_negative_amounts",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CashBalance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("last_updated", models.DateField()),
                ("season", models.OneToOneField(
                    blank=True, null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="cash_balance", to="ledger_core.season")),
            ],
            options={
                "verbose_name_plural": "cash balances",
            },
        ),
        migrations.CreateModel(
            name="FundInput",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("description", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("source", models.CharField(max_length=255)),
                ("date", models.DateField()),
                ("season", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="fund_inputs", to="ledger_core.season")),
            ],
            options={
                "ordering": ("-date", "-id"),
                "indexes": [
                    models.Index(fields=["season", "date"], name="fund_input_season_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AdditionalIncome",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("description", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("income_source", models.CharField(max_length=255)),
                ("date", models.DateField()),
                ("season", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="additional_incomes", to="ledger_core.season")),
            ],
            options={
                "ordering": ("-date", "-id"),
                "indexes": [
                    models.Index(fields=["season", "date"], name="add_income_season_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Expense",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("description", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("expense_date", models.DateField()),
                ("category", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="expenses", to="ledger_core.expensecategory")),
                ("season", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="expenses", to="ledger_core.season")),
            ],
            options={
                "ordering": ("-expense_date", "-id"),
                "indexes": [
                    models.Index(fields=["season", "expense_date"], name="expense_season_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(max_length=50)),
                ("object_type", models.CharField(max_length=100)),
                ("object_id", models.CharField(max_length=100)),
                ("changes", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(
                    blank=True, null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("-created_at", "-id"),
                "indexes": [
                    models.Index(fields=["object_type", "object_id"], name="audit_object_idx"),
                    models.Index(fields=["created_at"], name="audit_created_idx"),
                ],
            },
        ),
    ]
