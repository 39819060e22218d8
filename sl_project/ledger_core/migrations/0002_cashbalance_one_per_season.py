from django.db import migrations, models
from django.db.models import Value
from django.db.models.functions import Coalesce


class Migration(migrations.Migration):

    dependencies = [
        ("ledger_core", "0001_initial"),
    ]

    operations = [
        migrations.AddConstraint(
            model_name="cashbalance",
            constraint=models.UniqueConstraint(
                Coalesce("season", Value(0), output_field=models.BigIntegerField()),
                name="cash_balance_one_per_season",
            ),
        ),
    ]
