from django.core.management.base import BaseCommand, CommandError

from ledger_core.models import Season
from ledger_core.services import recompute_season


class Command(BaseCommand):
    help = "Rebuild customer and cash balances from transactions, payments and the cash book."

    # Define command-line argument
    def add_arguments(self, parser):
        parser.add_argument(
            "--season",  # Define flag
            type=str,
            default=None,
            help="Season name, e.g. Eiri2026 (default: every season)",
        )

    def handle(self, *args, **options):
        name = options["season"]  # Read argument from add_arguments()

        if name:
            try:
                seasons = [Season.objects.get(name=name)]
            except Season.DoesNotExist:
                raise CommandError(f"Season {name!r} does not exist.")
        else:
            seasons = list(Season.objects.order_by("name"))

        for season in seasons:
            count = recompute_season(season)
            self.stdout.write(
                self.style.SUCCESS(f"{season}: {count} customer balances rebuilt"))

        if not seasons:
            self.stdout.write(self.style.WARNING("No seasons to recompute."))
