from django.db import models

# -----------------------------------------
# Scope ledger rows by season / customer
# -----------------------------------------
# Define subclass of Django’s QuerySet
class LedgerQuerySet(models.QuerySet):
    def for_season(self, season):          # Add queryset helper
        return self.filter(season=season)  # Apply filter

    def for_customer(self, customer, season=None):
        qs = self.filter(customer=customer)
        if season is not None:
            qs = qs.filter(season=season)
        return qs
    # Enables query:
    # Transaction.objects.for_customer(customer, season)


# Attach LedgerQuerySet to .objects
class LedgerManager(models.Manager):

    def get_queryset(self):  # every model gets LedgerQuerySet (so .for_season() is always available)
        return LedgerQuerySet(self.model, using=self._db)

    def for_season(self, season):
        return self.get_queryset().for_season(season)

    def for_customer(self, customer, season=None):
        return self.get_queryset().for_customer(customer, season)


class SeasonManager(models.Manager):
    # Newest season first, for pickers and reports
    def latest_first(self):
        return self.get_queryset().order_by("-created_at", "-id")


# Create a TransactionItem, defaulting unit_price from SackType if not given.
class TransactionItemSackTypeManager(models.Manager):
    def create_from_sack_type(self, sack_type, **kwargs):
        if kwargs.get("unit_price") is None:
            kwargs["unit_price"] = sack_type.price
        kwargs["sack_type"] = sack_type
        return super().create(**kwargs)
