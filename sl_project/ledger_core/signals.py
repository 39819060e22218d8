from django.db import transaction
from django.db.models.signals import post_delete
from django.dispatch import receiver

from .models import Payment, Transaction

"""
    Deleting a sale or a payment (admin, or a customer cascade)
    leaves the season's balances stale. Rebuild them from source rows
    once the delete has committed; the rebuild never touches the rows
    being deleted.
"""


# post_delete signal auto-fires right after Django deletes a model instance
@receiver(post_delete, sender=Transaction)
@receiver(post_delete, sender=Payment)
def schedule_season_recompute(sender, instance, **kwargs):
    # imported lazily: tasks pulls in the services layer
    from .tasks import recompute_season_balances

    season_id = instance.season_id
    transaction.on_commit(lambda: recompute_season_balances.delay(season_id))
