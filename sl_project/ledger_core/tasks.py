import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task  # register this function as a Celery task
def recompute_season_balances(season_id):
    # import lazily to avoid circular imports at module import time
    from .models import Season
    from .services import recompute_season

    try:
        season = Season.objects.get(pk=season_id)
    except Season.DoesNotExist:
        logger.warning("Season %s vanished before recompute", season_id)
        return 0

    # Rebuild every CustomerBalance and the CashBalance from source rows
    return recompute_season(season)
