import datetime
import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from ..exceptions import SeasonResolutionError
from ..models.season import Season

logger = logging.getLogger(__name__)

"""
    The business runs one season a year. Sales made from August onward
    already belong to next year's season, so 2025-09-01 falls in "Eiri2026".
"""
def season_name_for(when: datetime.date) -> str:
    prefix = getattr(settings, "LEDGER_SEASON_PREFIX", "Eiri")
    rollover = getattr(settings, "LEDGER_SEASON_ROLLOVER_MONTH", 8)
    year = when.year if when.month < rollover else when.year + 1
    return f"{prefix}{year}"


def get_or_create_season(name: str) -> Season:
    try:
        return Season.objects.get(name=name)
    except Season.DoesNotExist:
        pass

    try:
        # savepoint, so a lost race doesn't poison the caller's transaction
        with transaction.atomic():
            season = Season.objects.create(name=name)
        logger.info("Opened season %s", name)
        return season
    except IntegrityError:
        # another request created it between our read and insert
        try:
            return Season.objects.get(name=name)
        except Season.DoesNotExist:
            raise SeasonResolutionError(f"Could not create or load season {name}")


def get_current_season(today: datetime.date | None = None) -> Season:
    # today is injectable, defaults to the local calendar date
    if today is None:
        today = timezone.localdate()
    return get_or_create_season(season_name_for(today))


def resolve_season(season=None, today: datetime.date | None = None) -> Season:
    """Accept a Season, a season id, or nothing (current season)."""
    if season is None:
        return get_current_season(today)
    if isinstance(season, Season):
        return season
    return Season.objects.get(pk=season)
