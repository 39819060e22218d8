import datetime
from unittest import mock

from django.test import TestCase, override_settings

from ..models import Season
from ..services import (get_current_season, get_or_create_season,
                        resolve_season, season_name_for)


class SeasonNameTests(TestCase):
    def test_before_august_belongs_to_same_year(self):
        self.assertEqual(season_name_for(datetime.date(2025, 3, 15)), "Eiri2025")
        self.assertEqual(season_name_for(datetime.date(2025, 1, 1)), "Eiri2025")
        self.assertEqual(season_name_for(datetime.date(2025, 7, 31)), "Eiri2025")

    def test_august_onward_belongs_to_next_year(self):
        self.assertEqual(season_name_for(datetime.date(2025, 8, 1)), "Eiri2026")
        self.assertEqual(season_name_for(datetime.date(2025, 9, 1)), "Eiri2026")
        self.assertEqual(season_name_for(datetime.date(2025, 12, 31)), "Eiri2026")

    @override_settings(LEDGER_SEASON_PREFIX="Crop", LEDGER_SEASON_ROLLOVER_MONTH=4)
    def test_prefix_and_rollover_come_from_settings(self):
        self.assertEqual(season_name_for(datetime.date(2025, 3, 31)), "Crop2025")
        self.assertEqual(season_name_for(datetime.date(2025, 4, 1)), "Crop2026")


class SeasonResolverTests(TestCase):
    def test_current_season_is_created_once(self):
        first = get_current_season(datetime.date(2025, 9, 1))
        second = get_current_season(datetime.date(2025, 10, 20))

        self.assertEqual(first.name, "Eiri2026")
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(Season.objects.filter(name="Eiri2026").count(), 1)

    def test_march_resolves_to_same_year(self):
        season = get_current_season(datetime.date(2025, 3, 15))
        self.assertEqual(season.name, "Eiri2025")

    def test_existing_season_is_reused(self):
        existing = Season.objects.create(name="Eiri2027")
        self.assertEqual(get_or_create_season("Eiri2027").pk, existing.pk)

    def test_lost_race_returns_existing_row(self):
        # another writer inserted the row between our read and our insert
        existing = Season.objects.create(name="Eiri2030")
        real_get = Season.objects.get
        calls = []

        def stale_first_read(*args, **kwargs):
            calls.append(kwargs)
            if len(calls) == 1:
                raise Season.DoesNotExist
            return real_get(*args, **kwargs)

        with mock.patch.object(Season.objects, "get", side_effect=stale_first_read):
            season = get_or_create_season("Eiri2030")

        self.assertEqual(season.pk, existing.pk)
        self.assertEqual(len(calls), 2)
        self.assertEqual(Season.objects.filter(name="Eiri2030").count(), 1)

    def test_resolve_season_accepts_instance_id_or_nothing(self):
        season = Season.objects.create(name="Eiri2024")

        self.assertEqual(resolve_season(season), season)
        self.assertEqual(resolve_season(season.pk), season)
        self.assertEqual(
            resolve_season(None, datetime.date(2025, 2, 1)).name, "Eiri2025")

    def test_latest_first_orders_newest_season_first(self):
        older = Season.objects.create(name="Eiri2024")
        newer = Season.objects.create(name="Eiri2025")
        self.assertEqual(list(Season.objects.latest_first()), [newer, older])
