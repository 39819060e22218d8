import datetime
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from ..models import AdditionalIncome, Expense, ExpenseCategory, FundInput
from ..utils import money
from .audit_helper import log_action
from .balances import refresh_cash_balance, refresh_global_cash_balance
from .seasons import resolve_season

logger = logging.getLogger(__name__)

# Fields a caller may change on an existing cash book row
EDITABLE_FIELDS = {
    FundInput: {"season", "source", "amount", "date", "description"},
    AdditionalIncome: {"season", "income_source", "amount", "date", "description"},
    Expense: {"season", "category", "amount", "expense_date", "description"},
}


def _refresh_cash(seasons, today):
    for season in {s for s in seasons if s is not None}:
        refresh_cash_balance(season, today=today)
    refresh_global_cash_balance(today=today)


def add_cash_entry(entry, season=None, user=None, today=None):
    """
    Save a new, unsaved fund input, additional income or expense.
    season (a Season or id) overrides the entry's own; with neither,
    the current season is used.
    """
    if today is None:
        today = timezone.localdate()
    entry.amount = money(entry.amount)
    if entry.amount < 0:
        raise ValidationError({"amount": "Amount must be >= 0"})

    with transaction.atomic():
        if season is None and entry.season_id:
            season = entry.season
        entry.season = resolve_season(season, today)
        entry.save()
        _refresh_cash([entry.season], today)
        log_action(
            action="create",
            instance=entry,
            user=user,
            changes={"season": entry.season.name, "amount": str(entry.amount)},
        )

    logger.info("%s %s of %s in %s", type(entry).__name__, entry.pk, entry.amount, entry.season)
    return entry


def _record(model, *, season, today, user, **fields):
    return add_cash_entry(model(**fields), season=season, user=user, today=today)


# ----------------------------
# Cash in
# ----------------------------
def record_fund_input(source, amount, season=None, date=None, description="",
                      today=None, user=None) -> FundInput:
    return _record(
        FundInput,
        season=season,
        today=today,
        user=user,
        source=source,
        amount=amount,
        date=date or today or timezone.localdate(),
        description=description or "",
    )


def record_additional_income(income_source, amount, season=None, date=None,
                             description="", today=None, user=None) -> AdditionalIncome:
    return _record(
        AdditionalIncome,
        season=season,
        today=today,
        user=user,
        income_source=income_source,
        amount=amount,
        date=date or today or timezone.localdate(),
        description=description or "",
    )


# ----------------------------
# Cash out
# ----------------------------
def record_expense(category, amount, season=None, expense_date=None,
                   description="", today=None, user=None) -> Expense:
    if not isinstance(category, ExpenseCategory):
        category = ExpenseCategory.objects.get(pk=category)
    return _record(
        Expense,
        season=season,
        today=today,
        user=user,
        category=category,
        amount=amount,
        expense_date=expense_date or today or timezone.localdate(),
        description=description or "",
    )


# ----------------------------
# Corrections
# ----------------------------
def update_cash_entry(entry, user=None, today=None, **changes):
    """
    Edit a fund input, additional income or expense.
    Both the old and the new season get their cash balance recomputed.
    """
    allowed = EDITABLE_FIELDS[type(entry)]
    unknown = set(changes) - allowed
    if unknown:
        raise ValidationError(
            {field: "This field cannot be changed." for field in sorted(unknown)})

    with transaction.atomic():
        locked = type(entry).objects.select_for_update().get(pk=entry.pk)
        old_season = locked.season

        diff = {}
        for field, value in changes.items():
            if field == "amount":
                value = money(value)
            if field == "season":
                value = resolve_season(value, today)
            before = getattr(locked, field)
            if before != value:
                diff[field] = [str(before), str(value)]
                setattr(locked, field, value)

        if diff:
            locked.save()
            _refresh_cash([old_season, locked.season], today)
            log_action(action="update", instance=locked, user=user, changes=diff)
            logger.info("%s %s updated: %s", type(locked).__name__, locked.pk, diff)

    return locked


def delete_cash_entry(entry, user=None, today=None) -> None:
    with transaction.atomic():
        season = entry.season
        pk = entry.pk
        log_action(
            action="delete",
            instance=entry,
            user=user,
            changes={"season": season.name, "amount": str(entry.amount)},
        )
        entry.delete()
        _refresh_cash([season], today)

    logger.info("%s %s deleted", type(entry).__name__, pk)
