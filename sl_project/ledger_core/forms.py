from decimal import Decimal

from django import forms
from django.conf import settings

from .models import Customer, SackType, Season

# -----------------------------
# Input forms for the JSON views
# -----------------------------


class TransactionForm(forms.Form):
    customer = forms.ModelChoiceField(queryset=Customer.objects.all())
    # season and date fall back to the current season / today
    season = forms.ModelChoiceField(queryset=Season.objects.all(), required=False)
    transaction_date = forms.DateField(required=False)
    notes = forms.CharField(required=False)
    paid_amount = forms.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00"), required=False)


class TransactionUpdateForm(TransactionForm):
    # only what is sent changes; paid_amount is an extra payment
    customer = forms.ModelChoiceField(queryset=Customer.objects.all(), required=False)


class TransactionItemForm(forms.Form):
    sack_type = forms.ModelChoiceField(queryset=SackType.objects.all())
    quantity = forms.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.01"))
    # blank -> copied from the sack type
    unit_price = forms.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.00"), required=False)
    # blank -> unit_price x quantity
    total_price = forms.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00"), required=False)


def validate_items(raw_items):
    """
    Run every item through TransactionItemForm.
    Returns (cleaned items, errors); errors is keyed by item position.
    """
    if not isinstance(raw_items, list) or not raw_items:
        return [], {"items": ["A transaction needs at least one item."]}

    max_items = getattr(settings, "LEDGER_MAX_ITEMS_PER_TRANSACTION", 20)
    if len(raw_items) > max_items:
        return [], {"items": [f"A transaction can hold at most {max_items} items."]}

    cleaned, errors = [], {}
    for position, raw in enumerate(raw_items):
        form = TransactionItemForm(raw if isinstance(raw, dict) else {})
        if form.is_valid():
            cleaned.append(form.cleaned_data)
        else:
            # e.g. "items.0.quantity": ["..."]
            for field, messages in form.errors.items():
                errors[f"items.{position}.{field}"] = list(messages)
    return cleaned, errors


class PaymentForm(forms.Form):
    customer = forms.ModelChoiceField(queryset=Customer.objects.all())
    # looked up by the payment service so a missing sale is a 404
    transaction = forms.IntegerField(required=False, min_value=1)
    season = forms.ModelChoiceField(queryset=Season.objects.all(), required=False)
    payment_date = forms.DateField(required=False)
    amount = forms.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    notes = forms.CharField(required=False)
    received_by = forms.CharField(required=False, max_length=255)


class ReportFilterForm(forms.Form):
    """Query-string filters shared by the report endpoints."""
    season = forms.ModelChoiceField(queryset=Season.objects.all(), required=False)
    customer = forms.ModelChoiceField(queryset=Customer.objects.all(), required=False)
    date = forms.DateField(required=False)
    year = forms.IntegerField(required=False, min_value=2000, max_value=2100)
    month = forms.IntegerField(required=False, min_value=1, max_value=12)
    page = forms.IntegerField(required=False, min_value=1)
