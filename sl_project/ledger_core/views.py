import json
import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.paginator import Paginator
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .forms import (PaymentForm, ReportFilterForm, TransactionForm,
                    TransactionUpdateForm, validate_items)
from .models import Customer, Transaction
from .services import (cash_report, create_transaction, customer_balance_summary,
                       customer_report, daily_report, dashboard_summary,
                       delete_transaction, get_current_season, record_payment,
                       season_report, update_transaction)

logger = logging.getLogger(__name__)


# ----------------------------
# Helpers
# ----------------------------
def _payload(request):
    # JSON body, or a classic form post
    if request.content_type == "application/json":
        try:
            data = json.loads(request.body or b"{}")
        except ValueError:
            raise ValidationError({"__all__": "Request body is not valid JSON."})
        if not isinstance(data, dict):
            raise ValidationError({"__all__": "Request body must be a JSON object."})
        return data
    return request.POST.dict()


def _errors(errors, status=400):
    return JsonResponse({"ok": False, "errors": errors}, status=status)


def _validation_errors(exc: ValidationError):
    if hasattr(exc, "error_dict"):
        return _errors(exc.message_dict)
    return _errors({"__all__": exc.messages})


def _filters(request):
    form = ReportFilterForm(request.GET)
    if not form.is_valid():
        raise ValidationError(
            {field: list(msgs) for field, msgs in form.errors.items()})
    data = form.cleaned_data
    # missing season -> the season today belongs to
    if data["season"] is None:
        data["season"] = get_current_season(timezone.localdate())
    return data


def _transaction_json(txn, with_lines=False):
    data = {
        "id": txn.pk,
        "customer": txn.customer_id,
        "season": txn.season.name,
        "transaction_date": txn.transaction_date,
        "total_amount": txn.total_amount,
        "paid_amount": txn.paid_amount,
        "due_amount": txn.due_amount,
        "payment_status": txn.payment_status,
        "notes": txn.notes,
    }
    if with_lines:
        data["items"] = [
            {
                "sack_type": item.sack_type.name,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "total_price": item.total_price,
            }
            for item in txn.items.select_related("sack_type").order_by("id")
        ]
        data["payments"] = [
            {
                "id": p.pk,
                "payment_date": p.payment_date,
                "amount": p.amount,
                "received_by": p.received_by,
                "notes": p.notes,
            }
            for p in txn.payments.order_by("payment_date", "id")
        ]
    return data


# ----------------------------
# Transactions
# ----------------------------
@require_http_methods(["GET", "POST"])
def transactions_view(request):
    if request.method == "POST":
        return _create_transaction(request)

    try:
        filters = _filters(request)
    except ValidationError as exc:
        return _validation_errors(exc)

    qs = (
        Transaction.objects.for_season(filters["season"])
        .select_related("season")
        .order_by("-transaction_date", "-id")
    )
    page = Paginator(qs, settings.LEDGER_PAGE_SIZE).get_page(filters["page"] or 1)
    return JsonResponse({
        "ok": True,
        "season": filters["season"].name,
        "page": page.number,
        "num_pages": page.paginator.num_pages,
        "count": page.paginator.count,
        "results": [_transaction_json(t) for t in page.object_list],
    })


def _create_transaction(request):
    try:
        data = _payload(request)
    except ValidationError as exc:
        return _validation_errors(exc)

    form = TransactionForm(data)
    items, item_errors = validate_items(data.get("items"))
    if not form.is_valid() or item_errors:
        errors = {field: list(msgs) for field, msgs in form.errors.items()}
        errors.update(item_errors)
        return _errors(errors)

    cleaned = form.cleaned_data
    try:
        txn = create_transaction(
            cleaned["customer"],
            items,
            season=cleaned["season"],
            transaction_date=cleaned["transaction_date"],
            notes=cleaned["notes"],
            paid_amount=cleaned["paid_amount"] or 0,
            user=request.user,
        )
    except ValidationError as exc:
        return _validation_errors(exc)

    return JsonResponse(
        {"ok": True, "transaction": _transaction_json(txn, with_lines=True)},
        status=201,
    )


@require_http_methods(["GET", "PUT", "DELETE"])
def transaction_detail_view(request, transaction_id):
    # If no transaction found, raise 404 error (instead of crashing)
    txn = get_object_or_404(
        Transaction.objects.select_related("season"), pk=transaction_id)

    if request.method == "PUT":
        return _update_transaction(request, txn)
    if request.method == "DELETE":
        delete_transaction(txn, user=request.user)
        return JsonResponse({"ok": True, "deleted": transaction_id})
    return JsonResponse({"ok": True, "transaction": _transaction_json(txn, with_lines=True)})


def _update_transaction(request, txn):
    try:
        data = _payload(request)
    except ValidationError as exc:
        return _validation_errors(exc)

    form = TransactionUpdateForm(data)
    items, item_errors = None, {}
    if "items" in data:
        items, item_errors = validate_items(data["items"])
    if not form.is_valid() or item_errors:
        errors = {field: list(msgs) for field, msgs in form.errors.items()}
        errors.update(item_errors)
        return _errors(errors)

    cleaned = form.cleaned_data
    try:
        txn = update_transaction(
            txn,
            items=items,
            customer=cleaned["customer"],
            season=cleaned["season"],
            transaction_date=cleaned["transaction_date"],
            # absent notes are left alone, an empty string clears them
            notes=cleaned["notes"] if "notes" in data else None,
            paid_amount=cleaned["paid_amount"] or 0,
            user=request.user,
        )
    except ValidationError as exc:
        return _validation_errors(exc)

    return JsonResponse({"ok": True, "transaction": _transaction_json(txn, with_lines=True)})


# ----------------------------
# Payments
# ----------------------------
@require_POST
def payments_view(request):
    try:
        data = _payload(request)
    except ValidationError as exc:
        return _validation_errors(exc)

    form = PaymentForm(data)
    if not form.is_valid():
        return _errors({field: list(msgs) for field, msgs in form.errors.items()})

    cleaned = form.cleaned_data
    try:
        payment = record_payment(
            cleaned["customer"],
            cleaned["amount"],
            transaction=cleaned["transaction"],
            season=cleaned["season"],
            payment_date=cleaned["payment_date"],
            notes=cleaned["notes"],
            received_by=cleaned["received_by"],
            user=request.user,
        )
    except Transaction.DoesNotExist:
        logger.warning("Payment refused: transaction %s not found", cleaned["transaction"])
        return _errors({"transaction": ["Transaction not found."]}, status=404)
    except ValidationError as exc:
        return _validation_errors(exc)

    data = {
        "id": payment.pk,
        "customer": payment.customer_id,
        "transaction": payment.transaction_id,
        "season": payment.season.name,
        "payment_date": payment.payment_date,
        "amount": payment.amount,
    }
    if payment.transaction_id:
        txn = payment.transaction
        txn.refresh_from_db()
        data["transaction_status"] = txn.payment_status
        data["transaction_due"] = txn.due_amount
    return JsonResponse({"ok": True, "payment": data}, status=201)


# ----------------------------
# Balances
# ----------------------------
@require_GET
def customer_balance_view(request, customer_id):
    customer = get_object_or_404(Customer, pk=customer_id)
    try:
        filters = _filters(request)
    except ValidationError as exc:
        return _validation_errors(exc)

    return JsonResponse({
        "ok": True,
        "customer": customer.pk,
        "season": filters["season"].name,
        "balance": customer_balance_summary(customer, filters["season"]),
    })


# ----------------------------
# Reports
# ----------------------------
@require_GET
def daily_report_view(request):
    try:
        filters = _filters(request)
    except ValidationError as exc:
        return _validation_errors(exc)
    day = filters["date"] or timezone.localdate()
    return JsonResponse({"ok": True, "report": daily_report(day)})


@require_GET
def season_report_view(request):
    try:
        filters = _filters(request)
    except ValidationError as exc:
        return _validation_errors(exc)
    return JsonResponse({"ok": True, "report": season_report(filters["season"])})


@require_GET
def customer_report_view(request):
    try:
        filters = _filters(request)
    except ValidationError as exc:
        return _validation_errors(exc)
    if filters["customer"] is None:
        return _errors({"customer": ["This field is required."]})
    report = customer_report(filters["customer"], filters["season"])
    return JsonResponse({"ok": True, "report": report})


@require_GET
def cash_report_view(request):
    try:
        filters = _filters(request)
    except ValidationError as exc:
        return _validation_errors(exc)
    today = timezone.localdate()
    report = cash_report(
        filters["season"],
        filters["year"] or today.year,
        filters["month"] or today.month,
    )
    return JsonResponse({"ok": True, "report": report})


@require_GET
def dashboard_view(request):
    try:
        filters = _filters(request)
    except ValidationError as exc:
        return _validation_errors(exc)
    summary = dashboard_summary(filters["season"], filters["date"] or timezone.localdate())
    return JsonResponse({"ok": True, "dashboard": summary})
