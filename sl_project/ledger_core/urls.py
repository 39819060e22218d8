from django.urls import path

from . import views

app_name = "ledger_core"

urlpatterns = [
    path("transactions/", views.transactions_view, name="transactions"),
    path("transactions/<int:transaction_id>/", views.transaction_detail_view,
         name="transaction-detail"),
    path("payments/", views.payments_view, name="payments"),
    path("customers/<int:customer_id>/balance/", views.customer_balance_view,
         name="customer-balance"),
    path("reports/daily/", views.daily_report_view, name="report-daily"),
    path("reports/season/", views.season_report_view, name="report-season"),
    path("reports/customer/", views.customer_report_view, name="report-customer"),
    path("reports/cash/", views.cash_report_view, name="report-cash"),
    path("dashboard/", views.dashboard_view, name="dashboard"),
]
