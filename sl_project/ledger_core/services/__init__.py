from .audit_helper import log_action
from .balances import (cash_movements, customer_balance_summary,
                       recompute_season, refresh_cash_balance,
                       refresh_customer_balance, refresh_global_cash_balance)
from .cashbook import (add_cash_entry, delete_cash_entry, record_additional_income,
                       record_expense, record_fund_input, update_cash_entry)
from .payments import record_payment
from .reports import (cash_report, customer_report, daily_report,
                      dashboard_summary, season_report)
from .seasons import (get_current_season, get_or_create_season,
                      resolve_season, season_name_for)
from .transactions import (apply_payment, check_transaction_invariants,
                           create_transaction, delete_transaction,
                           resync_transaction_payments, update_transaction)
