from .actions import recompute_balances
from .auditlog import AuditLogAdmin
from .balance import CashBalanceAdmin, CustomerBalanceAdmin
from .cashbook import (AdditionalIncomeAdmin, ExpenseAdmin,
                       ExpenseCategoryAdmin, FundInputAdmin)
from .customer import CustomerAdmin, SackTypeAdmin
from .inlines import PaymentInline, TransactionItemInline
from .season import SeasonAdmin
from .transaction import PaymentAdmin, TransactionAdmin
