from .auditlog import AuditLog
from .balance import CashBalance, CustomerBalance
from .cashbook import AdditionalIncome, Expense, ExpenseCategory, FundInput
from .customer import Customer
from .payment import Payment
from .sack_type import SackType
from .season import Season
from .transaction import PAYMENT_STATUS_CHOICES, Transaction, TransactionItem
