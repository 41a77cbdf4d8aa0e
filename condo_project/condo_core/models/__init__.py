from .account import Account
from .auditlog import AuditLog
from .budget import BudgetCategory, CategoryTemplate
from .currency import Currency, ExchangeRate
from .debt import BalanceTransfer, DebtWorkflow
from .dues import Due
from .ledger import LedgerEntry
from .ledger_import import LedgerImport
from .localization import RolePermission, Translation
from .payment import Payment, PaymentAllocation
from .period import FiscalPeriod
from .site import Site, SiteMembership, User
from .ticket import SupportTicket
from .unit import Unit, UnitType
