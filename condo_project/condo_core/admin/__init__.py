from .actions import (activate_periods, close_periods, generate_dues, recalculate_actuals,
                      refresh_debt_stages)
from .auditlog import AuditLogAdmin
from .currency import CurrencyAdmin, ExchangeRateAdmin
from .debt import BalanceTransferAdmin, DebtWorkflowAdmin
from .forms import LedgerEntryAdminForm, UserAdminChangeForm, UserAdminCreationForm
from .inlines import BudgetCategoryInline, DueInline, PaymentAllocationInline, SiteMembershipInline
from .ledger import AccountAdmin, LedgerEntryAdmin, LedgerImportAdmin
from .localization import RolePermissionAdmin, TranslationAdmin
from .membership import SiteAdmin, SiteMembershipAdmin, UserAdmin
from .mixins import TenantAdminMixin
from .period import BudgetCategoryAdmin, CategoryTemplateAdmin, FiscalPeriodAdmin
from .tickets import SupportTicketAdmin
from .units import DueAdmin, PaymentAdmin, UnitAdmin, UnitTypeAdmin
