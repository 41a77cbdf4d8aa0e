from .debt import (initiate_legal_action, mark_letter_generated, mark_warning_sent,
                   update_debt_workflow_stages)
from .dues import (add_extra_fee, admin_force_delete_dues, generate_fiscal_period_dues,
                   set_all_units_monthly_due, set_unit_monthly_due,
                   set_varied_unit_monthly_dues)
from .importing import (apply_column_mapping, ledger_import_template, run_ledger_import,
                        start_ledger_import)
from .ledger import (account_balances, create_account_transfer, create_ledger_entry,
                     delete_ledger_entry, ledger_with_balances)
from .payments import apply_unit_payment, delete_payment, reapply_unit_payments
from .periods import (activate_period, close_period, create_fiscal_period,
                      recalculate_budget_actual, resolve_period)
from .reports import budget_vs_actual, classify_category, dashboard_summary, monthly_income_expenses
from .rollover import perform_fiscal_year_rollover
from .units import export_units, import_units, my_account_summary, unit_balance, unit_balances
