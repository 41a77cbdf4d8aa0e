from .auth import login_view, logout_view, switch_site_view
from .debt import debt_action_view, debt_list_view, debt_refresh_view
from .importing import import_mapping_view, import_run_view, import_start_view, import_template_view
from .ledger import (account_balances_view, account_save_view, ledger_create_view, ledger_delete_view,
                     ledger_list_view)
from .onboarding import (onboarding_complete_view, onboarding_sites_view, onboarding_units_view,
                         site_wizard_view)
from .periods import (budget_category_delete_view, budget_category_save_view, budget_view,
                      dues_generate_view, extra_fee_view, force_delete_dues_view,
                      monthly_due_view, period_create_view, period_list_view,
                      period_transition_view, rollover_view)
from .preferences import (language_view, my_account_view, my_pages_view, role_permissions_replace_view,
                          role_permissions_view, translation_upsert_view, translations_view)
from .reports import budget_vs_actual_view, dashboard_view, monthly_income_expenses_view
from .tickets import ticket_create_view, ticket_detail_view, ticket_list_view, ticket_update_view
from .units import (payment_create_view, payment_delete_view, unit_export_view, unit_import_view,
                    unit_list_view, unit_save_view, unit_statement_view, unit_type_list_view,
                    unit_type_save_view)
from .users import (user_active_view, user_invite_view, user_list_view, user_remove_view,
                    user_update_view)
