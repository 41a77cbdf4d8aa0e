from django.urls import path

from . import views

app_name = "condo_core"

urlpatterns = [
    # session
    path("auth/login/", views.login_view, name="login"),
    path("auth/logout/", views.logout_view, name="logout"),
    path("auth/site/", views.switch_site_view, name="switch-site"),
    path("auth/pages/", views.my_pages_view, name="my-pages"),

    path("dashboard/", views.dashboard_view, name="dashboard"),

    # units, residents, payments
    path("units/", views.unit_list_view, name="unit-list"),
    path("units/import/", views.unit_import_view, name="unit-import"),
    path("units/export/", views.unit_export_view, name="unit-export"),
    path("units/create/", views.unit_save_view, name="unit-create"),
    path("units/<int:unit_id>/", views.unit_statement_view, name="unit-statement"),
    path("units/<int:unit_id>/update/", views.unit_save_view, name="unit-update"),
    path("unit-types/", views.unit_type_list_view, name="unit-type-list"),
    path("unit-types/create/", views.unit_type_save_view, name="unit-type-create"),
    path("unit-types/<int:unit_type_id>/update/", views.unit_type_save_view,
         name="unit-type-update"),
    path("units/<int:unit_id>/payments/", views.payment_create_view, name="payment-create"),
    path("payments/<int:payment_id>/delete/", views.payment_delete_view, name="payment-delete"),

    # fiscal periods, budget, dues
    path("periods/", views.period_list_view, name="period-list"),
    path("periods/create/", views.period_create_view, name="period-create"),
    path("periods/<int:period_id>/transition/<str:action>/", views.period_transition_view,
         name="period-transition"),
    path("periods/<int:period_id>/rollover/", views.rollover_view, name="period-rollover"),
    path("periods/<int:period_id>/budget/", views.budget_view, name="budget"),
    path("periods/<int:period_id>/budget/save/", views.budget_category_save_view,
         name="budget-category-save"),
    path("periods/<int:period_id>/budget/<int:category_id>/delete/",
         views.budget_category_delete_view, name="budget-category-delete"),
    path("periods/<int:period_id>/dues/generate/", views.dues_generate_view, name="dues-generate"),
    path("periods/<int:period_id>/dues/monthly/", views.monthly_due_view, name="dues-monthly"),
    path("periods/<int:period_id>/dues/extra-fee/", views.extra_fee_view, name="dues-extra-fee"),
    path("periods/<int:period_id>/dues/force-delete/", views.force_delete_dues_view,
         name="dues-force-delete"),

    # ledger
    path("ledger/", views.ledger_list_view, name="ledger-list"),
    path("ledger/create/", views.ledger_create_view, name="ledger-create"),
    path("ledger/<int:entry_id>/delete/", views.ledger_delete_view, name="ledger-delete"),
    path("accounts/balances/", views.account_balances_view, name="account-balances"),
    path("accounts/create/", views.account_save_view, name="account-create"),
    path("accounts/<int:account_id>/update/", views.account_save_view, name="account-update"),

    # reports
    path("reports/budget-vs-actual/", views.budget_vs_actual_view, name="budget-vs-actual"),
    path("reports/monthly-income-expenses/", views.monthly_income_expenses_view,
         name="monthly-income-expenses"),

    # ledger import wizard
    path("import/", views.import_start_view, name="import-start"),
    path("import/template/", views.import_template_view, name="import-template"),
    path("import/<int:import_id>/mapping/", views.import_mapping_view, name="import-mapping"),
    path("import/<int:import_id>/run/", views.import_run_view, name="import-run"),

    # debt tracking
    path("debt/", views.debt_list_view, name="debt-list"),
    path("debt/refresh/", views.debt_refresh_view, name="debt-refresh"),
    path("debt/<int:workflow_id>/<str:action>/", views.debt_action_view, name="debt-action"),

    # support tickets
    path("tickets/", views.ticket_list_view, name="ticket-list"),
    path("tickets/create/", views.ticket_create_view, name="ticket-create"),
    path("tickets/<int:ticket_id>/", views.ticket_detail_view, name="ticket-detail"),
    path("tickets/<int:ticket_id>/update/", views.ticket_update_view, name="ticket-update"),

    # users of the current site
    path("users/", views.user_list_view, name="user-list"),
    path("users/invite/", views.user_invite_view, name="user-invite"),
    path("users/<int:user_id>/", views.user_update_view, name="user-update"),
    path("users/<int:user_id>/active/", views.user_active_view, name="user-active"),
    path("users/<int:user_id>/remove/", views.user_remove_view, name="user-remove"),

    # onboarding and new sites
    path("onboarding/sites/", views.onboarding_sites_view, name="onboarding-sites"),
    path("onboarding/units/", views.onboarding_units_view, name="onboarding-units"),
    path("onboarding/complete/", views.onboarding_complete_view, name="onboarding-complete"),
    path("sites/new/", views.site_wizard_view, name="site-wizard"),

    # settings
    path("translations/<str:language>/", views.translations_view, name="translations"),
    path("translations/", views.translation_upsert_view, name="translation-upsert"),
    path("profile/language/", views.language_view, name="language"),
    path("roles/", views.role_permissions_view, name="role-permissions"),
    path("roles/replace/", views.role_permissions_replace_view, name="role-permissions-replace"),
    path("my-account/", views.my_account_view, name="my-account"),
]
