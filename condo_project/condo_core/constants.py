# Standard categories (seed CategoryTemplate, MonthlyIncomeExpenses rows)
INCOME_CATEGORIES = [
    "Maintenance Fees",
    "Extra Fees",
    "Uncollected Fees from Previous Term",
    "Prepayments from Previous Term",
    "Exchange Rate Incomes",
    "Insurance Refunds",
    "Other Incomes",
]

EXPENSE_CATEGORIES = [
    "Staff Salary",
    "Staff Social Insurance",
    "Chartered Accountant Fee",
    "Official Expenses",
    "Communal Electric Payments",
    "Communal Water Payments",
    "Pool Chemicals",
    "Pool Maintenance",
    "Elevator Control",
    "Elevator Repairs",
    "Elevator TSE Inspection",
    "Elevator Safety Label Cost",
    "Cleaning Expenses",
    "Garden Expenses",
    "Building Maintenance & Repairs",
    "Generator Fuel",
    "Generator Maintenance",
    "Communal Area Insurance",
    "New Fixtures",
    "Management Company Fee",
    "Other Expenses",
    "Communal Internet Fee",
    "Deficit From Last Period",
]

# Category names without a template fall back to this keyword check
INCOME_KEYWORDS = ["maintenance", "fee", "dues", "aidat", "income", "interest"]

# Imported income rows in these categories are unit payments
MAINTENANCE_CATEGORIES = ["maintenance fee", "maintenance fees", "extra fees"]

# ---------- Pages / role matrix ----------
PAGES = [
    "/dashboard",
    "/units",
    "/residents",
    "/budget",
    "/fiscal-periods",
    "/budget-vs-actual",
    "/monthly-income-expenses",
    "/reports",
    "/ledger",
    "/import-ledger",
    "/debt-tracking",
    "/tickets",
    "/users",
    "/settings",
    "/language-settings",
    "/role-settings",
    "/my-account",
]
WILDCARD_PAGE = "*"

DEFAULT_ROLE_PERMISSIONS = {
    # full control
    "admin": list(PAGES),
    # operations, no user/role management
    "board_member": [p for p in PAGES if p not in ("/users", "/role-settings")],
    # residents
    "homeowner": ["/dashboard", "/tickets", "/language-settings", "/my-account"],
}

# ---------- Debt workflow ----------
# months overdue -> stage (first bound the value is below wins)
DEBT_STAGE_THRESHOLDS = [(3, 1), (6, 2), (9, 3)]
MAX_DEBT_STAGE = 4
