import logging
from collections import defaultdict
from decimal import Decimal

from django.db.models import Sum

from ..constants import EXPENSE_CATEGORIES, INCOME_CATEGORIES, INCOME_KEYWORDS
from ..models import CategoryTemplate, DebtWorkflow, Due, LedgerEntry, Payment, Unit
from ..utils import ZERO, normalize_category, quantize_money
from .ledger import get_site_opening_balance

logger = logging.getLogger(__name__)

MAX_REPORT_MONTHS = 12
HUNDRED = Decimal("100")


# ----------------------------
# Helpers
# ----------------------------
def _template_types():
    """{normalized template name: category_type}"""
    return {
        normalize_category(name): category_type
        for name, category_type in CategoryTemplate.objects.values_list("name", "category_type")
    }


def classify_category(name, templates=None):
    """Return "income" or "expense" for a category name."""
    templates = _template_types() if templates is None else templates
    key = normalize_category(name)
    if key in templates:
        return templates[key]
    # no template: keyword heuristic
    if any(word in key for word in INCOME_KEYWORDS):
        return "income"
    return "expense"


def _percent(part, whole):
    if not whole:
        return ZERO
    return quantize_money(part / whole * HUNDRED)


def period_opening_balance(period):
    """Site opening balance plus every income/expense booked before the period starts."""
    opening = get_site_opening_balance(period.site)
    earlier = LedgerEntry.objects.for_site(period.site).filter(
        entry_date__lt=period.start_date).exclude(entry_type="transfer")
    for entry in earlier.only("entry_type", "amount_reporting"):
        opening += entry.signed_reporting_amount()
    return quantize_money(opening)


def _period_entries(period):
    return (
        LedgerEntry.objects.for_site(period.site)
        .filter(entry_date__gte=period.start_date, entry_date__lte=period.end_date)
        .exclude(entry_type="transfer")
    )


# ----------------------------
# Budget vs actual
# ----------------------------
def budget_vs_actual(period):
    templates = _template_types()

    # normalized name -> {"name", "planned", "income", "expense"}
    lines = {}

    def line(name):
        key = normalize_category(name)
        if key not in lines:
            lines[key] = {"name": name.strip(), "planned": ZERO, "income": ZERO, "expense": ZERO}
        return lines[key]

    for budget in period.budget_categories.all():
        line(budget.category_name)["planned"] += budget.planned_amount

    sums = (
        _period_entries(period)
        .values("category", "entry_type")
        .annotate(total=Sum("amount_reporting"))
    )
    for row in sums:
        line(row["category"])[row["entry_type"]] += row["total"] or ZERO

    income_lines, expense_lines = [], []
    for data in lines.values():
        kind = classify_category(data["name"], templates)
        planned = quantize_money(data["planned"])
        if kind == "income":
            actual = quantize_money(data["income"] - data["expense"])
            difference = actual - planned
        else:
            actual = quantize_money(data["expense"] - data["income"])
            difference = planned - actual
        # drop empty categories
        if planned <= 0 and actual == 0:
            continue
        result = {
            "category": data["name"],
            "type": kind,
            "planned": planned,
            "actual": actual,
            "difference": quantize_money(difference),
            "percentage": _percent(actual, planned),
        }
        (income_lines if kind == "income" else expense_lines).append(result)

    income_lines.sort(key=lambda r: r["actual"], reverse=True)
    expense_lines.sort(key=lambda r: r["actual"], reverse=True)

    def totals(rows, kind):
        planned = sum((r["planned"] for r in rows), ZERO)
        actual = sum((r["actual"] for r in rows), ZERO)
        difference = actual - planned if kind == "income" else planned - actual
        return {"planned": planned, "actual": actual, "difference": difference,
                "percentage": _percent(actual, planned)}

    income_totals = totals(income_lines, "income")
    expense_totals = totals(expense_lines, "expense")
    net_actual = income_totals["actual"] - expense_totals["actual"]
    net_planned = income_totals["planned"] - expense_totals["planned"]
    opening = period_opening_balance(period)

    return {
        "period": period,
        "income": income_lines,
        "expense": expense_lines,
        "income_totals": income_totals,
        "expense_totals": expense_totals,
        "net": {
            "planned": net_planned,
            "actual": net_actual,
            "difference": net_actual - net_planned,
        },
        "opening_balance": opening,
        "projected_closing_balance": opening + net_actual,
    }


# ----------------------------
# Monthly income / expenses grid
# ----------------------------
def monthly_income_expenses(period):
    months = period.month_starts()[:MAX_REPORT_MONTHS]
    month_keys = [(m.year, m.month) for m in months]
    templates = _template_types()

    # category -> {(year, month): amount}, seeded with the standard rows
    grid = {"income": {}, "expense": {}}
    names = {}
    for name in INCOME_CATEGORIES:
        grid["income"][normalize_category(name)] = defaultdict(Decimal)
        names[normalize_category(name)] = name
    for name in EXPENSE_CATEGORIES:
        grid["expense"][normalize_category(name)] = defaultdict(Decimal)
        names[normalize_category(name)] = name

    for entry in _period_entries(period).only("entry_type", "category", "entry_date", "amount_reporting"):
        key = (entry.entry_date.year, entry.entry_date.month)
        if key not in month_keys:
            continue  # past the 12-month cap
        name = normalize_category(entry.category)
        names.setdefault(name, entry.category.strip())
        # the ledger's own entry_type decides the side
        side = entry.entry_type
        bucket = grid[side].setdefault(name, defaultdict(Decimal))
        bucket[key] += entry.amount_reporting

    def rows_for(side):
        rows = []
        for name, bucket in grid[side].items():
            values = [quantize_money(bucket.get(k, ZERO)) for k in month_keys]
            total = sum(values, ZERO)
            if abs(total) <= Decimal("0.01"):
                continue
            rows.append({
                "category": names[name],
                "type": classify_category(names[name], templates),
                "months": values,
                "total": total,
            })
        return rows

    income_rows = rows_for("income")
    expense_rows = rows_for("expense")

    monthly_income = [sum((r["months"][i] for r in income_rows), ZERO) for i in range(len(months))]
    monthly_expense = [sum((r["months"][i] for r in expense_rows), ZERO) for i in range(len(months))]
    monthly_net = [i - e for i, e in zip(monthly_income, monthly_expense)]

    opening = period_opening_balance(period)
    closing_balances = []
    running = opening
    for net in monthly_net:
        running += net
        closing_balances.append(running)

    return {
        "months": months,
        "income_rows": income_rows,
        "expense_rows": expense_rows,
        "monthly_income": monthly_income,
        "monthly_expense": monthly_expense,
        "monthly_net": monthly_net,
        "opening_balance": opening,
        "closing_balances": closing_balances,
    }


# ----------------------------
# Dashboard
# ----------------------------
def dashboard_summary(site):
    period = site.active_period()
    summary = {
        "site": site,
        "period": period,
        "total_budget": ZERO,
        "planned_expenses": ZERO,
        "actual_expenses": ZERO,
        "dues_generated": ZERO,
        "collected": ZERO,
        "collection_rate": ZERO,
        "budget_utilization": ZERO,
    }

    if period is not None:
        dues = Due.objects.for_site(site).filter(fiscal_period=period)
        totals = dues.aggregate(generated=Sum("total_amount"), collected=Sum("paid_amount"))
        # SQLite hands Sum() back without the field's decimal places
        generated = quantize_money(totals["generated"] or ZERO)
        collected = quantize_money(totals["collected"] or ZERO)

        planned = quantize_money(
            period.budget_categories.aggregate(total=Sum("planned_amount"))["total"] or ZERO)
        actual_expenses = quantize_money(_period_entries(period).filter(
            entry_type="expense").aggregate(total=Sum("amount_reporting"))["total"] or ZERO)

        summary.update({
            "total_budget": quantize_money(period.total_budget),
            "planned_expenses": planned,
            "actual_expenses": actual_expenses,
            "dues_generated": generated,
            "collected": collected,
            "collection_rate": _percent(collected, generated),
            "budget_utilization": _percent(actual_expenses, period.total_budget),
        })

    workflows = DebtWorkflow.objects.filter(unit__site=site, is_active=True)
    summary.update({
        "units_count": Unit.objects.for_site(site).count(),
        "units_in_warning": workflows.filter(stage__in=(2, 3)).count(),
        "units_in_legal": workflows.filter(stage=4).count(),
        "overpayment_credit": quantize_money(Payment.objects.for_site(site).aggregate(
            total=Sum("unapplied_amount"))["total"] or ZERO),
        "recent_entries": list(
            LedgerEntry.objects.for_site(site)
            .select_related("account", "unit")
            .order_by("-entry_date", "-created_at")[:10]
        ),
    })
    return summary
