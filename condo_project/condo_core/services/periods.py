import datetime
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Sum

from ..exceptions import PeriodClosedError
from ..models import BudgetCategory, CategoryTemplate, FiscalPeriod, LedgerEntry
from ..utils import ZERO, add_months, normalize_category, quantize_money, to_decimal
from .audit_helper import log_action

logger = logging.getLogger(__name__)


"""
    The entry date determines the period.
    Changing the date should affect the period.
"""
def resolve_period(site, date):
    period = FiscalPeriod.objects.filter(
        site=site,
        start_date__lte=date,
        end_date__gte=date,
    ).exclude(status="closed").first()
    if period:
        return period
    # nothing covers the date: book into the current year
    period = site.active_period()
    if period:
        return period
    raise ValidationError(f"No open fiscal period for {date} in {site}")


def default_period_name(start_date, end_date):
    # "Jan 2025 - Dec 2025"
    return f"{start_date:%b %Y} - {end_date:%b %Y}"


@transaction.atomic
def create_fiscal_period(site, start_date, total_budget=0, categories=None,
                         months=12, name=None, user=None):
    """
    Create a draft period of `months` months and split total_budget
    evenly (floor) over the selected categories.
    """
    if months < 1:
        raise ValidationError("A fiscal period needs at least one month")
    end_date = add_months(start_date, months) - datetime.timedelta(days=1)
    total_budget = quantize_money(total_budget)

    period = FiscalPeriod.objects.create(
        site=site,
        name=name or default_period_name(start_date, end_date),
        start_date=start_date,
        end_date=end_date,
        total_budget=total_budget,
        status="draft",
    )

    categories = [c for c in (categories or []) if (c or "").strip()]
    if categories:
        # whole units per category, remainder stays unallocated
        per_category = to_decimal(int(total_budget // len(categories)))
        for order, category_name in enumerate(categories, start=1):
            BudgetCategory.objects.create(
                fiscal_period=period,
                category_name=category_name,
                planned_amount=per_category,
                display_order=order,
            )

    log_action(action="create", instance=period, user=user,
               changes={"start_date": str(start_date), "end_date": str(end_date),
                        "total_budget": str(total_budget), "categories": categories})
    logger.info("Created fiscal period %s for site %s", period.name, site.pk)
    return period


def activate_period(period, user=None):
    period.transition_to("active")
    log_action(action="activate", instance=period, user=user)
    return period


def close_period(period, user=None):
    period.transition_to("closed")
    log_action(action="close", instance=period, user=user)
    return period


# ---------- Budget categories ----------
def _ensure_open(period):
    if period.is_closed:
        raise PeriodClosedError("Cannot change the budget of a closed period.")


def sync_total_budget(period):
    total = quantize_money(
        period.budget_categories.aggregate(total=Sum("planned_amount"))["total"] or ZERO)
    period.total_budget = total
    period.save(update_fields=["total_budget", "updated_at"])
    return total


@transaction.atomic
def add_budget_category(period, category_name, planned_amount=0, display_order=None,
                        sync_total=False):
    _ensure_open(period)
    if display_order is None:
        display_order = period.budget_categories.count() + 1
    category = BudgetCategory.objects.create(
        fiscal_period=period,
        category_name=category_name,
        planned_amount=quantize_money(planned_amount),
        display_order=display_order,
    )
    # pick up expenses booked before the category existed
    recalculate_budget_actual(period, category.category_name)
    if sync_total:
        sync_total_budget(period)
    category.refresh_from_db()
    return category


@transaction.atomic
def update_budget_category(category, planned_amount=None, category_name=None,
                           display_order=None, sync_total=False):
    period = category.fiscal_period
    _ensure_open(period)
    old_name = category.category_name
    if planned_amount is not None:
        category.planned_amount = quantize_money(planned_amount)
    if category_name is not None:
        category.category_name = category_name
    if display_order is not None:
        category.display_order = display_order
    category.save()
    if normalize_category(old_name) != category.normalized_name:
        recalculate_budget_actual(period, category.category_name)
    if sync_total:
        sync_total_budget(period)
    category.refresh_from_db()
    return category


@transaction.atomic
def delete_budget_category(category, sync_total=False):
    period = category.fiscal_period
    _ensure_open(period)
    category.delete()
    if sync_total:
        sync_total_budget(period)


def default_budget_categories():
    """Names pre-selected when creating a period."""
    return list(
        CategoryTemplate.objects.filter(category_type="expense", is_default=True)
        .values_list("name", flat=True)
    )


def recalculate_budget_actual(period, category_name):
    """
    actual_amount = Σ amount_reporting of expense entries in `period`
    whose normalized category equals the normalized budget name.
    Returns the new actual (None when no budget line matches).
    """
    if period is None or not category_name:
        return None
    if not isinstance(period, FiscalPeriod):
        period = FiscalPeriod.objects.get(pk=period)
    key = normalize_category(category_name)

    budget = next(
        (b for b in period.budget_categories.all() if b.normalized_name == key), None)
    if budget is None:
        return None

    actual = ZERO
    rows = LedgerEntry.objects.filter(
        fiscal_period=period, entry_type="expense"
    ).values_list("category", "amount_reporting")
    for category, amount in rows:
        if normalize_category(category) == key:
            actual += amount

    # .update() skips full_clean / signals
    BudgetCategory.objects.filter(pk=budget.pk).update(actual_amount=quantize_money(actual))
    return actual


def recalculate_period_actuals(period):
    for budget in period.budget_categories.all():
        recalculate_budget_actual(period, budget.category_name)
