import datetime
import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from ..exceptions import PeriodClosedError
from ..models import Due, Unit
from ..models.dues import MONTHLY_DUE_DESCRIPTION
from ..utils import normalize_category, quantize_money
from .audit_helper import log_action
from .payments import reapply_unit_payments

logger = logging.getLogger(__name__)

# set_unit_monthly_due bills mid-month
UNIT_DUE_DAY_OFFSET = 15


def _ensure_open(period):
    if period.is_closed:
        raise PeriodClosedError("Cannot change dues of a closed fiscal period.")


def _currency_code(currency, period):
    if currency is None:
        return period.site.default_currency_id
    return getattr(currency, "code", currency)


def _matching_description(qs, description):
    # trimmed, case-insensitive match ("  extra FEE " == "Extra Fee")
    key = normalize_category(description)
    return [d.pk for d in qs.only("pk", "description") if normalize_category(d.description) == key]


@transaction.atomic
def generate_fiscal_period_dues(period):
    """
    Make sure every unit has a monthly due for every month of the period.
    Missing ones are created as 0-amount placeholders in the site currency.
    Returns how many were created.
    """
    _ensure_open(period)
    site = period.site
    existing = set(
        Due.objects.filter(fiscal_period=period, description=MONTHLY_DUE_DESCRIPTION)
        .values_list("unit_id", "month_date")
    )
    created = 0
    for month_date in period.month_starts():
        for unit in Unit.objects.for_site(site):
            if (unit.pk, month_date) in existing:
                continue
            Due.objects.create(
                unit=unit,
                fiscal_period=period,
                month_date=month_date,
                due_date=month_date,
                base_amount=0,
                currency_id=site.default_currency_id,
                description=MONTHLY_DUE_DESCRIPTION,
            )
            created += 1
    logger.info("Generated %s placeholder dues for period %s", created, period.pk)
    return created


def _set_monthly_amounts(period, unit_amounts, currency_code):
    """unit_amounts: {unit_id: amount}. Returns number of dues updated."""
    updated = 0
    for unit_id, amount in unit_amounts.items():
        amount = quantize_money(amount)
        if amount < 0:
            raise ValidationError("Monthly due amount must be >= 0")
        for due in Due.objects.select_for_update().filter(
                fiscal_period=period, unit_id=unit_id,
                description=MONTHLY_DUE_DESCRIPTION).exclude(status="carried_over"):
            due.base_amount = amount
            due.currency_id = currency_code
            due.save(update_fields=["base_amount", "currency", "updated_at"])
            updated += 1
    # paid / status follow the new amounts
    for unit in Unit.objects.filter(pk__in=list(unit_amounts)):
        reapply_unit_payments(unit)
    return updated


@transaction.atomic
def set_all_units_monthly_due(period, amount, currency=None, user=None):
    """Same monthly amount for every unit of the site."""
    _ensure_open(period)
    generate_fiscal_period_dues(period)
    currency_code = _currency_code(currency, period)
    unit_ids = Unit.objects.for_site(period.site).values_list("pk", flat=True)
    updated = _set_monthly_amounts(period, {pk: amount for pk in unit_ids}, currency_code)
    log_action(action="set_monthly_due", instance=period, user=user,
               changes={"amount": str(amount), "currency": currency_code, "dues_updated": updated})
    return updated


@transaction.atomic
def set_varied_unit_monthly_dues(period, unit_amounts, currency=None, user=None):
    """Per-unit monthly amounts: {unit_id: amount}."""
    _ensure_open(period)
    generate_fiscal_period_dues(period)
    currency_code = _currency_code(currency, period)
    try:
        unit_amounts = {int(k): v for k, v in unit_amounts.items()}
    except (AttributeError, TypeError, ValueError):
        raise ValidationError("Units must map numeric unit ids to amounts.")
    foreign = Unit.objects.filter(pk__in=list(unit_amounts)).exclude(site=period.site)
    if foreign.exists() or Unit.objects.filter(pk__in=list(unit_amounts)).count() != len(unit_amounts):
        raise ValidationError("Every unit must exist and belong to the period's site.")
    updated = _set_monthly_amounts(period, unit_amounts, currency_code)
    log_action(action="set_monthly_due", instance=period, user=user,
               changes={"units": {str(k): str(v) for k, v in unit_amounts.items()},
                        "currency": currency_code, "dues_updated": updated})
    return updated


@transaction.atomic
def set_unit_monthly_due(unit, period, amount, currency=None, user=None):
    """
    Replace one unit's monthly dues for the period with `amount`
    (billed on the 15th), then replay the unit's payments on top.
    """
    _ensure_open(period)
    if unit.site_id != period.site_id:
        raise ValidationError("Unit and period must belong to the same site.")
    amount = quantize_money(amount)
    if amount < 0:
        raise ValidationError("Monthly due amount must be >= 0")
    currency_code = _currency_code(currency, period)

    # allocations on the old rows are rebuilt by reapply_unit_payments
    Due.objects.filter(
        unit=unit, fiscal_period=period, description=MONTHLY_DUE_DESCRIPTION
    ).exclude(status="carried_over").delete()

    months = period.month_starts()
    for month_date in months:
        Due.objects.create(
            unit=unit,
            fiscal_period=period,
            month_date=month_date,
            due_date=month_date + datetime.timedelta(days=UNIT_DUE_DAY_OFFSET),
            base_amount=amount,
            currency_id=currency_code,
            description=MONTHLY_DUE_DESCRIPTION,
        )
    reapply_unit_payments(unit)
    log_action(action="set_unit_monthly_due", instance=unit, user=user,
               changes={"period": period.pk, "amount": str(amount), "currency": currency_code})
    return len(months)


@transaction.atomic
def add_extra_fee(period, amount, due_date, description, currency=None,
                  replace_existing=False, units=None, user=None):
    """
    One-off charge for every unit (or `units`).
    replace_existing deletes the period's dues with the same description first,
    in the same transaction.
    """
    _ensure_open(period)
    amount = quantize_money(amount)
    if amount <= 0:
        raise ValidationError("Extra fee amount must be > 0")
    description = (description or "").strip()
    if not description:
        raise ValidationError("Extra fee needs a description")
    currency_code = _currency_code(currency, period)
    units = list(units) if units is not None else list(Unit.objects.for_site(period.site))

    affected_units = set()
    if replace_existing:
        doomed = _matching_description(Due.objects.filter(fiscal_period=period), description)
        affected_units = set(Due.objects.filter(pk__in=doomed).values_list("unit_id", flat=True))
        Due.objects.filter(pk__in=doomed).delete()
    else:
        clash = Due.objects.filter(fiscal_period=period, month_date=due_date, unit__in=units)
        if _matching_description(clash, description):
            raise ValidationError(
                f"A due '{description}' on {due_date} already exists for one of the units. "
                "Use replace_existing to overwrite it.")

    created = 0
    for unit in units:
        Due.objects.create(
            unit=unit,
            fiscal_period=period,
            month_date=due_date,
            due_date=due_date,
            base_amount=amount,
            currency_id=currency_code,
            description=description,
        )
        created += 1
        affected_units.add(unit.pk)

    # freed-up credit and new charges: replay payments
    for unit in Unit.objects.filter(pk__in=affected_units):
        reapply_unit_payments(unit)

    log_action(action="add_extra_fee", instance=period, user=user,
               changes={"description": description, "amount": str(amount),
                        "due_date": str(due_date), "units": created,
                        "replaced": bool(replace_existing)})
    logger.info("Extra fee '%s' added to %s units in period %s", description, created, period.pk)
    return created


@transaction.atomic
def admin_force_delete_dues(period, description, user=None):
    """Delete the period's dues whose description matches (trimmed, case-insensitive)."""
    doomed = _matching_description(Due.objects.filter(fiscal_period=period), description)
    unit_ids = set(Due.objects.filter(pk__in=doomed).values_list("unit_id", flat=True))
    deleted = len(doomed)
    Due.objects.filter(pk__in=doomed).delete()
    for unit in Unit.objects.filter(pk__in=unit_ids):
        reapply_unit_payments(unit)
    log_action(action="force_delete_dues", instance=period, user=user,
               changes={"description": description, "deleted": deleted})
    logger.info("Force-deleted %s dues '%s' from period %s", deleted, description, period.pk)
    return deleted
