import datetime
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.text import slugify

from ..exceptions import UnitsAlreadyOwnedError
from ..models import Site, SiteMembership, Unit, UnitType
from ..utils import ZERO, quantize_money, to_decimal
from .audit_helper import log_action
from .periods import activate_period, add_budget_category, create_fiscal_period, sync_total_budget

logger = logging.getLogger(__name__)


# ----------------------------
# Resident self-onboarding
# ----------------------------
def available_sites():
    return Site.objects.filter(is_active=True).order_by("name")


def available_units(site):
    """Units of `site` nobody has claimed yet."""
    if site is None:
        raise ValidationError("Site ID is required")
    return Unit.objects.for_site(site).filter(owner__isnull=True).order_by("unit_number")


@transaction.atomic
def complete_onboarding(user, site, unit_ids):
    """
    First login of a resident: homeowner membership at `site` plus ownership
    of the chosen units. Only allowed while the user has no role anywhere.
    """
    unit_ids = list(unit_ids or [])
    if site is None or not unit_ids:
        raise ValidationError("Site ID and at least one unit are required")
    if SiteMembership.objects.filter(user=user).exists():
        raise ValidationError("You have already completed onboarding")

    units = list(Unit.objects.select_for_update().filter(site=site, pk__in=unit_ids))
    if len(units) != len(set(unit_ids)):
        raise ValidationError("Every unit must exist and belong to the site.")
    taken = [u.unit_number for u in units if u.owner_id is not None]
    if taken:
        raise UnitsAlreadyOwnedError(sorted(taken))

    membership = SiteMembership.objects.create(user=user, site=site, role="homeowner")
    for unit in units:
        unit.owner = user
        unit.owner_name = user.get_full_name()
        unit.owner_email = user.email
        unit.save()
    if user.default_site_id is None:
        user.default_site = site
        user.save(update_fields=["default_site"])

    log_action(action="onboarding", instance=membership, user=user, site=site,
               changes={"units": [u.unit_number for u in units]})
    logger.info("User %s onboarded at site %s with %s units", user.pk, site.pk, len(units))
    return membership


# ----------------------------
# New site wizard
# ----------------------------
def _unique_slug(name):
    base = slugify(name)[:70] or "site"
    slug, n = base, 1
    while Site.objects.filter(slug=slug).exists():
        n += 1
        slug = f"{base}-{n}"
    return slug


@transaction.atomic
def create_site_with_wizard(user, name, default_currency, address="", city="",
                            distribution_method="coefficient", unit_types=None,
                            fiscal_start=None, budget=None):
    """
    Set up a new site in one go:
      - the site, with `user` as its admin;
      - unit types (rows without a name are skipped);
      - a 12 month fiscal period starting on `fiscal_start` (first of a month)
        whose budget lines are `budget` ({category: planned amount}).
    The period is activated when the budget adds up to more than zero.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Site name is required")
    if fiscal_start is None:
        raise ValidationError("Fiscal period start is required")

    site = Site(
        name=name,
        slug=_unique_slug(name),
        address=address or "",
        city=city or "",
        distribution_method=distribution_method,
        default_currency_id=getattr(default_currency, "code", default_currency),
        owner=user,
    )
    site.full_clean()
    site.save()
    SiteMembership.objects.create(user=user, site=site, role="admin")
    if user.default_site_id is None:
        user.default_site = site
        user.save(update_fields=["default_site"])

    if not isinstance(budget or {}, dict):
        raise ValidationError("Budget must map category names to planned amounts")

    types = []
    for row in unit_types or []:
        if not isinstance(row, dict):
            raise ValidationError("Unit types must be objects with a name")
        type_name = (row.get("name") or "").strip()
        if not type_name:
            continue
        unit_type = UnitType(
            site=site,
            name=type_name,
            coefficient=to_decimal(row.get("coefficient"), default=1),
            description=row.get("description") or "",
        )
        unit_type.full_clean()
        unit_type.save()
        types.append(unit_type)

    period = create_fiscal_period(site, fiscal_start.replace(day=1), months=12, user=user)
    for order, (category, amount) in enumerate((budget or {}).items()):
        amount = quantize_money(amount)
        if amount < 0:
            raise ValidationError(f"Planned amount of {category} must be >= 0")
        add_budget_category(period, category, planned_amount=amount, display_order=order)
    total = sync_total_budget(period)
    if total > ZERO:
        activate_period(period, user=user)

    log_action(action="create", instance=site, user=user, site=site,
               changes={"unit_types": [t.name for t in types], "period": period.name,
                        "total_budget": str(total)})
    logger.info("Site %s created by %s with period %s", site.slug, user.pk, period.name)
    return site, period


def first_of_month(year, month):
    try:
        return datetime.date(int(year), int(month), 1)
    except (TypeError, ValueError):
        raise ValidationError("Fiscal start year and month must be valid numbers")
