import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Sum

from ..models import Due, Payment, Unit, UnitType
from ..utils import ZERO, quantize_money, to_decimal
from .audit_helper import log_action
from .spreadsheets import build_workbook, read_first_sheet

logger = logging.getLogger(__name__)

# Accepted roster headers, English and Turkish
UNIT_HEADER_ALIASES = {
    "unit_number": ["Unit Number", "unit_number", "Unit No", "No", "Kapı No", "Daire No", "Numara"],
    "unit_type": ["Unit Type", "unit_type", "Type", "Tip", "Daire Tipi"],
    "owner_name": ["Owner Name", "owner_name", "Owner", "Name", "Kat Maliki", "Ad Soyad"],
    "owner_email": ["Email", "email", "E-mail", "Eposta"],
    "owner_phone": ["Phone", "phone", "Mobile", "Telefon", "Cep"],
    "block": ["Block", "block", "Blok"],
    "floor": ["Floor", "floor", "Kat"],
    "share_ratio": ["Share Ratio", "share_ratio", "Arsa Payı", "Pay"],
}
EXPORT_HEADERS = [
    "Unit Number", "Unit Type", "Block", "Floor", "Share Ratio",
    "Owner Name", "Email", "Phone", "Opening Balance",
]


# ----------------------------
# Balances
# ----------------------------
def unit_balance(unit):
    """
    opening_balance + outstanding of open dues - unapplied payment credit.
    Positive means the unit owes money.
    """
    dues = Due.objects.filter(unit=unit).open().aggregate(
        total=Sum("total_amount"), paid=Sum("paid_amount"))
    outstanding = (dues["total"] or ZERO) - (dues["paid"] or ZERO)
    credit = Payment.objects.filter(unit=unit).aggregate(
        total=Sum("unapplied_amount"))["total"] or ZERO
    return quantize_money(unit.opening_balance + outstanding - credit)


def unit_balances(site):
    rows = []
    total = ZERO
    for unit in Unit.objects.for_site(site).select_related("unit_type"):
        balance = unit_balance(unit)
        total += balance
        rows.append({"unit": unit, "balance": balance})
    return {
        "rows": rows,
        "total_balance": total,
        "total_debt": sum((r["balance"] for r in rows if r["balance"] > 0), ZERO),
        "total_credit": sum((-r["balance"] for r in rows if r["balance"] < 0), ZERO),
    }


# ----------------------------
# Roster import / export
# ----------------------------
def _value(row, field):
    for header in UNIT_HEADER_ALIASES[field]:
        if row.get(header) not in (None, ""):
            return row[header]
    return ""


@transaction.atomic
def import_units(site, file, user=None):
    """Create units from an uploaded roster. Returns the number created."""
    _, rows = read_first_sheet(file)

    unit_types = list(UnitType.objects.for_site(site).order_by("name"))
    type_map = {t.name.strip().lower(): t for t in unit_types}
    default_type = unit_types[0] if unit_types else None

    created = 0
    for row in rows:
        number = str(_value(row, "unit_number")).strip()
        if not number:
            continue
        # spreadsheets hand back 12.0 for 12
        if number.endswith(".0"):
            number = number[:-2]

        type_name = str(_value(row, "unit_type")).strip().lower()
        floor = to_decimal(_value(row, "floor"), default=None)

        unit = Unit(
            site=site,
            unit_number=number,
            unit_type=type_map.get(type_name, default_type),
            block=str(_value(row, "block")).strip(),
            floor=int(floor) if floor is not None else None,
            share_ratio=to_decimal(_value(row, "share_ratio")),
            owner_name=str(_value(row, "owner_name")).strip(),
            owner_email=str(_value(row, "owner_email")).strip(),
            owner_phone=str(_value(row, "owner_phone")).strip(),
        )
        unit.save()
        created += 1

    if not created:
        raise ValidationError("No valid units found in the file.")

    log_action(action="import", instance=site, user=user, site=site,
               changes={"units_created": created})
    logger.info("Imported %s units into %s", created, site)
    return created


def export_units(site):
    """xlsx bytes of the site's roster using the import headers."""
    rows = [
        [
            u.unit_number,
            u.unit_type.name if u.unit_type else "",
            u.block,
            u.floor,
            float(u.share_ratio),
            u.owner_name,
            u.owner_email,
            u.owner_phone,
            float(u.opening_balance),
        ]
        for u in Unit.objects.for_site(site).select_related("unit_type")
    ]
    return build_workbook("Units", EXPORT_HEADERS, rows)


# ----------------------------
# My account (owner view)
# ----------------------------
def my_account_summary(user):
    """Owned units of `user` with balance, dues and payments."""
    units = []
    for unit in Unit.objects.filter(owner=user).select_related("site", "unit_type"):
        dues = list(Due.objects.filter(unit=unit).order_by("-month_date", "-id"))
        payments = list(Payment.objects.filter(unit=unit).order_by("-payment_date", "-id"))
        workflow = unit.debt_workflows.filter(is_active=True).first()
        units.append({
            "unit": unit,
            "opening_balance": unit.opening_balance,
            "total_paid": sum((p.amount_in_dues_currency for p in payments), ZERO),
            "balance": unit_balance(unit),
            "dues": dues,
            "payments": payments,
            "debt_stage": workflow.stage if workflow else None,
        })
    return {"user": user, "language": user.language, "units": units}


# ----------------------------
# Unit / unit type maintenance
# ----------------------------
UNIT_TEXT_FIELDS = ["unit_number", "block", "owner_name", "owner_phone", "owner_email",
                    "tenant_name", "tenant_phone", "notes"]


def _unit_type(site, unit_type_id):
    if unit_type_id in (None, ""):
        return None
    try:
        unit_type = UnitType.objects.for_site(site).filter(pk=int(unit_type_id)).first()
    except (TypeError, ValueError):
        unit_type = None
    if unit_type is None:
        raise ValidationError("Unit type not found on this site.")
    return unit_type


@transaction.atomic
def save_unit(site, data, unit=None, user=None):
    """
    Create a unit of `site` from `data`, or update `unit` with the keys present.
    Numbers arrive as strings from forms and spreadsheets alike.
    """
    creating = unit is None
    if creating:
        unit = Unit(site=site)
    elif unit.site_id != site.pk:
        raise ValidationError("Unit belongs to another site.")

    for name in UNIT_TEXT_FIELDS:
        if name in data:
            setattr(unit, name, str(data[name] or "").strip())
    if "unit_type_id" in data:
        unit.unit_type = _unit_type(site, data["unit_type_id"])
    if "floor" in data:
        floor = to_decimal(data["floor"], default=None)
        if data["floor"] not in (None, "") and floor is None:
            raise ValidationError("floor must be a whole number")
        unit.floor = int(floor) if floor is not None else None
    if "share_ratio" in data:
        unit.share_ratio = to_decimal(data["share_ratio"])
    if "opening_balance" in data:
        unit.opening_balance = quantize_money(data["opening_balance"])
    if "is_rented" in data:
        unit.is_rented = bool(data["is_rented"])
    if not unit.unit_number:
        raise ValidationError("Unit number is required")
    unit.save()

    log_action(action="create" if creating else "update", instance=unit, user=user, site=site,
               changes={k: str(v) for k, v in data.items()})
    return unit


@transaction.atomic
def save_unit_type(site, data, unit_type=None, user=None):
    creating = unit_type is None
    if creating:
        unit_type = UnitType(site=site)
    elif unit_type.site_id != site.pk:
        raise ValidationError("Unit type belongs to another site.")
    if "name" in data:
        unit_type.name = str(data["name"] or "").strip()
    if "coefficient" in data:
        coefficient = to_decimal(data["coefficient"], default=None)
        if coefficient is None:
            raise ValidationError("coefficient must be a number")
        unit_type.coefficient = coefficient
    if "description" in data:
        unit_type.description = data["description"] or ""
    if not unit_type.name:
        raise ValidationError("Unit type name is required")
    unit_type.full_clean()
    unit_type.save()
    log_action(action="create" if creating else "update", instance=unit_type, user=user,
               site=site, changes={k: str(v) for k, v in data.items()})
    return unit_type
