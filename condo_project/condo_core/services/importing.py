import datetime
import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from ..constants import MAINTENANCE_CATEGORIES
from ..exceptions import ImportStateError, PeriodClosedError
from ..models import Account, LedgerEntry, LedgerImport, Unit
from ..utils import ZERO, normalize_category, quantize_money, to_decimal
from .audit_helper import log_action
from .currency import reporting_currency_code
from .payments import apply_unit_payment
from .spreadsheets import build_workbook, read_first_sheet

logger = logging.getLogger(__name__)

IMPORT_FIELDS = ["entry_date", "account", "category", "description", "debit", "credit", "unit_number"]

# header words that suggest each field (lowercase, English and Turkish)
FIELD_HINTS = {
    "entry_date": ["date", "tarih"],
    "account": ["account", "hesap", "kasa", "banka"],
    "category": ["category", "kategori"],
    "description": ["description", "açıklama", "aciklama", "detail"],
    "debit": ["debit", "borç", "borc", "expense", "gider"],
    "credit": ["credit", "alacak", "income", "gelir"],
    "unit_number": ["unit", "daire", "kapı", "kapi"],
}

TEMPLATE_HEADERS = ["Date", "Account", "Category", "Description", "Debit", "Credit", "Unit Number"]


def _json_cell(value):
    """Spreadsheet cell -> JSON-safe value (dates become ISO strings)."""
    if isinstance(value, datetime.datetime):
        return value.date().isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def parse_import_date(value):
    """DD.MM.YYYY, YYYY-MM-DD or a spreadsheet date. None when unreadable."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    text = str(value).strip()
    for fmt in ("%d.%m.%Y", "%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.datetime.strptime(text[:10], fmt).date()
        except ValueError:
            continue
    return None


def suggest_mapping(headers):
    """{field: header} guessed from header names."""
    mapping = {}
    for field in IMPORT_FIELDS:
        for header in headers:
            lowered = header.lower()
            if header in mapping.values():
                continue
            if any(hint in lowered for hint in FIELD_HINTS[field]):
                mapping[field] = header
                break
    return mapping


def _is_maintenance(entry_type, category):
    return entry_type == "income" and normalize_category(category) in MAINTENANCE_CATEGORIES


# ----------------------------
# Wizard steps
# ----------------------------
def start_ledger_import(site, user, file, file_name=""):
    """Step 1: read the workbook and move to mapping."""
    headers, rows = read_first_sheet(file)
    if not rows:
        raise ValidationError("No data found in the Excel file.")

    batch = LedgerImport(
        site=site,
        uploaded_by=user if getattr(user, "is_authenticated", False) else None,
        file_name=file_name or getattr(file, "name", "") or "",
        headers=[h for h in headers if h],
        rows=[{k: _json_cell(v) for k, v in row.items()} for row in rows],
    )
    batch.column_mapping = suggest_mapping(batch.headers)
    batch.transition_to("mapping")
    batch.save()
    logger.info("Ledger import %s started: %s rows", batch.pk, len(rows))
    return batch


def apply_column_mapping(batch, mapping):
    """Step 2: map columns, validate every row, move to preview."""
    unknown = set(mapping) - set(IMPORT_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown import fields: {', '.join(sorted(unknown))}")
    missing_headers = [h for h in mapping.values() if h and h not in batch.headers]
    if missing_headers:
        raise ValidationError(f"Columns not in file: {', '.join(missing_headers)}")

    def cell(row, field):
        header = mapping.get(field)
        value = row.get(header, "") if header else ""
        return "" if value is None else value

    preview = []
    for index, row in enumerate(batch.rows, start=1):
        debit = to_decimal(cell(row, "debit"))
        credit = to_decimal(cell(row, "credit"))
        # debit column = money out, credit column = money in
        if debit > 0:
            entry_type, amount = "expense", debit
        elif credit > 0:
            entry_type, amount = "income", credit
        else:
            entry_type, amount = "expense", ZERO

        entry_date = parse_import_date(cell(row, "entry_date"))
        unit_number = str(cell(row, "unit_number")).strip()
        if unit_number.endswith(".0"):
            unit_number = unit_number[:-2]
        entry = {
            "row": index,
            "entry_date": entry_date.isoformat() if entry_date else "",
            "entry_type": entry_type,
            "category": str(cell(row, "category")).strip(),
            "description": str(cell(row, "description")).strip(),
            "amount": str(quantize_money(amount)),
            "account_name": str(cell(row, "account")).strip(),
            "unit_number": unit_number,
            "errors": [],
        }

        errors = entry["errors"]
        if not entry["entry_date"]:
            errors.append("Missing date")
        if not entry["category"]:
            errors.append("Missing category")
        if not entry["description"]:
            errors.append("Missing description")
        if amount <= 0:
            errors.append("Invalid amount (both debit and credit are zero or empty)")
        if not entry["account_name"]:
            errors.append("Missing account")
        if _is_maintenance(entry_type, entry["category"]) and not unit_number:
            errors.append("Unit number required for maintenance/extra fees")
        preview.append(entry)

    batch.transition_to("preview")
    batch.column_mapping = mapping
    batch.preview_rows = preview
    batch.save(update_fields=["status", "column_mapping", "preview_rows"])
    return batch


def _find_unit(units, number):
    for unit in units:
        if unit.unit_number == number or unit.label == number:
            return unit
    return None


def _import_row(batch, entry, fiscal_period, units, accounts, user):
    """Write one preview row. Raises ValidationError with a row message on failure."""
    desc = entry["description"]
    unit = None
    if entry["unit_number"]:
        unit = _find_unit(units, entry["unit_number"])
        if unit is None:
            raise ValidationError(f'{desc}: Unit "{entry["unit_number"]}" not found')
    account = accounts.get(entry["account_name"])
    if account is None:
        raise ValidationError(f'{desc}: Account "{entry["account_name"]}" not found')

    entry_date = datetime.date.fromisoformat(entry["entry_date"])
    amount = Decimal(entry["amount"])

    if _is_maintenance(entry["entry_type"], entry["category"]) and unit is not None:
        apply_unit_payment(
            unit, amount, reporting_currency_code(), entry_date,
            payment_method="bank_transfer", account=account,
            category=entry["category"], notes=desc, user=user,
        )
        return

    LedgerEntry(
        site=batch.site,
        fiscal_period=fiscal_period,
        entry_type=entry["entry_type"],
        category=entry["category"],
        description=desc,
        amount=amount,
        currency_id=reporting_currency_code(),
        exchange_rate=Decimal("1"),
        entry_date=entry_date,
        account=account,
        unit=unit,
        created_by=user if getattr(user, "is_authenticated", False) else None,
    ).save()


def run_ledger_import(batch, fiscal_period, user=None):
    """
    Step 3: write every valid preview row (each in its own savepoint)
    and finish with success/error counts.
    """
    if batch.status != "preview":
        raise ImportStateError(f"Cannot import from status {batch.status}")
    if fiscal_period.site_id != batch.site_id:
        raise ValidationError("Fiscal period must belong to the import's site.")
    if fiscal_period.is_closed:
        raise PeriodClosedError(f"{fiscal_period.name} is closed.")

    batch.transition_to("importing")
    batch.fiscal_period = fiscal_period
    batch.save(update_fields=["status", "fiscal_period"])

    units = list(Unit.objects.for_site(batch.site))
    accounts = {a.account_name: a for a in Account.objects.for_site(batch.site)}

    success, errors = 0, []
    for entry in batch.preview_rows:
        if entry["errors"]:
            errors.append(f'Row {entry["row"]}: {"; ".join(entry["errors"])}')
            continue
        try:
            with transaction.atomic():  # savepoint per row
                _import_row(batch, entry, fiscal_period, units, accounts, user)
        except (ValidationError, IntegrityError) as exc:
            message = "; ".join(exc.messages) if isinstance(exc, ValidationError) else str(exc)
            if not message.startswith(entry["description"]):
                message = f'{entry["description"]}: {message}'
            logger.warning("Import %s row %s skipped: %s", batch.pk, entry["row"], message)
            errors.append(message)
            continue
        success += 1

    batch.transition_to("complete")
    batch.success_count = success
    batch.error_count = len(errors)
    batch.error_details = errors
    batch.save(update_fields=["status", "completed_at", "success_count", "error_count", "error_details"])

    log_action(action="import", instance=batch, user=user,
               changes={"success": success, "errors": len(errors)})
    logger.info("Ledger import %s complete: %s ok, %s errors", batch.pk, success, len(errors))
    return batch


def ledger_import_template():
    """xlsx bytes with the expected headers and sample rows."""
    rows = [
        ["15.01.2024", "Cash Account", "Cleaning Expenses", "Cleaning supplies", 150.00, None, None],
        ["16.01.2024", "Bank Account", "Maintenance Fees", "January maintenance payment", None, 200.00, "101"],
    ]
    return build_workbook("Ledger", TEMPLATE_HEADERS, rows)
