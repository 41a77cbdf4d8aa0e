import datetime
from decimal import Decimal
from io import BytesIO

import openpyxl
import pytest
from django.core.exceptions import ValidationError

from condo_core.exceptions import ImportStateError, PeriodClosedError
from condo_core.models import LedgerEntry, LedgerImport, Payment
from condo_core.services.importing import (TEMPLATE_HEADERS, apply_column_mapping,
                                           ledger_import_template, parse_import_date,
                                           run_ledger_import, start_ledger_import,
                                           suggest_mapping)
from condo_core.services.periods import close_period

ROWS = [
    # Date, Account, Category, Description, Debit, Credit, Unit Number
    ["15.01.2025", "Cash Account", "Cleaning Expenses", "Cleaning supplies", 150, None, None],
    ["16.01.2025", "Bank Account", "Maintenance Fees", "January dues", None, 100, "1"],
    ["17.01.2025", "Bank Account", "Other Incomes", "Parking rent", None, 50, None],
    [None, "Cash Account", "Cleaning Expenses", "Undated", 10, None, None],
    ["18.01.2025", "Bank Account", "Maintenance Fees", "Ghost unit", None, 100, "999"],
    ["19.01.2025", "Nowhere", "Garden Expenses", "Bad account", 20, None, None],
]

FULL_MAPPING = {
    "entry_date": "Date", "account": "Account", "category": "Category",
    "description": "Description", "debit": "Debit", "credit": "Credit",
    "unit_number": "Unit Number",
}


@pytest.fixture
def batch(site, manager, units, bank, cash, make_xlsx):
    return start_ledger_import(site, manager, make_xlsx(TEMPLATE_HEADERS, ROWS), "ledger.xlsx")


@pytest.mark.parametrize("value, expected", [
    ("15.01.2025", datetime.date(2025, 1, 15)),
    ("2025-01-15", datetime.date(2025, 1, 15)),
    ("15/01/2025", datetime.date(2025, 1, 15)),
    (datetime.datetime(2025, 1, 15, 0, 0), datetime.date(2025, 1, 15)),
    ("yesterday", None),
    ("", None),
])
def test_parse_import_date(value, expected):
    assert parse_import_date(value) == expected


def test_suggest_mapping_understands_turkish_headers():
    mapping = suggest_mapping(["Tarih", "Hesap", "Kategori", "Açıklama", "Borç", "Alacak", "Daire"])
    assert mapping == {
        "entry_date": "Tarih", "account": "Hesap", "category": "Kategori",
        "description": "Açıklama", "debit": "Borç", "credit": "Alacak", "unit_number": "Daire",
    }


@pytest.mark.django_db
def test_start_reads_rows_and_suggests_mapping(batch):
    assert batch.status == "mapping"
    assert batch.file_name == "ledger.xlsx"
    assert batch.headers == TEMPLATE_HEADERS
    assert len(batch.rows) == 6
    assert batch.column_mapping == FULL_MAPPING


@pytest.mark.django_db
def test_start_rejects_empty_sheet(site, manager, make_xlsx):
    with pytest.raises(ValidationError):
        start_ledger_import(site, manager, make_xlsx(TEMPLATE_HEADERS, []))


@pytest.mark.django_db
def test_start_rejects_non_excel_upload(site, manager):
    with pytest.raises(ValidationError):
        start_ledger_import(site, manager, BytesIO(b"date,amount\n1,2\n"))


@pytest.mark.django_db
def test_mapping_builds_validated_preview(batch):
    apply_column_mapping(batch, FULL_MAPPING)
    batch.refresh_from_db()

    assert batch.status == "preview"
    first, dues, _, undated, _, _ = batch.preview_rows
    assert first == {
        "row": 1, "entry_date": "2025-01-15", "entry_type": "expense",
        "category": "Cleaning Expenses", "description": "Cleaning supplies", "amount": "150.00",
        "account_name": "Cash Account", "unit_number": "", "errors": [],
    }
    assert dues["entry_type"] == "income"
    assert dues["unit_number"] == "1"
    assert undated["errors"] == ["Missing date"]


@pytest.mark.django_db
def test_maintenance_income_without_unit_is_flagged(batch):
    mapping = dict(FULL_MAPPING)
    del mapping["unit_number"]
    apply_column_mapping(batch, mapping)
    assert "Unit number required for maintenance/extra fees" in batch.preview_rows[1]["errors"]


@pytest.mark.django_db
def test_mapping_rejects_unknown_fields_and_columns(batch):
    with pytest.raises(ValidationError):
        apply_column_mapping(batch, {"amount": "Debit"})
    with pytest.raises(ValidationError):
        apply_column_mapping(batch, {"entry_date": "When"})
    assert LedgerImport.objects.get(pk=batch.pk).status == "mapping"


@pytest.mark.django_db
def test_run_imports_valid_rows_and_reports_the_rest(batch, period, units, bank, cash, manager):
    apply_column_mapping(batch, FULL_MAPPING)

    run_ledger_import(batch, period, user=manager)
    batch.refresh_from_db()

    assert batch.status == "complete"
    assert batch.completed_at is not None
    assert batch.success_count == 3
    assert batch.error_count == 3
    assert batch.error_details == [
        "Row 4: Missing date",
        'Ghost unit: Unit "999" not found',
        'Bad account: Account "Nowhere" not found',
    ]

    # maintenance row went through the payment workflow
    payment = Payment.objects.get(unit=units[0])
    assert payment.amount == Decimal("100.00")
    assert payment.payment_method == "bank_transfer"
    assert payment.ledger_entry.account == bank

    assert LedgerEntry.objects.count() == 3
    expense = LedgerEntry.objects.get(entry_type="expense")
    assert (expense.account, expense.amount, expense.fiscal_period) == (cash, Decimal("150.00"), period)


@pytest.mark.django_db
def test_run_requires_preview(batch, period):
    with pytest.raises(ImportStateError):
        run_ledger_import(batch, period)


@pytest.mark.django_db
def test_run_rejects_closed_period(batch, period):
    apply_column_mapping(batch, FULL_MAPPING)
    close_period(period)
    with pytest.raises(PeriodClosedError):
        run_ledger_import(batch, period)


@pytest.mark.django_db
def test_completed_import_cannot_run_again(batch, period):
    apply_column_mapping(batch, FULL_MAPPING)
    run_ledger_import(batch, period)
    with pytest.raises(ImportStateError):
        run_ledger_import(batch, period)


def test_template_has_expected_headers():
    workbook = openpyxl.load_workbook(BytesIO(ledger_import_template()))
    sheet = workbook.active
    assert [c.value for c in sheet[1]] == TEMPLATE_HEADERS
    assert sheet.max_row == 3
