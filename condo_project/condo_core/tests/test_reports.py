import datetime
from decimal import Decimal

import pytest

from condo_core.models import DebtWorkflow
from condo_core.services.dues import set_all_units_monthly_due
from condo_core.services.ledger import create_ledger_entry
from condo_core.services.payments import apply_unit_payment
from condo_core.services.reports import (budget_vs_actual, classify_category, dashboard_summary,
                                         monthly_income_expenses, period_opening_balance)


@pytest.fixture
def booked(period, bank, cash):
    """Expenses of 2500 and maintenance income of 3000 inside 2025."""
    create_ledger_entry(period.site, entry_type="expense", category="Cleaning Expenses",
                        amount=Decimal("500"), entry_date=datetime.date(2025, 2, 10),
                        currency="TRY", account=cash)
    create_ledger_entry(period.site, entry_type="expense", category="Staff Salary",
                        amount=Decimal("2000"), entry_date=datetime.date(2025, 3, 5),
                        currency="TRY", account=bank)
    create_ledger_entry(period.site, entry_type="income", category="Maintenance Fees",
                        amount=Decimal("3000"), entry_date=datetime.date(2025, 3, 20),
                        currency="TRY", account=bank)
    return period


@pytest.mark.django_db
@pytest.mark.parametrize("name, kind", [
    ("Staff Salary", "expense"),
    ("  maintenance   FEES ", "income"),
    ("Parking income", "income"),
    ("Roof repair", "expense"),
])
def test_classify_category(name, kind):
    assert classify_category(name) == kind


@pytest.mark.django_db
def test_budget_vs_actual(booked):
    report = budget_vs_actual(booked)

    expense = report["expense"]
    # largest actual first
    assert [r["category"] for r in expense] == ["Staff Salary", "Cleaning Expenses"]
    salary = expense[0]
    assert salary["planned"] == Decimal("6000.00")
    assert salary["actual"] == Decimal("2000.00")
    assert salary["difference"] == Decimal("4000.00")
    assert salary["percentage"] == Decimal("33.33")

    # no budget line, still reported
    assert report["income"] == [{
        "category": "Maintenance Fees", "type": "income", "planned": Decimal("0.00"),
        "actual": Decimal("3000.00"), "difference": Decimal("3000.00"),
        "percentage": Decimal("0.00"),
    }]

    assert report["expense_totals"]["actual"] == Decimal("2500.00")
    assert report["net"] == {
        "planned": Decimal("-12000.00"),
        "actual": Decimal("500.00"),
        "difference": Decimal("12500.00"),
    }
    # bank 10000 + cash 500
    assert report["opening_balance"] == Decimal("10500.00")
    assert report["projected_closing_balance"] == Decimal("11000.00")


@pytest.mark.django_db
def test_earlier_entries_move_the_opening_balance(booked, cash):
    create_ledger_entry(booked.site, entry_type="income", category="Other Incomes",
                        amount=Decimal("1000"), entry_date=datetime.date(2024, 12, 15),
                        currency="TRY", account=cash)
    assert period_opening_balance(booked) == Decimal("11500.00")
    # and it is not part of this year's actuals
    assert budget_vs_actual(booked)["income_totals"]["actual"] == Decimal("3000.00")


@pytest.mark.django_db
def test_monthly_income_expenses(booked):
    report = monthly_income_expenses(booked)

    assert len(report["months"]) == 12
    assert report["months"][0] == datetime.date(2025, 1, 1)

    # empty standard categories are dropped
    assert sorted(r["category"] for r in report["expense_rows"]) == ["Cleaning Expenses", "Staff Salary"]
    cleaning = next(r for r in report["expense_rows"] if r["category"] == "Cleaning Expenses")
    assert cleaning["months"][1] == Decimal("500.00")
    assert cleaning["total"] == Decimal("500.00")

    assert report["monthly_income"][2] == Decimal("3000.00")
    assert report["monthly_expense"][2] == Decimal("2000.00")
    assert report["monthly_net"][1] == Decimal("-500.00")

    assert report["opening_balance"] == Decimal("10500.00")
    assert report["closing_balances"][0] == Decimal("10500.00")
    assert report["closing_balances"][2] == Decimal("11000.00")
    assert report["closing_balances"][-1] == Decimal("11000.00")


@pytest.mark.django_db
def test_monthly_report_stops_after_twelve_months(site):
    from condo_core.services.periods import create_fiscal_period

    long_period = create_fiscal_period(site, datetime.date(2025, 1, 1), months=18)
    assert len(monthly_income_expenses(long_period)["months"]) == 12


@pytest.mark.django_db
def test_dashboard_summary(booked, units, site):
    set_all_units_monthly_due(booked, Decimal("100"))
    apply_unit_payment(units[0], Decimal("250"), "TRY", datetime.date(2025, 1, 5))
    DebtWorkflow.objects.create(unit=units[1], stage=2)
    DebtWorkflow.objects.create(unit=units[2], stage=4)

    summary = dashboard_summary(site)

    assert summary["period"] == booked
    assert summary["total_budget"] == Decimal("12000.00")
    assert summary["dues_generated"] == Decimal("3600.00")
    assert summary["collected"] == Decimal("250.00")
    assert summary["collection_rate"] == Decimal("6.94")
    assert summary["actual_expenses"] == Decimal("2500.00")
    assert summary["budget_utilization"] == Decimal("20.83")
    assert summary["units_count"] == 3
    assert summary["units_in_warning"] == 1
    assert summary["units_in_legal"] == 1
    assert len(summary["recent_entries"]) == 3


@pytest.mark.django_db
def test_dashboard_without_active_period(site):
    summary = dashboard_summary(site)
    assert summary["period"] is None
    assert summary["collection_rate"] == Decimal("0.00")
    assert summary["recent_entries"] == []


@pytest.mark.django_db
def test_dashboard_amounts_keep_two_decimal_places(booked, units, site):
    set_all_units_monthly_due(booked, Decimal("50"))
    apply_unit_payment(units[0], Decimal("700"), "TRY", datetime.date(2025, 1, 5))

    summary = dashboard_summary(site)

    for key in ("total_budget", "planned_expenses", "actual_expenses",
                "dues_generated", "collected", "overpayment_credit"):
        assert summary[key].as_tuple().exponent == -2, key
    assert str(summary["actual_expenses"]) == "2500.00"
    assert str(summary["overpayment_credit"]) == "100.00"
