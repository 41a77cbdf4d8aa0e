import datetime
from decimal import Decimal

import pytest

from condo_core.exceptions import RolloverError
from condo_core.models import AuditLog, BalanceTransfer, DebtWorkflow, Due
from condo_core.models.dues import CARRIED_DEBT_DESCRIPTION
from condo_core.services.dues import set_all_units_monthly_due
from condo_core.services.payments import apply_unit_payment
from condo_core.services.periods import create_fiscal_period
from condo_core.services.rollover import perform_fiscal_year_rollover, rollover_candidates


@pytest.fixture
def next_year(site):
    return create_fiscal_period(site, datetime.date(2026, 1, 1))


@pytest.fixture
def year_end(period, units):
    """
    unit 1 overpaid by 200, unit 2 owes 600,
    unit 3 owes everything and is at the formal letter stage.
    """
    set_all_units_monthly_due(period, Decimal("100"))
    apply_unit_payment(units[0], Decimal("1400"), "TRY", datetime.date(2025, 2, 1))
    apply_unit_payment(units[1], Decimal("600"), "TRY", datetime.date(2025, 3, 1))
    DebtWorkflow.objects.create(
        unit=units[2], fiscal_period=period, stage=3, total_debt_amount=Decimal("1200"))
    return period


@pytest.mark.django_db
def test_rollover_carries_debt_credit_and_legal_flags(year_end, next_year, units, manager):
    transfers = perform_fiscal_year_rollover(year_end, next_year, user=manager)

    assert transfers == 4
    year_end.refresh_from_db()
    assert year_end.status == "closed"
    assert year_end.closed_at is not None

    by_unit = {
        unit.pk: sorted(BalanceTransfer.objects.filter(unit=unit).values_list("transfer_type", flat=True))
        for unit in units
    }
    assert by_unit[units[0].pk] == ["credit"]
    assert by_unit[units[1].pk] == ["debt"]
    assert by_unit[units[2].pk] == ["debt", "legal_flag"]

    credit = BalanceTransfer.objects.get(unit=units[0])
    assert credit.amount == Decimal("200.00")
    flag = BalanceTransfer.objects.get(unit=units[2], transfer_type="legal_flag")
    assert flag.legal_stage == 3

    assert AuditLog.objects.filter(action="rollover", object_id=str(year_end.pk)).exists()


@pytest.mark.django_db
def test_rollover_moves_outstanding_onto_one_opening_due(year_end, next_year, units):
    perform_fiscal_year_rollover(year_end, next_year)

    carried = Due.objects.get(unit=units[1], fiscal_period=next_year)
    assert carried.description == CARRIED_DEBT_DESCRIPTION
    assert carried.total_amount == Decimal("600.00")
    assert carried.month_date == next_year.start_date
    assert carried.is_from_previous_period
    assert carried.previous_period == year_end

    # old dues no longer count towards the balance
    old = Due.objects.filter(unit=units[1], fiscal_period=year_end)
    assert set(old.filter(paid_amount=0).values_list("status", flat=True)) == {"carried_over"}
    assert old.filter(status="paid").count() == 6

    # fully paid unit gets nothing new
    assert not Due.objects.filter(unit=units[0], fiscal_period=next_year).exists()


@pytest.mark.django_db
def test_legal_workflow_follows_the_unit(year_end, next_year, units):
    perform_fiscal_year_rollover(year_end, next_year)
    workflow = DebtWorkflow.objects.get(unit=units[2], is_active=True)
    assert workflow.fiscal_period == next_year


@pytest.mark.django_db
def test_rollover_candidates(year_end, next_year, site):
    create_fiscal_period(site, datetime.date(2024, 1, 1))  # earlier, not a candidate
    assert list(rollover_candidates(year_end)) == [next_year]


@pytest.mark.django_db
def test_new_period_must_be_draft(year_end, next_year):
    next_year.transition_to("closed")
    with pytest.raises(RolloverError):
        perform_fiscal_year_rollover(year_end, next_year)


@pytest.mark.django_db
def test_new_period_must_start_after_closing_one(year_end, site):
    overlapping = create_fiscal_period(site, datetime.date(2025, 6, 1), name="Overlap")
    with pytest.raises(RolloverError):
        perform_fiscal_year_rollover(year_end, overlapping)


@pytest.mark.django_db
def test_closed_period_cannot_roll_over_twice(year_end, next_year, site):
    perform_fiscal_year_rollover(year_end, next_year)
    later = create_fiscal_period(site, datetime.date(2027, 1, 1))
    with pytest.raises(RolloverError):
        perform_fiscal_year_rollover(year_end, later)


@pytest.mark.django_db
def test_periods_of_other_sites_are_rejected(year_end, other_site):
    foreign = create_fiscal_period(other_site, datetime.date(2026, 1, 1))
    with pytest.raises(RolloverError):
        perform_fiscal_year_rollover(year_end, foreign)
    year_end.refresh_from_db()
    assert year_end.status == "active"


@pytest.mark.django_db
def test_debt_in_two_currencies_is_carried_separately(year_end, next_year, units, usd):
    Due.objects.create(
        unit=units[1], fiscal_period=year_end, month_date=datetime.date(2025, 9, 1),
        due_date=datetime.date(2025, 9, 1), base_amount=Decimal("75"), currency=usd,
        description="Elevator repair")

    perform_fiscal_year_rollover(year_end, next_year)

    carried = {
        d.currency_id: d.total_amount
        for d in Due.objects.filter(unit=units[1], fiscal_period=next_year)
    }
    assert carried == {"TRY": Decimal("600.00"), "USD": Decimal("75.00")}
    debts = BalanceTransfer.objects.filter(unit=units[1], transfer_type="debt")
    assert sorted(debts.values_list("currency_id", "amount")) == [
        ("TRY", Decimal("600.00")), ("USD", Decimal("75.00"))]


@pytest.mark.django_db
def test_credit_transfer_keeps_its_currency(year_end, next_year, units):
    perform_fiscal_year_rollover(year_end, next_year)
    credit = BalanceTransfer.objects.get(unit=units[0], transfer_type="credit")
    assert credit.currency_id == "TRY"
    assert "(TRY)" in credit.description
