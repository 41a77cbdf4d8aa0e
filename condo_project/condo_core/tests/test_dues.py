import datetime
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.test import TestCase

from condo_core.exceptions import PeriodClosedError
from condo_core.models import Currency, Due, Site, Unit
from condo_core.models.dues import MONTHLY_DUE_DESCRIPTION
from condo_core.services.dues import (add_extra_fee, admin_force_delete_dues,
                                      generate_fiscal_period_dues, set_all_units_monthly_due,
                                      set_unit_monthly_due, set_varied_unit_monthly_dues)
from condo_core.services.payments import apply_unit_payment
from condo_core.services.periods import activate_period, close_period, create_fiscal_period


class DueStatusTests(TestCase):
    """compute_status only looks at the amounts and the due date"""

    def setUp(self):
        self.today = datetime.date(2025, 6, 15)

    def _due(self, total, paid, due_date):
        return Due(total_amount=Decimal(total), paid_amount=Decimal(paid), due_date=due_date)

    def test_fully_paid(self):
        self.assertEqual(
            self._due("100", "100", datetime.date(2025, 1, 1)).compute_status(self.today), "paid")

    def test_partly_paid_even_when_late(self):
        self.assertEqual(
            self._due("100", "40", datetime.date(2025, 1, 1)).compute_status(self.today), "partial")

    def test_unpaid_past_due_date_is_overdue(self):
        self.assertEqual(
            self._due("100", "0", datetime.date(2025, 6, 1)).compute_status(self.today), "overdue")

    def test_unpaid_not_yet_due_is_pending(self):
        self.assertEqual(
            self._due("100", "0", datetime.date(2025, 7, 1)).compute_status(self.today), "pending")

    def test_zero_amount_placeholder_stays_pending(self):
        self.assertEqual(
            self._due("0", "0", datetime.date(2025, 1, 1)).compute_status(self.today), "pending")

    def test_carried_over_is_sticky(self):
        due = self._due("100", "0", datetime.date(2025, 1, 1))
        due.status = "carried_over"
        self.assertEqual(due.compute_status(self.today), "carried_over")
        self.assertEqual(due.outstanding, Decimal("0.00"))


class GenerateDuesTests(TestCase):

    def setUp(self):
        self.try_, _ = Currency.objects.get_or_create(code="TRY", defaults={"name": "Turkish Lira"})
        self.site = Site.objects.create(name="Test Site", slug="test-site",
                                        default_currency=self.try_)
        self.units = [Unit.objects.create(site=self.site, unit_number=str(n)) for n in (1, 2)]
        self.period = create_fiscal_period(self.site, datetime.date(2025, 1, 1))

    def test_one_placeholder_per_unit_and_month(self):
        created = generate_fiscal_period_dues(self.period)

        self.assertEqual(created, 24)
        dues = Due.objects.filter(fiscal_period=self.period)
        self.assertEqual(dues.filter(base_amount=0).count(), 24)
        self.assertEqual(
            sorted(set(dues.values_list("month_date", flat=True))), self.period.month_starts())

    def test_generation_is_idempotent(self):
        generate_fiscal_period_dues(self.period)
        self.assertEqual(generate_fiscal_period_dues(self.period), 0)

    def test_new_units_get_their_missing_months(self):
        generate_fiscal_period_dues(self.period)
        Unit.objects.create(site=self.site, unit_number="3")
        self.assertEqual(generate_fiscal_period_dues(self.period), 12)

    def test_closed_period_is_rejected(self):
        activate_period(self.period)
        close_period(self.period)
        with self.assertRaises(PeriodClosedError):
            generate_fiscal_period_dues(self.period)


@pytest.mark.django_db
def test_set_all_units_monthly_due(period, units):
    updated = set_all_units_monthly_due(period, Decimal("100"))

    assert updated == 36
    assert set(Due.objects.filter(fiscal_period=period).values_list("total_amount", flat=True)) \
        == {Decimal("100.00")}


@pytest.mark.django_db
def test_set_varied_unit_monthly_dues(period, units):
    amounts = {str(units[0].pk): "100", str(units[1].pk): "250"}
    set_varied_unit_monthly_dues(period, amounts)

    assert Due.objects.filter(unit=units[0], base_amount=Decimal("100")).count() == 12
    assert Due.objects.filter(unit=units[1], base_amount=Decimal("250")).count() == 12
    # untouched unit keeps its placeholders
    assert Due.objects.filter(unit=units[2], base_amount=0).count() == 12


@pytest.mark.django_db
def test_set_varied_rejects_other_sites_units(period, units, other_site):
    stranger = Unit.objects.create(site=other_site, unit_number="1")
    with pytest.raises(ValidationError):
        set_varied_unit_monthly_dues(period, {stranger.pk: "100"})


@pytest.mark.django_db
@pytest.mark.parametrize("unit_amounts", [{"abc": "100"}, ["100", "200"]])
def test_set_varied_rejects_malformed_unit_ids(period, units, unit_amounts):
    with pytest.raises(ValidationError, match="numeric unit ids"):
        set_varied_unit_monthly_dues(period, unit_amounts)
    assert not Due.objects.filter(base_amount__gt=0).exists()


@pytest.mark.django_db
def test_negative_monthly_amount_is_rejected(period, units):
    with pytest.raises(ValidationError):
        set_all_units_monthly_due(period, Decimal("-1"))


@pytest.mark.django_db
def test_set_unit_monthly_due_bills_mid_month(period, units):
    unit = units[0]
    count = set_unit_monthly_due(unit, period, Decimal("300"))

    assert count == 12
    dues = Due.objects.filter(unit=unit, fiscal_period=period).order_by("month_date")
    assert dues.count() == 12
    assert dues[0].month_date == datetime.date(2025, 1, 1)
    assert dues[0].due_date == datetime.date(2025, 1, 16)
    assert all(d.total_amount == Decimal("300.00") for d in dues)


@pytest.mark.django_db
def test_set_unit_monthly_due_keeps_payments(period, units):
    unit = units[0]
    set_all_units_monthly_due(period, Decimal("100"))
    apply_unit_payment(unit, Decimal("200"), "TRY", datetime.date(2025, 1, 5))

    set_unit_monthly_due(unit, period, Decimal("50"))

    dues = Due.objects.filter(unit=unit).order_by("month_date")
    # 200 now covers four months of 50
    assert [d.status for d in dues[:5]] == ["paid", "paid", "paid", "paid", "overdue"]


@pytest.mark.django_db
def test_extra_fee_for_every_unit(period, units):
    created = add_extra_fee(period, Decimal("500"), datetime.date(2025, 6, 1), "Elevator Repair")

    assert created == 3
    fees = Due.objects.filter(description="Elevator Repair")
    assert fees.count() == 3
    assert all(d.total_amount == Decimal("500.00") for d in fees)


@pytest.mark.django_db
def test_duplicate_extra_fee_is_rejected(period, units):
    add_extra_fee(period, Decimal("500"), datetime.date(2025, 6, 1), "Elevator Repair")
    with pytest.raises(ValidationError):
        add_extra_fee(period, Decimal("500"), datetime.date(2025, 6, 1), "  elevator repair ")


@pytest.mark.django_db
def test_extra_fee_replace_existing(period, units):
    add_extra_fee(period, Decimal("500"), datetime.date(2025, 6, 1), "Elevator Repair")
    apply_unit_payment(units[0], Decimal("500"), "TRY", datetime.date(2025, 6, 2))

    add_extra_fee(period, Decimal("600"), datetime.date(2025, 6, 1), "  elevator repair ",
                  replace_existing=True)

    fees = Due.objects.filter(fiscal_period=period, description__iexact="elevator repair")
    assert fees.count() == 3
    assert all(d.total_amount == Decimal("600.00") for d in fees)
    # the earlier payment moved onto the replacement fee
    paid = fees.get(unit=units[0])
    assert paid.paid_amount == Decimal("500.00")
    assert paid.status == "partial"


@pytest.mark.django_db
def test_extra_fee_needs_positive_amount_and_description(period, units):
    with pytest.raises(ValidationError):
        add_extra_fee(period, Decimal("0"), datetime.date(2025, 6, 1), "Roof")
    with pytest.raises(ValidationError):
        add_extra_fee(period, Decimal("10"), datetime.date(2025, 6, 1), "   ")


@pytest.mark.django_db
def test_admin_force_delete_matches_description_loosely(period, units):
    set_all_units_monthly_due(period, Decimal("100"))
    add_extra_fee(period, Decimal("500"), datetime.date(2025, 6, 1), "Elevator Repair")

    deleted = admin_force_delete_dues(period, "ELEVATOR REPAIR ")

    assert deleted == 3
    assert not Due.objects.filter(description="Elevator Repair").exists()
    assert Due.objects.filter(description=MONTHLY_DUE_DESCRIPTION).count() == 36
