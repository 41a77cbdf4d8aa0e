import datetime
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from condo_core.models import DebtWorkflow
from condo_core.services.debt import (active_workflows, initiate_legal_action,
                                      mark_letter_generated, mark_warning_sent,
                                      stage_for_months, update_debt_workflow_stages)
from condo_core.services.dues import set_all_units_monthly_due
from condo_core.services.payments import apply_unit_payment


@pytest.fixture
def billed(period, units):
    set_all_units_monthly_due(period, Decimal("100"))
    return period


@pytest.mark.parametrize("months, stage", [
    (0, 1), (2, 1), (3, 2), (5, 2), (6, 3), (8, 3), (9, 4), (24, 4),
])
def test_stage_for_months(months, stage):
    assert stage_for_months(months) == stage


@pytest.mark.django_db
def test_workflows_are_created_for_units_in_debt(billed, units, site):
    # unit 1 is fully paid up
    apply_unit_payment(units[0], Decimal("1200"), "TRY", datetime.date(2025, 1, 2))

    counts = update_debt_workflow_stages(site, today=datetime.date(2025, 11, 15))

    assert counts["created"] == 2
    assert not DebtWorkflow.objects.filter(unit=units[0]).exists()

    workflow = DebtWorkflow.objects.get(unit=units[1], is_active=True)
    # Jan..Nov fell due before the 15th of November
    assert workflow.total_debt_amount == Decimal("1100.00")
    assert workflow.oldest_unpaid_date == datetime.date(2025, 1, 1)
    assert workflow.months_overdue == 10
    assert workflow.stage == 4
    assert workflow.fiscal_period == billed
    # every stage on the way is stamped
    assert workflow.warning_sent_at and workflow.letter_generated_at and workflow.legal_action_at


@pytest.mark.django_db
def test_stage_escalates_but_never_drops(billed, units, site):
    update_debt_workflow_stages(site, today=datetime.date(2025, 3, 15))
    workflow = DebtWorkflow.objects.get(unit=units[0], is_active=True)
    assert workflow.stage == 1
    assert workflow.warning_sent_at is None

    counts = update_debt_workflow_stages(site, today=datetime.date(2025, 7, 15))
    workflow.refresh_from_db()
    assert counts["escalated"] == 3
    assert workflow.stage == 3
    assert workflow.warning_sent_at is not None

    # paying the oldest months shortens the overdue span, stage stays
    apply_unit_payment(units[0], Decimal("500"), "TRY", datetime.date(2025, 7, 16))
    update_debt_workflow_stages(site, today=datetime.date(2025, 7, 20))
    workflow.refresh_from_db()
    assert workflow.months_overdue == 1
    assert workflow.stage == 3


@pytest.mark.django_db
def test_workflow_closes_when_debt_is_paid(billed, units, site):
    update_debt_workflow_stages(site, today=datetime.date(2025, 3, 15))
    apply_unit_payment(units[1], Decimal("300"), "TRY", datetime.date(2025, 3, 16))

    counts = update_debt_workflow_stages(site, today=datetime.date(2025, 3, 20))

    assert counts["closed"] == 1
    assert not DebtWorkflow.objects.filter(unit=units[1], is_active=True).exists()
    closed = DebtWorkflow.objects.get(unit=units[1])
    assert closed.total_debt_amount == Decimal("0.00")


@pytest.mark.django_db
def test_manual_actions(billed, units, site, manager):
    update_debt_workflow_stages(site, today=datetime.date(2025, 3, 15))
    workflow = DebtWorkflow.objects.get(unit=units[0], is_active=True)

    mark_warning_sent(workflow, user=manager)
    assert workflow.warning_sent_at is not None
    assert workflow.stage == 1

    mark_letter_generated(workflow, user=manager)
    assert workflow.stage == 3

    with pytest.raises(ValidationError):
        initiate_legal_action(workflow, "   ", user=manager)

    initiate_legal_action(workflow, "2025/1234", user=manager)
    workflow.refresh_from_db()
    assert workflow.stage == 4
    assert workflow.legal_case_number == "2025/1234"


@pytest.mark.django_db
def test_active_workflows_filters(billed, units, site):
    update_debt_workflow_stages(site, today=datetime.date(2025, 3, 15))
    DebtWorkflow.objects.filter(unit=units[2]).update(stage=2)

    assert len(active_workflows(site)) == 3
    assert [w.unit for w in active_workflows(site, stage=2)] == [units[2]]
    assert [w.unit for w in active_workflows(site, search="owner 2")] == [units[1]]
