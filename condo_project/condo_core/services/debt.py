import datetime
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from ..constants import DEBT_STAGE_THRESHOLDS, MAX_DEBT_STAGE
from ..models import DebtWorkflow, Due, Unit
from ..utils import ZERO, months_between, quantize_money
from .audit_helper import log_action

logger = logging.getLogger(__name__)


def stage_for_months(months_overdue):
    # < 3 -> 1, < 6 -> 2, < 9 -> 3, else 4
    for bound, stage in DEBT_STAGE_THRESHOLDS:
        if months_overdue < bound:
            return stage
    return MAX_DEBT_STAGE


def _stamp_stage(workflow, stage, now):
    workflow.stage = stage
    workflow.stage_changed_at = now
    # stage 2 is the warning stage, 3 the letter, 4 legal
    if stage >= 2 and workflow.warning_sent_at is None:
        workflow.warning_sent_at = now
    if stage >= 3 and workflow.letter_generated_at is None:
        workflow.letter_generated_at = now
    if stage >= 4 and workflow.legal_action_at is None:
        workflow.legal_action_at = now


def mark_overdue_dues(site, today):
    """pending dues past their due date become overdue."""
    count = 0
    for due in Due.objects.for_site(site).filter(
            status="pending", due_date__lt=today, total_amount__gt=0):
        due.status = due.compute_status(today)
        due.save(update_fields=["status", "updated_at"])
        count += 1
    return count


@transaction.atomic
def update_debt_workflow_stages(site, today=None):
    """
    Recompute every unit's collections stage from its oldest unpaid due.
    Stages only escalate here; manual actions may move them further.
    Returns {"created", "escalated", "updated", "closed"}.
    """
    today = today or datetime.date.today()
    now = timezone.now()
    counts = {"created": 0, "escalated": 0, "updated": 0, "closed": 0}
    mark_overdue_dues(site, today)
    active_period = site.active_period()

    for unit in Unit.objects.for_site(site):
        open_dues = [
            d for d in Due.objects.filter(unit=unit, due_date__lt=today).open()
            if d.outstanding > 0
        ]
        workflow = DebtWorkflow.objects.select_for_update().filter(
            unit=unit, is_active=True).first()

        if not open_dues:
            # no debt left -> close the workflow
            if workflow:
                workflow.is_active = False
                workflow.total_debt_amount = ZERO
                workflow.save(update_fields=["is_active", "total_debt_amount", "updated_at"])
                counts["closed"] += 1
            continue

        total_debt = quantize_money(sum((d.outstanding for d in open_dues), ZERO))
        oldest = min(d.due_date for d in open_dues)
        months = months_between(oldest, today)
        stage = stage_for_months(months)

        if workflow is None:
            workflow = DebtWorkflow(unit=unit, fiscal_period=active_period)
            _stamp_stage(workflow, stage, now)
            counts["created"] += 1
        elif stage > workflow.stage:
            _stamp_stage(workflow, stage, now)
            counts["escalated"] += 1
        else:
            counts["updated"] += 1

        workflow.total_debt_amount = total_debt
        workflow.oldest_unpaid_date = oldest
        workflow.months_overdue = months
        workflow.save()

    logger.info("Debt stages for site %s: %s", site.pk, counts)
    return counts


def active_workflows(site, stage=None, search=None):
    qs = DebtWorkflow.objects.filter(unit__site=site, is_active=True).select_related("unit")
    if stage:
        qs = qs.filter(stage=stage)
    if search:
        search = search.lower()
        qs = [
            w for w in qs
            if search in w.unit.unit_number.lower()
            or search in (w.unit.owner_name or "").lower()
            or search in (w.unit.block or "").lower()
        ]
    return qs


# ---------- Manual actions (DebtTracking page) ----------
def mark_warning_sent(workflow, user=None):
    workflow.warning_sent_at = timezone.now()
    workflow.save(update_fields=["warning_sent_at", "updated_at"])
    log_action(action="warning_sent", instance=workflow, user=user, site=workflow.unit.site)
    return workflow


def mark_letter_generated(workflow, user=None):
    now = timezone.now()
    workflow.letter_generated_at = now
    workflow.stage = max(workflow.stage, 3)
    workflow.stage_changed_at = now
    workflow.save(update_fields=["letter_generated_at", "stage", "stage_changed_at", "updated_at"])
    log_action(action="letter_generated", instance=workflow, user=user, site=workflow.unit.site)
    return workflow


def initiate_legal_action(workflow, case_number, user=None):
    case_number = (case_number or "").strip()
    if not case_number:
        raise ValidationError("A legal case number is required")
    now = timezone.now()
    workflow.legal_action_at = now
    workflow.legal_case_number = case_number
    workflow.stage = MAX_DEBT_STAGE
    workflow.stage_changed_at = now
    workflow.save(update_fields=["legal_action_at", "legal_case_number", "stage",
                                 "stage_changed_at", "updated_at"])
    log_action(action="legal_action", instance=workflow, user=user, site=workflow.unit.site,
               changes={"case_number": case_number})
    return workflow
