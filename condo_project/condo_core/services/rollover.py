import logging
from itertools import groupby
from operator import attrgetter

from django.db import transaction
from django.db.models import Sum

from ..exceptions import RolloverError
from ..models import BalanceTransfer, DebtWorkflow, Due, FiscalPeriod, Payment, Unit
from ..models.dues import CARRIED_DEBT_DESCRIPTION
from ..utils import ZERO, quantize_money
from .audit_helper import log_action

logger = logging.getLogger(__name__)


def _check_pair(closing, new):
    if closing.site_id != new.site_id:
        raise RolloverError("Both periods must belong to the same site.")
    if closing.pk == new.pk:
        raise RolloverError("Cannot roll a period over into itself.")
    if closing.is_closed:
        raise RolloverError(f"{closing.name} is already closed.")
    if new.status != "draft":
        raise RolloverError(f"{new.name} must be a draft period.")
    if new.start_date <= closing.end_date:
        raise RolloverError(f"{new.name} must start after {closing.name} ends.")


def rollover_candidates(closing):
    """Draft periods the closing period can roll into."""
    return FiscalPeriod.objects.filter(
        site_id=closing.site_id, status="draft", start_date__gt=closing.end_date)


def perform_fiscal_year_rollover(closing, new, user=None):
    """
    Carry every unit's unpaid dues, credits and legal flags from `closing`
    into `new`, then close `closing`. All or nothing.
    Returns the number of BalanceTransfer rows written.
    """
    with transaction.atomic():
        # Lock both periods
        closing = FiscalPeriod.objects.select_for_update().get(pk=closing.pk)
        new = FiscalPeriod.objects.select_for_update().get(pk=new.pk)
        _check_pair(closing, new)
        site = closing.site
        transfers = 0

        for unit in Unit.objects.for_site(site):
            # 1. debt: outstanding of this year's open dues, one opening due per currency
            open_dues = [
                d for d in Due.objects.select_for_update().filter(
                    unit=unit, fiscal_period=closing).open().order_by("currency_id", "month_date")
                if d.outstanding > 0
            ]
            for currency_code, dues in groupby(open_dues, key=attrgetter("currency_id")):
                dues = list(dues)
                debt = quantize_money(sum((d.outstanding for d in dues), ZERO))
                BalanceTransfer.objects.create(
                    unit=unit, from_period=closing, to_period=new,
                    transfer_type="debt", amount=debt, currency_id=currency_code,
                    description=f"Unpaid dues carried from {closing.name} ({currency_code})",
                )
                Due.objects.create(
                    unit=unit,
                    fiscal_period=new,
                    month_date=new.start_date,
                    due_date=new.start_date,
                    base_amount=debt,
                    currency_id=currency_code,
                    description=CARRIED_DEBT_DESCRIPTION,
                    is_from_previous_period=True,
                    previous_period=closing,
                    notes=f"Carried from {closing.name}",
                )
                # their outstanding now lives on the new due
                for due in dues:
                    due.status = "carried_over"
                    due.save(update_fields=["status", "updated_at"])
                transfers += 1

            # 2. credit: overpayments made during the year (informational)
            credits = (
                Payment.objects.filter(
                    unit=unit,
                    payment_date__gte=closing.start_date,
                    payment_date__lte=closing.end_date,
                    unapplied_amount__gt=0,
                )
                .values("dues_currency_id")
                .annotate(total=Sum("unapplied_amount"))
                .order_by("dues_currency_id")
            )
            for row in credits:
                currency_code = row["dues_currency_id"] or site.default_currency_id
                BalanceTransfer.objects.create(
                    unit=unit, from_period=closing, to_period=new,
                    transfer_type="credit", amount=quantize_money(row["total"]),
                    currency_id=currency_code,
                    description=f"Credit brought forward from {closing.name} ({currency_code})",
                )
                transfers += 1

            # 3. legal flag: warning stage or worse follows the unit
            workflow = DebtWorkflow.objects.select_for_update().filter(
                unit=unit, is_active=True, stage__gte=2).first()
            if workflow:
                BalanceTransfer.objects.create(
                    unit=unit, from_period=closing, to_period=new,
                    transfer_type="legal_flag", amount=workflow.total_debt_amount,
                    legal_stage=workflow.stage,
                    description=f"Debt workflow stage {workflow.stage} carried forward",
                )
                workflow.fiscal_period = new
                workflow.save(update_fields=["fiscal_period", "updated_at"])
                transfers += 1

        closing.transition_to("closed")
        log_action(action="rollover", instance=closing, user=user,
                   changes={"to_period": new.pk, "transfers": transfers})

    logger.info("Rolled %s over into %s: %s transfers", closing.name, new.name, transfers)
    return transfers
