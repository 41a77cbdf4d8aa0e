import logging
from dataclasses import dataclass, field
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Sum

from ..exceptions import ExchangeRateUnavailable
from ..models import Due, LedgerEntry, Payment, PaymentAllocation, Unit
from ..models.payment import DEFAULT_PAYMENT_CATEGORY
from ..utils import ZERO, quantize_money, quantize_rate, to_decimal
from .audit_helper import log_action
from .currency import latest_rate, reporting_currency_code, to_reporting
from .periods import resolve_period

logger = logging.getLogger(__name__)


@dataclass
class PaymentResult:
    """What apply_unit_payment did with one payment."""
    payment: Payment
    dues_currency: str
    total_applied: Decimal
    overpayment: Decimal
    allocations: list = field(default_factory=list)
    ledger_entry: LedgerEntry = None


# ----------------------------
# Payment-related workflows
# ----------------------------
def _dues_currency(unit):
    """Currency the unit is billed in: its oldest open due's, else the site default."""
    due = (
        Due.objects.filter(unit=unit).open().oldest_first()
        .filter(total_amount__gt=0).only("currency_id").first()
    )
    return due.currency_id if due else unit.site.default_currency_id


def _allocate(payment, available, dues_currency):
    """
    Spread `available` (dues currency) over the unit's open dues, oldest first.
    Returns (allocations, remaining).
    """
    remaining = quantize_money(available)
    allocations = []
    # Lock the dues rows until the transaction finishes
    dues = (
        Due.objects.select_for_update()
        .filter(unit_id=payment.unit_id, currency_id=dues_currency)
        .open()
        .oldest_first()
    )
    for due in dues:
        if remaining <= 0:
            break
        outstanding = due.outstanding
        if outstanding <= 0:
            continue  # zero-amount placeholder
        applied = min(remaining, outstanding)

        due.paid_amount = quantize_money(due.paid_amount + applied)
        due.status = due.compute_status()
        due.save(update_fields=["paid_amount", "status", "updated_at"])

        """ This represents X amount of this payment settles this due """
        allocations.append(PaymentAllocation.objects.create(
            payment=payment, due=due, amount_applied=applied))
        remaining -= applied
    return allocations, quantize_money(remaining)


def _reporting_amount(payment, dues_currency):
    reporting = reporting_currency_code()
    if payment.currency_id == reporting:
        return quantize_money(payment.amount)
    if dues_currency == reporting:
        return payment.amount_in_dues_currency
    try:
        return to_reporting(payment.amount, payment.currency_id, payment.payment_date)
    except ExchangeRateUnavailable:
        logger.warning(
            "No %s rate for %s, reporting payment %s at its dues-currency value",
            payment.currency_id, payment.payment_date, payment.pk)
        return payment.amount_in_dues_currency


def _create_payment_ledger_entry(payment, dues_currency, user=None):
    """Income row in the receiving account, in the account's currency when possible."""
    account = payment.account
    if account.currency_id == payment.currency_id:
        amount, currency = payment.amount, payment.currency_id
    elif account.currency_id == dues_currency:
        amount, currency = payment.amount_in_dues_currency, dues_currency
    else:
        amount, currency = payment.amount, payment.currency_id

    description = f"Unit {payment.unit.label} - {payment.category}"
    if payment.reference_no:
        description += f" (Ref: {payment.reference_no})"

    try:
        period = resolve_period(payment.unit.site, payment.payment_date)
    except ValidationError:
        period = None  # no open year yet; entry stays unassigned

    rate = quantize_rate(payment.amount_reporting / amount) if amount else Decimal("1")
    entry = LedgerEntry(
        site=payment.unit.site,
        fiscal_period=period,
        entry_type="income",
        category=payment.category,
        description=description,
        amount=amount,
        currency_id=currency,
        exchange_rate=rate,
        entry_date=payment.payment_date,
        account=account,
        unit=payment.unit,
        payment=payment,
        created_by=payment.created_by,
    )
    entry.save()
    return entry


def apply_unit_payment(unit, amount, currency, payment_date, payment_method="cash",
                       exchange_rate=1, account=None, reference_no="",
                       category=DEFAULT_PAYMENT_CATEGORY, notes="", user=None):
    """
    Record a payment from `unit` and apply it to the unit's open dues, oldest first.
    `exchange_rate` converts the payment currency into the dues currency.
    Any remainder is kept on the payment as unapplied credit.
    """
    amount = quantize_money(amount)
    if amount <= 0:
        raise ValidationError("Payment amount must be > 0")
    rate = to_decimal(exchange_rate, default=Decimal("1"))
    if rate <= 0:
        raise ValidationError("Exchange rate must be > 0")
    currency_code = getattr(currency, "code", currency)

    # Everything inside either succeeds as one unit or rolls back
    with transaction.atomic():
        # Serialise payments of the same unit
        unit = Unit.objects.select_for_update().select_related("site").get(pk=unit.pk)
        dues_currency = _dues_currency(unit)
        if currency_code == dues_currency:
            rate = Decimal("1")

        payment = Payment(
            unit=unit,
            amount=amount,
            currency_id=currency_code,
            exchange_rate=rate,
            amount_in_dues_currency=quantize_money(amount * rate),
            dues_currency_id=dues_currency,
            payment_date=payment_date,
            payment_method=payment_method,
            reference_no=reference_no or "",
            account=account,
            category=category or DEFAULT_PAYMENT_CATEGORY,
            notes=notes or "",
            created_by=user if getattr(user, "is_authenticated", False) else None,
        )
        payment.amount_reporting = _reporting_amount(payment, dues_currency)
        payment.save()

        allocations, remaining = _allocate(payment, payment.amount_in_dues_currency, dues_currency)
        payment.unapplied_amount = remaining
        payment.save(update_fields=["unapplied_amount"])

        entry = None
        if account is not None:
            entry = _create_payment_ledger_entry(payment, dues_currency, user=user)

        total_applied = payment.amount_in_dues_currency - remaining

        # AUDIT LOGS
        log_action(
            action="apply_payment",
            instance=payment,
            user=user,
            changes={
                "amount": str(amount),
                "currency": currency_code,
                "dues_currency": dues_currency,
                "applied_dues": [
                    {"due_id": a.due_id, "month_date": str(a.due.month_date),
                     "amount_applied": str(a.amount_applied)}
                    for a in allocations
                ],
                "overpayment": str(remaining),
            },
        )

    logger.info("Payment %s for unit %s: applied %s, overpayment %s",
                payment.pk, unit.label, total_applied, remaining)
    return PaymentResult(
        payment=payment,
        dues_currency=dues_currency,
        total_applied=total_applied,
        overpayment=remaining,
        allocations=allocations,
        ledger_entry=entry,
    )


def reverse_payment_allocations(payment):
    """Give back every amount this payment applied to dues."""
    for allocation in payment.allocations.all():
        due = Due.objects.select_for_update().get(pk=allocation.due_id)
        due.paid_amount = max(due.paid_amount - allocation.amount_applied, ZERO)
        due.status = due.compute_status()
        due.save(update_fields=["paid_amount", "status", "updated_at"])
    payment.allocations.all().delete()


@transaction.atomic
def delete_payment(payment, user=None):
    """Unwind the payment's dues applications; its ledger entry goes with it (CASCADE)."""
    payment = Payment.objects.select_for_update().get(pk=payment.pk)
    reverse_payment_allocations(payment)
    log_action(action="delete", instance=payment, user=user,
               changes={"amount": str(payment.amount), "currency": payment.currency_id,
                        "payment_date": str(payment.payment_date)})
    payment.delete()


def convert_payment(payment, target_currency):
    """
    Value of `payment` in `target_currency`, going through its reporting amount.
    Raises ExchangeRateUnavailable when `target_currency` has no stored rate
    on or before the payment date.
    """
    if payment.currency_id == target_currency:
        return quantize_money(payment.amount)
    if target_currency == reporting_currency_code():
        return quantize_money(payment.amount_reporting)
    rate = latest_rate(target_currency, payment.payment_date)
    if not rate:
        raise ExchangeRateUnavailable(
            f"No {target_currency} rate on or before {payment.payment_date} "
            f"to re-apply payment {payment.pk}")
    return quantize_money(payment.amount_reporting / rate)


def _rebase_payment(payment, dues_currency):
    """Express the payment in the unit's new dues currency."""
    old_value = payment.amount_in_dues_currency
    new_value = convert_payment(payment, dues_currency)
    logger.info("Payment %s converted from %s %s to %s %s", payment.pk, old_value,
                payment.dues_currency_id, new_value, dues_currency)
    payment.amount_in_dues_currency = new_value
    payment.exchange_rate = quantize_rate(new_value / payment.amount)
    payment.dues_currency_id = dues_currency
    payment.save(update_fields=["amount_in_dues_currency", "exchange_rate", "dues_currency"])
    return old_value


@transaction.atomic
def reapply_unit_payments(unit):
    """
    Reset every allocation of the unit and replay its payments
    chronologically. Used after due amounts change.
    Allocations on carried-over dues are history and stay untouched.
    Payments converted into another currency than the one the unit is
    billed in now are converted again first.
    """
    unit = Unit.objects.select_for_update().get(pk=unit.pk)

    PaymentAllocation.objects.filter(payment__unit=unit).exclude(
        due__status="carried_over").delete()
    for due in Due.objects.select_for_update().filter(unit=unit).exclude(status="carried_over"):
        due.paid_amount = ZERO
        due.status = due.compute_status()
        due.save(update_fields=["paid_amount", "status", "updated_at"])

    dues_currency = _dues_currency(unit)
    for payment in Payment.objects.select_for_update().filter(unit=unit).chronological():
        kept = payment.allocations.aggregate(total=Sum("amount_applied"))["total"] or ZERO
        available = payment.amount_in_dues_currency - kept
        if payment.dues_currency_id != dues_currency:
            old_value = _rebase_payment(payment, dues_currency)
            # the share already spent on carried-over dues stays spent
            available = payment.amount_in_dues_currency
            if kept and old_value > 0:
                available = quantize_money(available * (old_value - kept) / old_value)
        _, remaining = _allocate(payment, available, dues_currency)
        if remaining != payment.unapplied_amount:
            payment.unapplied_amount = remaining
            payment.save(update_fields=["unapplied_amount"])
    return unit
