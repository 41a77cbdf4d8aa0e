from django.core.exceptions import ValidationError
from django.db.models.signals import post_delete, post_save, pre_delete, pre_save
from django.dispatch import receiver

from .models import Account, FiscalPeriod, LedgerEntry, Payment
from .services.payments import reverse_payment_allocations
from .services.periods import recalculate_budget_actual

"""
    Keep BudgetCategory.actual_amount in step with the ledger.
    An edit can move an entry to another period or category,
    so both the old and the new (period, category) are recalculated.
"""


@receiver(pre_save, sender=LedgerEntry)
def remember_old_budget_key(sender, instance, **kwargs):
    instance._old_budget_key = None
    if instance.pk:
        old = LedgerEntry.objects.filter(pk=instance.pk).values_list(
            "fiscal_period_id", "category").first()
        instance._old_budget_key = old


def _recalculate(period_id, category):
    if not period_id:
        return
    period = FiscalPeriod.objects.filter(pk=period_id).first()
    if period is not None:  # gone when the site itself is being deleted
        recalculate_budget_actual(period, category)


@receiver(post_save, sender=LedgerEntry)
def ledger_entry_saved(sender, instance, **kwargs):
    old = getattr(instance, "_old_budget_key", None)
    if old and old != (instance.fiscal_period_id, instance.category):
        _recalculate(*old)
    _recalculate(instance.fiscal_period_id, instance.category)


@receiver(post_delete, sender=LedgerEntry)
def ledger_entry_deleted(sender, instance, **kwargs):
    _recalculate(instance.fiscal_period_id, instance.category)


"""Deleting a payment (admin, cascade) gives its amounts back to the dues."""


@receiver(pre_delete, sender=Payment)
def unwind_payment_allocations(sender, instance, **kwargs):
    reverse_payment_allocations(instance)


"""Block deletion if account has ever been used in a ledger entry."""


@receiver(pre_delete, sender=Account)
def prevent_delete_account_with_entries(sender, instance, **kwargs):
    used = LedgerEntry.objects.filter(account=instance).exists() or \
        LedgerEntry.objects.filter(from_account=instance).exists() or \
        LedgerEntry.objects.filter(to_account=instance).exists()
    if used:
        raise ValidationError("Cannot delete account used in ledger entries.")


"""Block deletion if period has ledger entries."""


@receiver(pre_delete, sender=FiscalPeriod)
def prevent_delete_period_with_entries(sender, instance, **kwargs):
    if LedgerEntry.objects.filter(fiscal_period=instance).exists():
        raise ValidationError(
            "Cannot delete a fiscal period with ledger entries.")
