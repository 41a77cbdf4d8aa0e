from django.contrib import admin, messages
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.translation import gettext_lazy as _

from condo_core.models import FiscalPeriod
from condo_core.services.debt import update_debt_workflow_stages
from condo_core.services.dues import generate_fiscal_period_dues
from condo_core.services.periods import activate_period, close_period, recalculate_period_actuals

# ---------- Admin actions ----------


def _run_per_period(modeladmin, request, queryset, func, verb):
    """
    Call func(period) for each selected period, one small transaction each.
    Reports per-period failures and a final summary via admin messages.
    """
    success = 0
    failures = 0
    for period in queryset:
        try:
            with transaction.atomic():
                locked = FiscalPeriod.objects.select_for_update().get(pk=period.pk)
                func(locked)
            success += 1
        except ValidationError as exc:
            failures += 1
            modeladmin.message_user(
                request,
                _("Could not %(verb)s %(period)s: %(err)s") % {
                    "verb": verb, "period": period, "err": "; ".join(exc.messages)},
                level=messages.ERROR,
            )

    modeladmin.message_user(
        request,
        _("%(verb)s: %(success)d of %(total)d periods. %(failures)d failed.") % {
            "verb": verb.capitalize(),
            "success": success,
            "total": success + failures,
            "failures": failures,
        },
        level=messages.SUCCESS if failures == 0 else messages.WARNING,
    )


@admin.action(description="Activate selected fiscal periods")
def activate_periods(modeladmin, request, queryset):
    # transition_to() enforces draft -> active and one active period per site
    _run_per_period(modeladmin, request, queryset,
                    lambda p: activate_period(p, user=request.user), "activate")


@admin.action(description="Close selected fiscal periods")
def close_periods(modeladmin, request, queryset):
    _run_per_period(modeladmin, request, queryset,
                    lambda p: close_period(p, user=request.user), "close")


@admin.action(description="Generate missing monthly dues")
def generate_dues(modeladmin, request, queryset):
    _run_per_period(modeladmin, request, queryset, generate_fiscal_period_dues, "generate dues for")


@admin.action(description="Recalculate budget actuals")
def recalculate_actuals(modeladmin, request, queryset):
    _run_per_period(modeladmin, request, queryset, recalculate_period_actuals, "recalculate")


@admin.action(description="Refresh debt workflow stages")
def refresh_debt_stages(modeladmin, request, queryset):
    """Run on the Site changelist."""
    for site in queryset:
        counts = update_debt_workflow_stages(site)
        modeladmin.message_user(
            request,
            _("%(site)s: %(created)d created, %(escalated)d escalated, %(closed)d closed") % {
                "site": site, **counts},
        )
