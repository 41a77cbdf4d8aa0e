from django.http import Http404
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET

from ..models import FiscalPeriod
from ..services import reports
from ..services.permissions import page_required
from .helpers import entry_data, ok, period_data


def _period(request):
    period_id = request.GET.get("period")
    if period_id:
        return get_object_or_404(FiscalPeriod, pk=period_id, site=request.site)
    period = request.site.active_period() if request.site else None
    if period is None:
        period = FiscalPeriod.objects.for_site(request.site).order_by("-start_date").first()
    if period is None:
        raise Http404("No fiscal period")
    return period


@require_GET
@page_required("/dashboard")
def dashboard_view(request):
    summary = reports.dashboard_summary(request.site)
    summary.pop("site")
    period = summary.pop("period")
    summary["period"] = period_data(period) if period else None
    summary["recent_entries"] = [entry_data(e) for e in summary["recent_entries"]]
    return ok(summary)


@require_GET
@page_required("/budget-vs-actual")
def budget_vs_actual_view(request):
    report = reports.budget_vs_actual(_period(request))
    report["period"] = period_data(report["period"])
    return ok(report)


@require_GET
@page_required("/monthly-income-expenses")
def monthly_income_expenses_view(request):
    period = _period(request)
    report = reports.monthly_income_expenses(period)
    report["period"] = period_data(period)
    return ok(report)
