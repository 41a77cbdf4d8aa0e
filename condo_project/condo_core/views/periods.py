from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from ..models import BudgetCategory, FiscalPeriod, Unit
from ..services import dues as dues_service
from ..services import periods as period_service
from ..services.rollover import perform_fiscal_year_rollover
from ..services.permissions import page_required
from .helpers import body, fail, get_date, get_decimal, get_int, ok, period_data


def _period(request, period_id):
    # tenant scoped lookup, other sites' periods are a 404
    return get_object_or_404(FiscalPeriod, pk=period_id, site=request.site)


@require_GET
@page_required("/fiscal-periods")
def period_list_view(request):
    periods = FiscalPeriod.objects.for_site(request.site).order_by("-start_date")
    return ok({"periods": [period_data(p) for p in periods]})


@require_POST
@page_required("/fiscal-periods")
def period_create_view(request):
    data = body(request)
    try:
        period = period_service.create_fiscal_period(
            request.site,
            get_date(data, "start_date"),
            total_budget=get_decimal(data, "total_budget", default=0),
            categories=data.get("categories") or [],
            months=get_int(data, "months", default=12),
            name=data.get("name"),
            user=request.user,
        )
    except ValidationError as e:
        return fail(e)
    return ok({"period": period_data(period)}, status=201)


@require_POST
@page_required("/fiscal-periods")
def period_transition_view(request, period_id, action):
    period = _period(request, period_id)
    try:
        if action == "activate":
            period_service.activate_period(period, user=request.user)
        elif action == "close":
            period_service.close_period(period, user=request.user)
        else:
            return fail(f"Unknown action {action}", status=404)
    except ValidationError as e:
        return fail(e)
    return ok({"period": period_data(period)})


@require_POST
@page_required("/fiscal-periods")
def rollover_view(request, period_id):
    closing = _period(request, period_id)
    try:
        new = _period(request, get_int(body(request), "new_period_id"))
        transfers = perform_fiscal_year_rollover(closing, new, user=request.user)
    except ValidationError as e:
        return fail(e)
    closing.refresh_from_db()
    return ok({"transfers": transfers, "closed": period_data(closing)})


# ---------- Budget ----------
@require_GET
@page_required("/budget")
def budget_view(request, period_id):
    period = _period(request, period_id)
    return ok({
        "period": period_data(period),
        "categories": [
            {"id": b.pk, "category_name": b.category_name, "planned_amount": b.planned_amount,
             "actual_amount": b.actual_amount, "remaining": b.remaining}
            for b in period.budget_categories.all()
        ],
    })


@require_POST
@page_required("/budget")
def budget_category_save_view(request, period_id):
    period = _period(request, period_id)
    data = body(request)
    try:
        if data.get("id"):
            category = get_object_or_404(BudgetCategory, pk=get_int(data, "id"), fiscal_period=period)
            category = period_service.update_budget_category(
                category,
                planned_amount=data.get("planned_amount"),
                category_name=data.get("category_name"),
                sync_total=bool(data.get("sync_total")),
            )
        else:
            category = period_service.add_budget_category(
                period, data.get("category_name", ""),
                planned_amount=get_decimal(data, "planned_amount", default=0),
                sync_total=bool(data.get("sync_total")),
            )
    except ValidationError as e:
        return fail(e)
    return ok({"id": category.pk, "category_name": category.category_name,
               "planned_amount": category.planned_amount,
               "actual_amount": category.actual_amount})


@require_POST
@page_required("/budget")
def budget_category_delete_view(request, period_id, category_id):
    period = _period(request, period_id)
    category = get_object_or_404(BudgetCategory, pk=category_id, fiscal_period=period)
    try:
        period_service.delete_budget_category(category, sync_total=bool(body(request).get("sync_total")))
    except ValidationError as e:
        return fail(e)
    return ok()


# ---------- Dues ----------
@require_POST
@page_required("/budget")
def dues_generate_view(request, period_id):
    period = _period(request, period_id)
    try:
        created = dues_service.generate_fiscal_period_dues(period)
    except ValidationError as e:
        return fail(e)
    return ok({"created": created})


@require_POST
@page_required("/budget")
def monthly_due_view(request, period_id):
    """
    {"amount": "500"}                  -> every unit
    {"units": {"12": "500", ...}}      -> per unit
    {"unit_id": 12, "amount": "500"}   -> one unit, billed on the 15th
    """
    period = _period(request, period_id)
    data = body(request)
    currency = data.get("currency")
    try:
        if data.get("units"):
            updated = dues_service.set_varied_unit_monthly_dues(
                period, data["units"], currency=currency, user=request.user)
        elif data.get("unit_id"):
            unit = get_object_or_404(Unit, pk=get_int(data, "unit_id"), site=request.site)
            updated = dues_service.set_unit_monthly_due(
                unit, period, get_decimal(data, "amount"), currency=currency, user=request.user)
        else:
            updated = dues_service.set_all_units_monthly_due(
                period, get_decimal(data, "amount"), currency=currency, user=request.user)
    except ValidationError as e:
        return fail(e)
    return ok({"updated": updated})


@require_POST
@page_required("/budget")
def extra_fee_view(request, period_id):
    period = _period(request, period_id)
    data = body(request)
    try:
        created = dues_service.add_extra_fee(
            period,
            get_decimal(data, "amount"),
            get_date(data, "due_date"),
            data.get("description", ""),
            currency=data.get("currency"),
            replace_existing=bool(data.get("replace_existing")),
            user=request.user,
        )
    except ValidationError as e:
        return fail(e)
    return ok({"created": created})


@require_POST
@page_required("/budget")
def force_delete_dues_view(request, period_id):
    # site admins only
    if not request.user.is_superuser and request.user.role_for(request.site) != "admin":
        return fail("Only site admins can force-delete dues", status=403)
    period = _period(request, period_id)
    try:
        deleted = dues_service.admin_force_delete_dues(
            period, body(request).get("description", ""), user=request.user)
    except ValidationError as e:
        return fail(e)
    return ok({"deleted": deleted})
