from django.core.exceptions import ValidationError
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from ..models import Account, Due, Payment, Unit, UnitType
from ..services import payments as payment_service
from ..services import units as unit_service
from ..services.permissions import page_required
from ..services.spreadsheets import XLSX_CONTENT_TYPE
from .helpers import (body, due_data, fail, get_date, get_decimal, get_int, ok, payment_data,
                      unit_data, unit_type_data)


@require_GET
@page_required("/units")
def unit_list_view(request):
    balances = unit_service.unit_balances(request.site)
    return ok({
        "units": [dict(unit_data(r["unit"]), balance=r["balance"]) for r in balances["rows"]],
        "total_balance": balances["total_balance"],
        "total_debt": balances["total_debt"],
        "total_credit": balances["total_credit"],
    })


@require_GET
@page_required("/residents")
def unit_statement_view(request, unit_id):
    """Resident statement: dues, payments and balance of one unit."""
    unit = get_object_or_404(Unit, pk=unit_id, site=request.site)
    return ok({
        "unit": unit_data(unit),
        "balance": unit_service.unit_balance(unit),
        "dues": [due_data(d) for d in Due.objects.filter(unit=unit).order_by("month_date", "id")],
        "payments": [payment_data(p) for p in Payment.objects.filter(unit=unit).chronological()],
    })


@require_POST
@page_required("/units")
def unit_import_view(request):
    upload = request.FILES.get("file")
    if upload is None:
        return fail("Upload an .xlsx file as 'file'")
    try:
        created = unit_service.import_units(request.site, upload, user=request.user)
    except ValidationError as e:
        return fail(e)
    return ok({"created": created}, status=201)


@require_GET
@page_required("/units")
def unit_export_view(request):
    response = HttpResponse(unit_service.export_units(request.site), content_type=XLSX_CONTENT_TYPE)
    response["Content-Disposition"] = f'attachment; filename="units_{request.site.slug}.xlsx"'
    return response


@require_POST
@page_required("/units")
def unit_save_view(request, unit_id=None):
    """Create a unit, or update the fields sent for `unit_id`."""
    unit = None
    if unit_id is not None:
        unit = get_object_or_404(Unit, pk=unit_id, site=request.site)
    try:
        unit = unit_service.save_unit(request.site, body(request), unit=unit, user=request.user)
    except ValidationError as e:
        return fail(e)
    return ok({"unit": unit_data(unit)}, status=201 if unit_id is None else 200)


@require_GET
@page_required("/units")
def unit_type_list_view(request):
    types = UnitType.objects.for_site(request.site).order_by("name")
    return ok({"unit_types": [unit_type_data(t) for t in types]})


@require_POST
@page_required("/units")
def unit_type_save_view(request, unit_type_id=None):
    unit_type = None
    if unit_type_id is not None:
        unit_type = get_object_or_404(UnitType, pk=unit_type_id, site=request.site)
    try:
        unit_type = unit_service.save_unit_type(
            request.site, body(request), unit_type=unit_type, user=request.user)
    except ValidationError as e:
        return fail(e)
    return ok({"unit_type": unit_type_data(unit_type)}, status=201 if unit_type_id is None else 200)


# ---------- Payments ----------
@require_POST
@page_required("/residents")
def payment_create_view(request, unit_id):
    unit = get_object_or_404(Unit, pk=unit_id, site=request.site)
    data = body(request)
    account = None
    if data.get("account_id"):
        account = get_object_or_404(Account, pk=get_int(data, "account_id"), site=request.site)
    try:
        result = payment_service.apply_unit_payment(
            unit,
            get_decimal(data, "amount"),
            data.get("currency") or request.site.default_currency_id,
            get_date(data, "payment_date"),
            payment_method=data.get("payment_method") or "cash",
            exchange_rate=get_decimal(data, "exchange_rate", default=1),
            account=account,
            reference_no=data.get("reference_no", ""),
            category=data.get("category") or "Maintenance Fees",
            notes=data.get("notes", ""),
            user=request.user,
        )
    except ValidationError as e:
        return fail(e)
    return ok({
        "payment": payment_data(result.payment),
        "applied": [{"due_id": a.due_id, "amount_applied": a.amount_applied}
                    for a in result.allocations],
        "total_applied": result.total_applied,
        "overpayment": result.overpayment,
        "ledger_entry_id": result.ledger_entry.pk if result.ledger_entry else None,
    }, status=201)


@require_POST
@page_required("/residents")
def payment_delete_view(request, payment_id):
    payment = get_object_or_404(Payment, pk=payment_id, unit__site=request.site)
    try:
        payment_service.delete_payment(payment, user=request.user)
    except ValidationError as e:
        return fail(e)
    return ok()
