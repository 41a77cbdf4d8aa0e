from django.core.exceptions import ValidationError
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from ..models import FiscalPeriod, LedgerImport
from ..services import importing
from ..services.permissions import page_required
from ..services.spreadsheets import XLSX_CONTENT_TYPE
from .helpers import body, fail, get_int, ok


def _batch_data(batch):
    return {"id": batch.pk, "status": batch.status, "file_name": batch.file_name,
            "headers": batch.headers, "column_mapping": batch.column_mapping,
            "preview_rows": batch.preview_rows, "success_count": batch.success_count,
            "error_count": batch.error_count, "error_details": batch.error_details}


@require_POST
@page_required("/import-ledger")
def import_start_view(request):
    upload = request.FILES.get("file")
    if upload is None:
        return fail("Upload an .xlsx file as 'file'")
    try:
        batch = importing.start_ledger_import(request.site, request.user, upload, upload.name)
    except ValidationError as e:
        return fail(e)
    return ok({"import": _batch_data(batch)}, status=201)


@require_POST
@page_required("/import-ledger")
def import_mapping_view(request, import_id):
    batch = get_object_or_404(LedgerImport, pk=import_id, site=request.site)
    try:
        importing.apply_column_mapping(batch, body(request).get("mapping") or {})
    except ValidationError as e:
        return fail(e)
    return ok({"import": _batch_data(batch)})


@require_POST
@page_required("/import-ledger")
def import_run_view(request, import_id):
    batch = get_object_or_404(LedgerImport, pk=import_id, site=request.site)
    try:
        period = get_object_or_404(
            FiscalPeriod, pk=get_int(body(request), "fiscal_period_id"), site=request.site)
        importing.run_ledger_import(batch, period, user=request.user)
    except ValidationError as e:
        return fail(e)
    return ok({"import": _batch_data(batch)})


@require_GET
@page_required("/import-ledger")
def import_template_view(request):
    response = HttpResponse(importing.ledger_import_template(), content_type=XLSX_CONTENT_TYPE)
    response["Content-Disposition"] = 'attachment; filename="ledger_import_template.xlsx"'
    return response
