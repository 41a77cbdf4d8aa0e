from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from ..models import DebtWorkflow
from ..services import debt as debt_service
from ..services.permissions import page_required
from .helpers import body, fail, get_int, ok, workflow_data


@require_GET
@page_required("/debt-tracking")
def debt_list_view(request):
    try:
        stage = get_int(request.GET, "stage")
    except ValidationError as e:
        return fail(e)
    workflows = debt_service.active_workflows(
        request.site, stage=stage, search=request.GET.get("search"))
    return ok({"workflows": [workflow_data(w) for w in workflows]})


@require_POST
@page_required("/debt-tracking")
def debt_refresh_view(request):
    counts = debt_service.update_debt_workflow_stages(request.site)
    return ok(counts)


@require_POST
@page_required("/debt-tracking")
def debt_action_view(request, workflow_id, action):
    workflow = get_object_or_404(DebtWorkflow, pk=workflow_id, unit__site=request.site)
    try:
        if action == "warning":
            debt_service.mark_warning_sent(workflow, user=request.user)
        elif action == "letter":
            debt_service.mark_letter_generated(workflow, user=request.user)
        elif action == "legal":
            debt_service.initiate_legal_action(
                workflow, body(request).get("case_number", ""), user=request.user)
        else:
            return fail(f"Unknown action {action}", status=404)
    except ValidationError as e:
        return fail(e)
    return ok({"workflow": workflow_data(workflow)})
