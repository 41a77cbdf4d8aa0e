from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied, ValidationError
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from ..services import tickets as ticket_service
from ..services.permissions import page_required
from .helpers import body, fail, get_int, ok, ticket_data

User = get_user_model()


@require_GET
@page_required("/tickets")
def ticket_list_view(request):
    tickets = ticket_service.visible_tickets(
        request.user, request.site, status=request.GET.get("status"))
    return ok({"tickets": [ticket_data(t) for t in tickets]})


@require_POST
@page_required("/tickets")
def ticket_create_view(request):
    data = body(request)
    try:
        ticket = ticket_service.open_ticket(
            request.user, request.site,
            data.get("title"),
            description=data.get("description", ""),
            category=data.get("category"),
            priority=data.get("priority"),
        )
    except PermissionDenied as e:
        return fail(str(e), status=403)
    except ValidationError as e:
        return fail(e)
    return ok({"ticket": ticket_data(ticket)}, status=201)


@require_POST
@page_required("/tickets")
def ticket_update_view(request, ticket_id):
    # tickets the user cannot see are a 404
    ticket = get_object_or_404(
        ticket_service.visible_tickets(request.user, request.site), pk=ticket_id)
    data = body(request)
    try:
        assignee = None
        if data.get("assigned_to"):
            assignee = get_object_or_404(User, pk=get_int(data, "assigned_to"))
        ticket = ticket_service.update_ticket(
            ticket, request.user,
            status=data.get("status"),
            priority=data.get("priority"),
            assigned_to=assignee,
            resolution_notes=data.get("resolution_notes"),
        )
    except PermissionDenied as e:
        return fail(str(e), status=403)
    except ValidationError as e:
        return fail(e)
    return ok({"ticket": ticket_data(ticket)})


@require_GET
@page_required("/tickets")
def ticket_detail_view(request, ticket_id):
    ticket = get_object_or_404(
        ticket_service.visible_tickets(request.user, request.site), pk=ticket_id)
    return ok({"ticket": ticket_data(ticket)})
