from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from ..services import users as user_service
from ..services.permissions import page_required
from .helpers import body, fail, get_id_list, member_data, ok

User = get_user_model()


def _member(request, user_id):
    # only users with a membership at the current site can be managed here
    return get_object_or_404(User, pk=user_id, memberships__site=request.site)


@require_GET
@page_required("/users")
def user_list_view(request):
    return ok({"users": [member_data(row) for row in user_service.site_users(request.site)]})


@require_POST
@page_required("/users")
def user_invite_view(request):
    data = body(request)
    try:
        membership = user_service.invite_user(
            request.site,
            data.get("email"),
            data.get("role"),
            full_name=data.get("full_name", ""),
            unit_ids=get_id_list(data, "unit_ids"),
            invited_by=request.user,
        )
    except ValidationError as e:
        return fail(e)
    return ok({"user_id": membership.user_id, "role": membership.role}, status=201)


@require_POST
@page_required("/users")
def user_update_view(request, user_id):
    member = _member(request, user_id)
    data = body(request)
    try:
        membership = user_service.update_user(
            request.site, member, data.get("role"),
            unit_ids=get_id_list(data, "unit_ids"), updated_by=request.user)
    except ValidationError as e:
        return fail(e)
    return ok({"user_id": member.pk, "role": membership.role})


@require_POST
@page_required("/users")
def user_active_view(request, user_id):
    member = _member(request, user_id)
    if member == request.user:
        return fail("You cannot deactivate yourself")
    active = not body(request).get("deactivated", False)
    membership = user_service.set_user_active(request.site, member, active, updated_by=request.user)
    return ok({"user_id": member.pk, "is_active": membership.is_active})


@require_POST
@page_required("/users")
def user_remove_view(request, user_id):
    member = _member(request, user_id)
    if member == request.user:
        return fail("You cannot remove yourself from the site")
    released = user_service.remove_user_from_site(request.site, member, removed_by=request.user)
    return ok({"message": "User removed from site", "units_released": released})
