from django.core.exceptions import PermissionDenied, ValidationError
from django.views.decorators.http import require_GET, require_POST

from ..services import localization
from ..services import permissions as permission_service
from ..services.units import my_account_summary
from .helpers import body, due_data, fail, ok, payment_data, unit_data


# ---------- Translations ----------
@require_GET
def translations_view(request, language):
    # public: the login page is translated too
    try:
        return ok({"language": language, "strings": localization.get_dictionary(language)})
    except ValidationError as e:
        return fail(e)


@require_POST
def translation_upsert_view(request):
    data = body(request)
    try:
        row = localization.upsert_translation(request.user, data.get("key"), data.get("values") or {})
    except PermissionDenied as e:
        return fail(str(e) or "Permission denied", status=403)
    except ValidationError as e:
        return fail(e)
    return ok({"key": row.key})


@require_POST
def language_view(request):
    if not request.user.is_authenticated:
        return fail("Login required", status=403)
    try:
        localization.set_user_language(request.user, body(request).get("language"))
    except ValidationError as e:
        return fail(e)
    return ok({"language": request.user.language})


# ---------- Role matrix ----------
@require_GET
@permission_service.page_required("/role-settings")
def role_permissions_view(request):
    return ok({"matrix": permission_service.permission_matrix()})


@require_POST
@permission_service.page_required("/role-settings")
def role_permissions_replace_view(request):
    try:
        permission_service.replace_role_permissions(body(request).get("matrix") or {})
    except ValidationError as e:
        return fail(e)
    return ok({"matrix": permission_service.permission_matrix()})


@require_GET
def my_pages_view(request):
    """Pages the current user may open on the current site."""
    if not request.user.is_authenticated:
        return fail("Login required", status=403)
    site = getattr(request, "site", None)
    pages = [
        path for path in permission_service.PAGES
        if permission_service.can_access(request.user, site, path)
    ]
    return ok({"pages": pages, "role": request.user.role_for(site)})


# ---------- My account ----------
@require_GET
@permission_service.page_required("/my-account")
def my_account_view(request):
    summary = my_account_summary(request.user)
    return ok({
        "language": summary["language"],
        "units": [
            {
                "unit": unit_data(u["unit"]),
                "opening_balance": u["opening_balance"],
                "total_paid": u["total_paid"],
                "balance": u["balance"],
                "debt_stage": u["debt_stage"],
                "dues": [due_data(d) for d in u["dues"]],
                "payments": [payment_data(p) for p in u["payments"]],
            }
            for u in summary["units"]
        ],
    })
