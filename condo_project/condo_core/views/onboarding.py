from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from ..exceptions import UnitsAlreadyOwnedError
from ..models import Site
from ..services import onboarding
from .helpers import body, fail, get_id_list, get_int, ok, period_data


def _site(site_id):
    if site_id is None:
        return None
    return Site.objects.filter(pk=site_id, is_active=True).first()


@require_GET
def onboarding_sites_view(request):
    if not request.user.is_authenticated:
        return fail("Login required", status=403)
    return ok({"sites": [{"id": s.pk, "name": s.name} for s in onboarding.available_sites()]})


@require_GET
def onboarding_units_view(request):
    if not request.user.is_authenticated:
        return fail("Login required", status=403)
    try:
        units = onboarding.available_units(_site(get_int(request.GET, "site_id")))
    except ValidationError as e:
        return fail(e)
    return ok({"units": [{"id": u.pk, "unit_number": u.unit_number, "block": u.block}
                         for u in units]})


@require_POST
def onboarding_complete_view(request):
    if not request.user.is_authenticated:
        return fail("Login required", status=403)
    data = body(request)
    try:
        onboarding.complete_onboarding(
            request.user, _site(get_int(data, "site_id")), get_id_list(data, "unit_ids"))
    except UnitsAlreadyOwnedError as e:
        return JsonResponse({"ok": False, "error": e.message, "conflicts": e.conflicts}, status=409)
    except ValidationError as e:
        return fail(e)
    return ok({"message": "Onboarding completed successfully"})


@require_POST
def site_wizard_view(request):
    """Any logged-in user may set up a new site; they become its admin."""
    if not request.user.is_authenticated:
        return fail("Login required", status=403)
    data = body(request)
    try:
        site, period = onboarding.create_site_with_wizard(
            request.user,
            data.get("name"),
            data.get("default_currency") or settings.REPORTING_CURRENCY,
            address=data.get("address", ""),
            city=data.get("city", ""),
            distribution_method=data.get("distribution_method") or "coefficient",
            unit_types=data.get("unit_types") or [],
            fiscal_start=onboarding.first_of_month(
                data.get("fiscal_start_year"), data.get("fiscal_start_month") or 1),
            budget=data.get("budget") or {},
        )
    except ValidationError as e:
        return fail(e)
    request.session["active_site_id"] = site.pk
    return ok({"site": {"id": site.pk, "name": site.name, "slug": site.slug},
               "period": period_data(period)}, status=201)
