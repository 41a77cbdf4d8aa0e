from django.contrib.auth import authenticate, login, logout
from django.views.decorators.http import require_POST

from ..models import Site
from .helpers import body, fail, ok


@require_POST
def login_view(request):
    data = body(request)
    user = authenticate(request, username=data.get("username"), password=data.get("password"))
    if user is None:
        return fail("Invalid username or password", status=401)
    login(request, user)
    return ok({"user": user.username, "language": user.language,
               "default_site": user.default_site_id, "is_superuser": user.is_superuser})


@require_POST
def logout_view(request):
    logout(request)
    return ok()


@require_POST
def switch_site_view(request):
    """Remember the chosen site in the session (CurrentSiteMiddleware reads it)."""
    if not request.user.is_authenticated:
        return fail("Login required", status=403)
    site_id = body(request).get("site_id")
    sites = Site.objects.filter(pk=site_id, is_active=True)
    if not request.user.is_superuser:
        sites = sites.filter(memberships__user=request.user, memberships__is_active=True)
    site = sites.first()
    if site is None:
        return fail("Site not found", status=404)
    request.session["active_site_id"] = site.pk
    return ok({"site": {"id": site.pk, "name": site.name,
                        "role": request.user.role_for(site)}})
