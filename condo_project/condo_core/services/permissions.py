import functools
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.http import JsonResponse

from ..constants import DEFAULT_ROLE_PERMISSIONS, PAGES, WILDCARD_PAGE
from ..models import RolePermission, SiteMembership

logger = logging.getLogger(__name__)

ROLES = [code for code, _ in SiteMembership.ROLE_CHOICES]


def allowed_pages(role):
    return set(RolePermission.objects.filter(role=role).values_list("page_path", flat=True))


def can_access(user, site, path):
    """Superusers always; otherwise the user's active role at `site` must list `path` (or "*")."""
    if user is None or not getattr(user, "is_authenticated", False):
        return False
    if user.is_superuser:
        return True
    role = user.role_for(site)
    if role is None:
        return False
    return RolePermission.objects.filter(
        role=role, page_path__in=(path, WILDCARD_PAGE)).exists()


def permission_matrix():
    """{role: sorted page paths}"""
    matrix = {role: [] for role in ROLES}
    for role, path in RolePermission.objects.values_list("role", "page_path"):
        matrix.setdefault(role, []).append(path)
    return {role: sorted(paths) for role, paths in matrix.items()}


def _validate_matrix(matrix):
    for role, paths in matrix.items():
        if role not in ROLES:
            raise ValidationError(f"Unknown role: {role}")
        for path in paths:
            if path != WILDCARD_PAGE and path not in PAGES:
                raise ValidationError(f"Unknown page: {path}")


@transaction.atomic
def replace_role_permissions(matrix):
    """Replace the rows of every role present in `matrix`."""
    _validate_matrix(matrix)
    RolePermission.objects.filter(role__in=list(matrix)).delete()
    RolePermission.objects.bulk_create([
        RolePermission(role=role, page_path=path)
        for role, paths in matrix.items()
        for path in sorted(set(paths))
    ])
    logger.info("Role permissions replaced for %s", ", ".join(sorted(matrix)))


def seed_default_permissions():
    """Insert missing default rows. Returns the number created."""
    created = 0
    for role, paths in DEFAULT_ROLE_PERMISSIONS.items():
        for path in paths:
            _, was_created = RolePermission.objects.get_or_create(role=role, page_path=path)
            created += int(was_created)
    return created


def page_required(path):
    """View decorator: 403 JSON unless the user may open `path` on request.site."""
    def decorator(view):
        @functools.wraps(view)
        def wrapper(request, *args, **kwargs):
            if not can_access(request.user, getattr(request, "site", None), path):
                return JsonResponse(
                    {"ok": False, "error": f"No access to {path}"}, status=403)
            if getattr(request, "site", None) is None:
                return JsonResponse({"ok": False, "error": "Select a site first"}, status=400)
            return view(request, *args, **kwargs)
        return wrapper
    return decorator
