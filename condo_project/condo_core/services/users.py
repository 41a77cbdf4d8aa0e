import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction

from ..models import SiteMembership, Unit
from .audit_helper import log_action
from .permissions import ROLES

logger = logging.getLogger(__name__)

User = get_user_model()


def site_users(site):
    """Every membership of `site` with its user and the units they own there, by email."""
    memberships = (
        SiteMembership.objects.filter(site=site)
        .select_related("user")
        .order_by("user__email", "user__username")
    )
    owned = {}
    for unit in Unit.objects.for_site(site).filter(owner__isnull=False).order_by("unit_number"):
        owned.setdefault(unit.owner_id, []).append(unit)
    return [
        {"membership": m, "user": m.user, "units": owned.get(m.user_id, [])}
        for m in memberships
    ]


def _check_role(role):
    if role not in ROLES:
        raise ValidationError(f"Unknown role: {role}")


def _site_units(site, unit_ids):
    unit_ids = list(unit_ids or [])
    units = list(Unit.objects.filter(site=site, pk__in=unit_ids))
    if len(units) != len(set(unit_ids)):
        raise ValidationError("Every unit must exist and belong to the site.")
    return units


def _assign_units(user, units):
    for unit in units:
        unit.owner = user
        unit.owner_name = user.get_full_name() or unit.owner_name
        unit.owner_email = user.email or unit.owner_email
        unit.save()


def _membership(site, user):
    try:
        return SiteMembership.objects.select_for_update().get(site=site, user=user)
    except SiteMembership.DoesNotExist:
        raise ValidationError(f"{user} is not a member of {site}")


@transaction.atomic
def invite_user(site, email, role, full_name="", unit_ids=None, invited_by=None):
    """
    Give `email` a role at `site`, creating the login when it does not exist yet.
    Re-inviting reactivates the membership with the new role.
    Homeowners become owner of `unit_ids`.
    """
    email = (email or "").strip().lower()
    if not email or not role:
        raise ValidationError("Email and role required")
    _check_role(role)

    user = User.objects.filter(email__iexact=email).first()
    created = user is None
    if created:
        first_name, _, last_name = (full_name or "").strip().partition(" ")
        user = User(username=email, email=email, first_name=first_name, last_name=last_name)
        # password is set through the reset flow
        user.set_unusable_password()
        user.save()

    membership, _ = SiteMembership.objects.update_or_create(
        user=user, site=site, defaults={"role": role, "is_active": True})
    if user.default_site_id is None:
        user.default_site = site
        user.save(update_fields=["default_site"])

    if role == "homeowner" and unit_ids:
        _assign_units(user, _site_units(site, unit_ids))

    log_action(action="invite_user", instance=membership, user=invited_by, site=site,
               changes={"email": email, "role": role, "created": created,
                        "units": [str(pk) for pk in unit_ids or []]})
    logger.info("Invited %s to site %s as %s", email, site.pk, role)
    return membership


@transaction.atomic
def update_user(site, user, role, unit_ids=None, updated_by=None):
    """Change the user's role; their unit ownership at `site` is replaced by `unit_ids`."""
    _check_role(role)
    membership = _membership(site, user)
    membership.role = role
    membership.save()

    Unit.objects.filter(site=site, owner=user).update(owner=None)
    if role == "homeowner" and unit_ids:
        _assign_units(user, _site_units(site, unit_ids))

    log_action(action="update_user", instance=membership, user=updated_by, site=site,
               changes={"role": role, "units": [str(pk) for pk in unit_ids or []]})
    return membership


@transaction.atomic
def set_user_active(site, user, active, updated_by=None):
    """Suspend or restore the user's access to `site`; the membership row stays."""
    membership = _membership(site, user)
    membership.is_active = bool(active)
    membership.save(update_fields=["is_active"])
    log_action(action="activate_user" if active else "deactivate_user",
               instance=membership, user=updated_by, site=site)
    return membership


@transaction.atomic
def remove_user_from_site(site, user, removed_by=None):
    """
    Drop the membership and release the user's units at `site`.
    The login itself is kept, it may belong to other sites.
    """
    membership = _membership(site, user)
    released = Unit.objects.filter(site=site, owner=user).update(
        owner=None, owner_name="", owner_email="")
    log_action(action="remove_user", instance=membership, user=removed_by, site=site,
               changes={"user": user.pk, "units_released": released})
    membership.delete()
    if user.default_site_id == site.pk:
        user.default_site = None
        user.save(update_fields=["default_site"])
    logger.info("Removed user %s from site %s", user.pk, site.pk)
    return released
