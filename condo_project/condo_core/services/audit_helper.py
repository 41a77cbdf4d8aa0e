from typing import Optional

from ..models import AuditLog, Site


def log_action(
    *,
    action: str,
    instance,
    user=None,
    site: Optional[Site] = None,
    changes: dict | None = None,
):
    """
    Central audit logger.
    Safe to call multiple times (caller ensures idempotency).
    """

    if not site:
        # most rows carry site directly, dues/payments reach it via unit
        site = getattr(instance, "site", None)
        if site is None and getattr(instance, "unit", None) is not None:
            site = instance.unit.site

    # anonymous / system callers are logged without a user
    if user is not None and not getattr(user, "is_authenticated", False):
        user = None

    AuditLog.objects.create(
        site=site,
        user=user,
        action=action,
        object_type=instance.__class__.__name__,
        object_id=str(instance.pk),
        changes=changes,
    )
