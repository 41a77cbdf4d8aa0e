from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..managers import TenantManager
from .site import Site


# ---------- Audit / Event log ----------
class AuditLog(models.Model):  # who changed which money rows, and how
    # Nullable for system-wide events
    site = models.ForeignKey(
        Site,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )
    # Nullable for automated actions (celery job, import script)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL
    )
    action = models.CharField(max_length=50)  # create, delete, apply_payment, rollover ...
    object_type = models.CharField(max_length=100)  # "Payment", "LedgerEntry" ...
    object_id = models.CharField(max_length=100)
    # before/after details, JSON
    changes = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(fields=["site", "user"], name="audit_site_user_idx"),
            models.Index(fields=["site", "created_at"], name="audit_site_created_idx"),
        ]
        ordering = ("-created_at",)

    def __str__(self):
        return f"[{self.created_at:%Y-%m-%d %H:%M}] {self.user} {self.action} {self.object_type}({self.object_id})"

    def clean(self):
        # The acting user must be a member of the site (super admins excepted)
        if self.user and self.site and not self.user.is_superuser:
            if not self.user.memberships.filter(site=self.site, is_active=True).exists():
                raise ValidationError(
                    "AuditLog.user must be a member of AuditLog.site"
                )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
