from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..managers import TenantManager
from .site import Site
from .unit import Unit

TICKET_CATEGORIES = [
    ("plumbing", "Plumbing"),
    ("cleaning", "Cleaning"),
    ("electrical", "Electrical"),
    ("elevator", "Elevator"),
    ("security", "Security"),
    ("garden", "Garden"),
    ("parking", "Parking"),
    ("other", "Other"),
]

TICKET_STATUS = [
    ("open", "Open"),
    ("in_progress", "In progress"),
    ("resolved", "Resolved"),
    ("closed", "Closed"),
]

TICKET_PRIORITIES = [
    ("low", "Low"),
    ("medium", "Medium"),
    ("high", "High"),
    ("urgent", "Urgent"),
]


# ---------- SupportTicket (resident requests) ----------
class SupportTicket(models.Model):
    site = models.ForeignKey(Site, on_delete=models.CASCADE, related_name="tickets")
    # unit of the resident who opened it, when they own one
    unit = models.ForeignKey(
        Unit, null=True, blank=True, on_delete=models.SET_NULL, related_name="tickets")

    category = models.CharField(max_length=20, choices=TICKET_CATEGORIES, default="other")
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=12, choices=TICKET_STATUS, default="open")
    priority = models.CharField(max_length=10, choices=TICKET_PRIORITIES, default="medium")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True,
        on_delete=models.SET_NULL, related_name="tickets_created")
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True,
        on_delete=models.SET_NULL, related_name="tickets_assigned")
    resolution_notes = models.TextField(blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(fields=["site", "status"], name="ticket_site_status_idx"),
            models.Index(fields=["created_by"], name="ticket_created_by_idx"),
        ]
        ordering = ("-created_at", "-id")

    def __str__(self):
        return f"#{self.pk} {self.title} ({self.status})"

    def clean(self):
        if not (self.title or "").strip():
            raise ValidationError("Ticket title is required")
        if self.unit_id and self.site_id and self.unit.site_id != self.site_id:
            raise ValidationError("Ticket unit must belong to the same site.")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
