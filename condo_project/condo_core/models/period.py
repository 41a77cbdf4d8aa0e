from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from ..exceptions import InvalidTransitionError
from ..managers import TenantManager
from ..utils import month_starts
from .site import Site

PERIOD_STATUS = [
    ("draft", "Draft"),    # being prepared (budget, dues amounts)
    ("active", "Active"),  # current year, receives ledger entries & payments
    ("closed", "Closed"),  # rolled over, read-only
]


# ---------- FiscalPeriod (budget year) ----------
class FiscalPeriod(models.Model):  # typically 12 months

    # Every site has its own calendar of periods
    site = models.ForeignKey(
        Site,
        # Prevent accidental deletion of periods tied to ledger entries / dues
        on_delete=models.PROTECT,
        related_name="fiscal_periods",
    )
    name = models.CharField(max_length=100)  # Example: "Jan 2025 - Dec 2025"

    start_date = models.DateField()
    end_date = models.DateField()

    # Sum of planned budget categories (kept in sync by services.periods)
    total_budget = models.DecimalField(max_digits=18, decimal_places=2, default=0)

    status = models.CharField(max_length=10, choices=PERIOD_STATUS, default="draft")
    """
        When status == "closed":
            No new ledger entries or dues allowed.
            Prevents backdating into finalized years.
    """
    closed_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(fields=["site", "start_date"], name="period_site_start_idx"),
            models.Index(fields=["site", "status"], name="period_site_status_idx"),
        ]
        # Prevent duplicate period names inside the same site
        constraints = [
            models.UniqueConstraint(fields=["site", "name"],
                                    name="uq_site_period_name"),
        ]
        ordering = ("site", "start_date")

    def __str__(self):
        return f"{self.site.slug} {self.name}"  # Example: "palm-court Jan 2025 - Dec 2025"

    @property
    def is_closed(self):
        return self.status == "closed"

    def contains(self, date):
        return self.start_date <= date <= self.end_date

    def month_starts(self):
        """First billing day of each month in the period (dues month_date values)."""
        return month_starts(self.start_date, self.end_date)

    def clean(self):
        if self.start_date and self.end_date and self.start_date >= self.end_date:
            raise ValidationError("start_date must be before end_date")

        # only one active period per site
        if self.status == "active" and self.site_id:
            others = FiscalPeriod.objects.filter(
                site_id=self.site_id, status="active").exclude(pk=self.pk)
            if others.exists():
                raise ValidationError(
                    f"Site already has an active period: {others.first().name}")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)

    # Control status changes
    def transition_to(self, new_status):
        allowed = {
            "draft": ["active", "closed"],
            "active": ["closed"],
            "closed": [],
        }
        if new_status not in allowed.get(self.status, []):
            raise InvalidTransitionError(
                f"Cannot go from {self.status} to {new_status}")

        self.status = new_status
        if new_status == "closed":
            self.closed_at = timezone.now()
        self.save(update_fields=["status", "closed_at", "updated_at"])
