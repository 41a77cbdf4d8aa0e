from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..managers import TenantManager
from .site import Site


# ---------- UnitType ----------
class UnitType(models.Model):  # e.g. "3+1", "Shop", "Penthouse"
    site = models.ForeignKey(Site, on_delete=models.CASCADE, related_name="unit_types")
    name = models.CharField(max_length=100)
    # Weight used by the "coefficient" distribution method
    coefficient = models.DecimalField(max_digits=8, decimal_places=4, default=1)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["site", "name"], name="uq_site_unit_type"),
            models.CheckConstraint(
                condition=models.Q(coefficient__gt=0), name="unit_type_coefficient_positive"),
        ]
        ordering = ("site", "name")

    def __str__(self):
        return self.name

    def clean(self):
        if self.coefficient is not None and self.coefficient <= 0:
            raise ValidationError("Coefficient must be > 0")


# ---------- Unit (flat / shop) ----------
class Unit(models.Model):
    site = models.ForeignKey(Site, on_delete=models.CASCADE, related_name="units")
    unit_type = models.ForeignKey(
        UnitType, null=True, blank=True, on_delete=models.SET_NULL, related_name="units")

    unit_number = models.CharField(max_length=20)
    block = models.CharField(max_length=20, blank=True)  # "" when the site has no blocks
    floor = models.IntegerField(null=True, blank=True)
    # land share (arsa payı), used by the "share_ratio" distribution method
    share_ratio = models.DecimalField(max_digits=10, decimal_places=4, default=0)

    # Login of the owner, when they have one (MyAccount page)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name="owned_units",
    )
    owner_name = models.CharField(max_length=200, blank=True)
    owner_phone = models.CharField(max_length=32, blank=True)
    owner_email = models.EmailField(blank=True)

    is_rented = models.BooleanField(default=False)
    tenant_name = models.CharField(max_length=200, blank=True)
    tenant_phone = models.CharField(max_length=32, blank=True)

    # Balance brought in when the unit was set up:
    # positive -> debt, negative -> credit
    opening_balance = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["site", "block", "unit_number"], name="uq_site_block_unit"),
        ]
        indexes = [models.Index(fields=["site", "unit_number"], name="unit_site_number_idx")]
        ordering = ("site", "block", "unit_number")

    def __str__(self):
        return self.label

    @property
    def label(self):
        # "A-12" or "12"
        return f"{self.block}-{self.unit_number}" if self.block else self.unit_number

    def clean(self):
        if self.unit_type_id and self.site_id and self.unit_type.site_id != self.site_id:
            raise ValidationError("Unit.unit_type must belong to the same site.")
        if self.share_ratio is not None and self.share_ratio < 0:
            raise ValidationError("Share ratio must be >= 0")

    def save(self, *args, **kwargs):
        self.unit_number = (self.unit_number or "").strip()
        self.block = (self.block or "").strip()
        self.full_clean()
        return super().save(*args, **kwargs)
