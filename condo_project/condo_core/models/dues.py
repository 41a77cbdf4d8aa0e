import datetime

from django.core.exceptions import ValidationError
from django.db import models

from ..exceptions import PeriodClosedError
from ..managers import DueQuerySet
from ..utils import ZERO, quantize_money
from .currency import Currency
from .period import FiscalPeriod
from .unit import Unit

MONTHLY_DUE_DESCRIPTION = "Monthly Maintenance Fee"
CARRIED_DEBT_DESCRIPTION = "Debt from Previous Years"

DUE_STATUS = [
    ("pending", "Pending"),        # nothing paid, not yet due
    ("partial", "Partial"),        # partly paid
    ("paid", "Paid"),              # fully paid
    ("overdue", "Overdue"),        # nothing paid, past due_date
    ("carried_over", "Carried over"),  # outstanding moved to next period by rollover
]
OPEN_DUE_STATUSES = ("pending", "partial", "overdue")


# ---------- Due (per-unit charge) ----------
class Due(models.Model):
    unit = models.ForeignKey(Unit, on_delete=models.CASCADE, related_name="dues")
    fiscal_period = models.ForeignKey(
        FiscalPeriod, on_delete=models.CASCADE, related_name="dues")

    # Billing month (first day of the monthly step); payments apply oldest first
    month_date = models.DateField()
    due_date = models.DateField()

    base_amount = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    penalty_amount = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    # base + penalty, recomputed on save
    # (querysets using .update() must set it too)
    total_amount = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    paid_amount = models.DecimalField(max_digits=18, decimal_places=2, default=0)

    status = models.CharField(max_length=15, choices=DUE_STATUS, default="pending")
    currency = models.ForeignKey(Currency, on_delete=models.PROTECT)
    description = models.CharField(max_length=200, default=MONTHLY_DUE_DESCRIPTION)

    # Rollover bookkeeping
    is_from_previous_period = models.BooleanField(default=False)
    previous_period = models.ForeignKey(
        FiscalPeriod, null=True, blank=True,
        on_delete=models.SET_NULL, related_name="carried_dues")
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = DueQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["unit", "fiscal_period", "month_date", "description"],
                name="uq_due_unit_period_month_desc"),
            models.CheckConstraint(
                condition=models.Q(base_amount__gte=0) & models.Q(penalty_amount__gte=0),
                name="due_amounts_non_negative"),
            models.CheckConstraint(
                condition=models.Q(paid_amount__gte=0), name="due_paid_non_negative"),
        ]
        indexes = [
            models.Index(fields=["unit", "status"], name="due_unit_status_idx"),
            models.Index(fields=["fiscal_period", "month_date"], name="due_period_month_idx"),
        ]
        ordering = ("unit", "month_date", "id")

    def __str__(self):
        return f"{self.unit} {self.month_date:%Y-%m} {self.description} [{self.status}]"

    @property
    def outstanding(self):
        if self.status == "carried_over":
            return ZERO
        return max(self.total_amount - self.paid_amount, ZERO)

    def compute_status(self, today=None):
        if self.status == "carried_over":
            return "carried_over"  # sticky
        today = today or datetime.date.today()
        if self.total_amount > 0 and self.paid_amount >= self.total_amount:
            return "paid"
        if self.paid_amount > 0:
            return "partial"
        if self.total_amount > 0 and self.due_date < today:
            return "overdue"
        return "pending"

    def clean(self):
        if self.base_amount is not None and self.base_amount < 0:
            raise ValidationError("Due base amount must be >= 0")
        if self.fiscal_period_id and self.unit_id:
            if self.fiscal_period.site_id != self.unit.site_id:
                raise ValidationError("Due.fiscal_period must belong to the unit's site.")
            # new charges cannot land in a finished year
            if self.pk is None and self.fiscal_period.is_closed:
                raise PeriodClosedError("Cannot add dues to a closed fiscal period.")

    def save(self, *args, **kwargs):
        self.total_amount = quantize_money(
            (self.base_amount or ZERO) + (self.penalty_amount or ZERO))
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "total_amount" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["total_amount"]
        self.full_clean()
        return super().save(*args, **kwargs)
