from django.core.exceptions import ValidationError
from django.db import models

from ..utils import normalize_category
from .period import FiscalPeriod

CATEGORY_TYPES = [
    ("income", "Income"),
    ("expense", "Expense"),
]


# ---------- CategoryTemplate ----------
class CategoryTemplate(models.Model):
    """
    Site-independent list of standard categories.
    Seeds new budgets and decides income/expense for reports.
    """
    name = models.CharField(max_length=100, unique=True)
    category_type = models.CharField(max_length=10, choices=CATEGORY_TYPES)
    display_order = models.PositiveIntegerField(default=0)
    # pre-selected when creating a fiscal period
    is_default = models.BooleanField(default=False)

    class Meta:
        ordering = ("category_type", "display_order", "name")

    def __str__(self):
        return f"{self.name} ({self.category_type})"


# ---------- BudgetCategory ----------
class BudgetCategory(models.Model):  # planned vs actual for one period

    fiscal_period = models.ForeignKey(
        FiscalPeriod, on_delete=models.CASCADE, related_name="budget_categories")
    category_name = models.CharField(max_length=100)

    planned_amount = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    # Sum of matching expense ledger entries (reporting currency).
    # Maintained by signals -> services.periods.recalculate_budget_actual
    actual_amount = models.DecimalField(max_digits=18, decimal_places=2, default=0)

    display_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["fiscal_period", "category_name"],
                name="uq_budget_category_per_period"),
            models.CheckConstraint(
                condition=models.Q(planned_amount__gte=0),
                name="budget_planned_non_negative"),
        ]
        ordering = ("fiscal_period", "display_order", "category_name")
        verbose_name_plural = "budget categories"

    def __str__(self):
        return f"{self.fiscal_period.name} / {self.category_name}"

    @property
    def normalized_name(self):
        return normalize_category(self.category_name)

    @property
    def remaining(self):
        return self.planned_amount - self.actual_amount

    def clean(self):
        if self.planned_amount is not None and self.planned_amount < 0:
            raise ValidationError("Planned amount must be >= 0")
        if not (self.category_name or "").strip():
            raise ValidationError("Category name is required")
        # two names differing only by case/spacing would split actuals
        if self.fiscal_period_id:
            clash = [
                b.category_name
                for b in BudgetCategory.objects.filter(
                    fiscal_period_id=self.fiscal_period_id).exclude(pk=self.pk)
                if b.normalized_name == self.normalized_name
            ]
            if clash:
                raise ValidationError(
                    f"Budget category '{clash[0]}' already exists in this period")

    def save(self, *args, **kwargs):
        self.category_name = (self.category_name or "").strip()
        self.full_clean()
        return super().save(*args, **kwargs)
