from django.db import models

from .currency import Currency
from .period import FiscalPeriod
from .unit import Unit

DEBT_STAGES = [
    (1, "Stage 1 - Reminder"),        # < 3 months overdue
    (2, "Stage 2 - Warning"),         # 3-5 months
    (3, "Stage 3 - Formal letter"),   # 6-8 months
    (4, "Stage 4 - Legal action"),    # 9+ months
]

TRANSFER_TYPES = [
    ("debt", "Debt"),
    ("credit", "Credit"),
    ("legal_flag", "Legal flag"),
]


# ---------- DebtWorkflow (collections state of one unit) ----------
class DebtWorkflow(models.Model):
    unit = models.ForeignKey(Unit, on_delete=models.CASCADE, related_name="debt_workflows")
    fiscal_period = models.ForeignKey(
        FiscalPeriod, null=True, blank=True,
        on_delete=models.SET_NULL, related_name="debt_workflows")

    stage = models.PositiveSmallIntegerField(choices=DEBT_STAGES, default=1)
    total_debt_amount = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    oldest_unpaid_date = models.DateField(null=True, blank=True)
    months_overdue = models.PositiveIntegerField(default=0)

    # Stage timestamps
    stage_changed_at = models.DateTimeField(null=True, blank=True)
    warning_sent_at = models.DateTimeField(null=True, blank=True)
    letter_generated_at = models.DateTimeField(null=True, blank=True)
    legal_action_at = models.DateTimeField(null=True, blank=True)
    legal_case_number = models.CharField(max_length=100, blank=True)

    # False once the unit has no debt left
    is_active = models.BooleanField(default=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            # one open workflow per unit
            models.UniqueConstraint(
                fields=["unit"], condition=models.Q(is_active=True),
                name="uq_active_debt_workflow_per_unit"),
        ]
        indexes = [models.Index(fields=["is_active", "stage"], name="debt_active_stage_idx")]
        ordering = ("-stage", "-total_debt_amount")

    def __str__(self):
        return f"{self.unit} stage {self.stage} ({self.total_debt_amount})"


# ---------- BalanceTransfer (rollover record) ----------
class BalanceTransfer(models.Model):
    unit = models.ForeignKey(Unit, on_delete=models.CASCADE, related_name="balance_transfers")
    from_period = models.ForeignKey(
        FiscalPeriod, on_delete=models.CASCADE, related_name="transfers_out")
    to_period = models.ForeignKey(
        FiscalPeriod, on_delete=models.CASCADE, related_name="transfers_in")
    transfer_type = models.CharField(max_length=12, choices=TRANSFER_TYPES)
    amount = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    # debt and credit rows carry the currency of the dues they came from
    currency = models.ForeignKey(
        Currency, null=True, blank=True, on_delete=models.PROTECT, related_name="+")
    legal_stage = models.PositiveSmallIntegerField(null=True, blank=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("from_period", "unit")

    def __str__(self):
        return f"{self.unit} {self.transfer_type} {self.amount} ({self.from_period.name} -> {self.to_period.name})"
