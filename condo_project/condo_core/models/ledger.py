from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..exceptions import PeriodClosedError
from ..managers import TenantManager
from ..utils import quantize_money
from .account import Account
from .currency import Currency
from .payment import Payment
from .period import FiscalPeriod
from .site import Site
from .unit import Unit

ENTRY_TYPES = [
    ("income", "Income"),
    ("expense", "Expense"),
    ("transfer", "Transfer"),  # between two of the site's accounts
]

TRANSFER_CATEGORY = "Account Transfer"


# ---------- LedgerEntry ----------
class LedgerEntry(models.Model):  # One income / expense / transfer row
    site = models.ForeignKey(Site, on_delete=models.CASCADE, related_name="ledger_entries")
    fiscal_period = models.ForeignKey(
        FiscalPeriod,
        null=True,
        blank=True,
        on_delete=models.PROTECT,  # Prevent breaking historical ledger
        related_name="ledger_entries",
    )

    entry_type = models.CharField(max_length=10, choices=ENTRY_TYPES)
    # Matched against BudgetCategory.category_name via normalize_category()
    category = models.CharField(max_length=100)
    description = models.TextField(blank=True)

    # Original currency amount and its conversion
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    currency = models.ForeignKey(Currency, on_delete=models.PROTECT)
    # entry currency -> reporting currency
    exchange_rate = models.DecimalField(max_digits=18, decimal_places=6, default=1)
    # amount × exchange_rate, set on save
    amount_reporting = models.DecimalField(max_digits=18, decimal_places=2, default=0)

    entry_date = models.DateField()
    vendor_name = models.CharField(max_length=200, blank=True)
    receipt_url = models.URLField(blank=True)
    is_recurring = models.BooleanField(default=False)

    # income/expense: the wallet the money moved in/out of
    account = models.ForeignKey(
        Account, null=True, blank=True, on_delete=models.PROTECT, related_name="entries")
    # transfer only
    from_account = models.ForeignKey(
        Account, null=True, blank=True, on_delete=models.PROTECT, related_name="transfers_out")
    to_account = models.ForeignKey(
        Account, null=True, blank=True, on_delete=models.PROTECT, related_name="transfers_in")

    unit = models.ForeignKey(
        Unit, null=True, blank=True, on_delete=models.SET_NULL, related_name="ledger_entries")
    # Entry generated for a unit payment; goes away with the payment
    payment = models.OneToOneField(
        Payment, null=True, blank=True, on_delete=models.CASCADE, related_name="ledger_entry")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(fields=["site", "entry_date"], name="ledger_site_date_idx"),
            models.Index(fields=["site", "entry_type"], name="ledger_site_type_idx"),
            models.Index(fields=["fiscal_period", "category"], name="ledger_period_category_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0), name="ledger_amount_positive"),
            models.CheckConstraint(
                condition=models.Q(exchange_rate__gt=0), name="ledger_rate_positive"),
        ]
        ordering = ("-entry_date", "-created_at", "-id")
        verbose_name_plural = "ledger entries"

    def __str__(self):
        return f"{self.entry_date} {self.entry_type} {self.category} {self.amount} {self.currency_id}"

    def signed_reporting_amount(self):
        # site total moves up for income, down for expense, not at all for transfers
        if self.entry_type == "income":
            return self.amount_reporting
        if self.entry_type == "expense":
            return -self.amount_reporting
        return 0

    def clean(self):
        if self.amount is not None and self.amount <= 0:
            raise ValidationError("Amount must be > 0")
        if self.exchange_rate is not None and self.exchange_rate <= 0:
            raise ValidationError("Exchange rate must be > 0")
        if not (self.category or "").strip():
            raise ValidationError("Category is required")

        if self.entry_type == "transfer":
            if not self.from_account_id or not self.to_account_id:
                raise ValidationError("Transfers need both a source and a destination account.")
            if self.from_account_id == self.to_account_id:
                raise ValidationError("Source and destination accounts must be different.")
        else:
            if self.from_account_id or self.to_account_id:
                raise ValidationError("Only transfers may set from/to accounts.")

        # Tenant consistency: every linked row belongs to the entry's site
        for field in ("account", "from_account", "to_account", "unit", "fiscal_period"):
            related = getattr(self, field) if getattr(self, f"{field}_id") else None
            if related is not None and related.site_id != self.site_id:
                raise ValidationError(f"LedgerEntry.{field} must belong to the same site.")

        """ Don't allow entries in closed periods """
        if self.fiscal_period_id and self.fiscal_period.is_closed:
            raise PeriodClosedError(
                "Cannot create or edit ledger entries inside a closed period.")

    def save(self, *args, **kwargs):
        if self.amount is not None and self.exchange_rate is not None:
            self.amount_reporting = quantize_money(self.amount * self.exchange_rate)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "amount_reporting" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["amount_reporting"]
        self.full_clean()
        return super().save(*args, **kwargs)
