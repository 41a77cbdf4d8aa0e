from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..managers import TenantManager
from ..utils import quantize_money
from .currency import Currency
from .site import Site

ACCOUNT_TYPES = [
    ("bank", "Bank"),
    ("cash", "Cash"),
]


# ---------- Account (bank / cash wallet) ----------
class Account(models.Model):
    """
    Where the site's money sits. The current balance is never stored:
    it is replayed from initial_balance + ledger entries
    (see services.ledger.account_balances).
    """
    site = models.ForeignKey(Site, on_delete=models.CASCADE, related_name="accounts")
    account_name = models.CharField(max_length=200)
    account_type = models.CharField(max_length=10, choices=ACCOUNT_TYPES, default="bank")
    account_number = models.CharField(max_length=64, blank=True)  # IBAN / no

    currency = models.ForeignKey(Currency, on_delete=models.PROTECT)
    # Balance on the day the account was added to the system
    initial_balance = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    # Converts initial_balance into the reporting currency (1 when already reporting)
    initial_exchange_rate = models.DecimalField(
        max_digits=18, decimal_places=6, default=1)

    # Accounts are deactivated, not deleted
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["site", "account_name"], name="uq_site_account_name"),
            models.CheckConstraint(
                condition=models.Q(initial_exchange_rate__gt=0),
                name="account_initial_rate_positive"),
        ]
        indexes = [models.Index(fields=["site", "is_active"], name="account_site_active_idx")]
        ordering = ("site", "account_name")

    def __str__(self):
        return f"{self.account_name} ({self.currency_id})"

    @property
    def is_reporting_currency(self):
        return self.currency_id == settings.REPORTING_CURRENCY

    def opening_balance_reporting(self):
        """initial_balance in the reporting currency."""
        if self.is_reporting_currency:
            return quantize_money(self.initial_balance)
        return quantize_money(self.initial_balance * (self.initial_exchange_rate or 1))

    def clean(self):
        if self.initial_exchange_rate is not None and self.initial_exchange_rate <= 0:
            raise ValidationError("initial_exchange_rate must be > 0")

    def save(self, *args, **kwargs):
        """Currency is frozen once ledger entries reference the account."""
        self.full_clean()
        if self.pk:
            old = Account.objects.filter(pk=self.pk).only("currency_id").first()
            if old and old.currency_id != self.currency_id:
                from .ledger import LedgerEntry
                used = LedgerEntry.objects.filter(
                    models.Q(account=self) | models.Q(from_account=self) | models.Q(to_account=self)
                ).exists()
                if used:
                    raise ValidationError(
                        "Cannot change the currency of an account used in ledger entries."
                    )
        return super().save(*args, **kwargs)
