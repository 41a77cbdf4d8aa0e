from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..managers import PaymentQuerySet
from .account import Account
from .currency import Currency
from .dues import Due
from .unit import Unit

PAYMENT_METHODS = [
    ("cash", "Cash"),
    ("bank_transfer", "Bank Transfer"),
    ("credit_card", "Credit Card"),
    ("other", "Other"),
]

DEFAULT_PAYMENT_CATEGORY = "Maintenance Fees"


# ---------- Payment (money received from a unit) ----------
class Payment(models.Model):
    """
    Created by services.payments.apply_unit_payment, which spreads the
    amount over the unit's open dues (PaymentAllocation rows).
    """
    unit = models.ForeignKey(Unit, on_delete=models.CASCADE, related_name="payments")

    # What was handed over
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    currency = models.ForeignKey(Currency, on_delete=models.PROTECT, related_name="+")
    # payment currency -> dues currency (1 when both are the same)
    exchange_rate = models.DecimalField(max_digits=18, decimal_places=6, default=1)
    amount_in_dues_currency = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    # Currency amount_in_dues_currency is expressed in; when the unit is re-billed
    # in another currency the payment is converted again before it is re-applied
    dues_currency = models.ForeignKey(
        Currency, null=True, blank=True, on_delete=models.PROTECT, related_name="+")
    # Part of amount_in_dues_currency no due could absorb (credit)
    unapplied_amount = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    # amount in settings.REPORTING_CURRENCY
    amount_reporting = models.DecimalField(max_digits=18, decimal_places=2, default=0)

    payment_date = models.DateField()
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHODS, default="cash")
    reference_no = models.CharField(max_length=100, blank=True)

    # Account the money went into (gets the income ledger entry)
    account = models.ForeignKey(
        Account, null=True, blank=True, on_delete=models.PROTECT, related_name="payments")
    category = models.CharField(max_length=100, default=DEFAULT_PAYMENT_CATEGORY)
    notes = models.TextField(blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = PaymentQuerySet.as_manager()

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0), name="payment_amount_positive"),
            models.CheckConstraint(
                condition=models.Q(exchange_rate__gt=0), name="payment_rate_positive"),
        ]
        indexes = [models.Index(fields=["unit", "payment_date"], name="payment_unit_date_idx")]
        ordering = ("-payment_date", "-id")

    def __str__(self):
        return f"Payment {self.pk} {self.unit} {self.amount} {self.currency_id} ({self.payment_date})"

    @property
    def applied_amount(self):
        return self.amount_in_dues_currency - self.unapplied_amount

    def clean(self):
        if self.amount is not None and self.amount <= 0:
            raise ValidationError("Payment amount must be > 0")
        if self.exchange_rate is not None and self.exchange_rate <= 0:
            raise ValidationError("Exchange rate must be > 0")
        if self.account_id and self.unit_id and self.account.site_id != self.unit.site_id:
            raise ValidationError("Payment.account must belong to the unit's site.")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


# ---------- PaymentAllocation ----------
class PaymentAllocation(models.Model):
    """ This represents X amount of this payment settles this due """
    payment = models.ForeignKey(
        Payment, on_delete=models.CASCADE, related_name="allocations")
    due = models.ForeignKey(Due, on_delete=models.CASCADE, related_name="allocations")
    # in the due's currency
    amount_applied = models.DecimalField(max_digits=18, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["payment", "due"], name="uq_payment_due_allocation"),
            models.CheckConstraint(
                condition=models.Q(amount_applied__gt=0), name="allocation_positive"),
        ]
        ordering = ("payment", "due__month_date")

    def __str__(self):
        return f"{self.payment_id} -> due {self.due_id}: {self.amount_applied}"

    def clean(self):
        if self.payment_id and self.due_id and self.payment.unit_id != self.due.unit_id:
            raise ValidationError("Payment and due must belong to the same unit.")
