from django.core.exceptions import ValidationError
from django.db import models        # ORM base classes to define database tables as Python classes


# ---------- Currency ----------
class Currency(models.Model):  # Store a list of valid currencies
    """
    ISO currencies. Use currency FK in other tables instead of free-text.
    """
    # Set code as the primary key, so it uniquely identifies a currency
    code = models.CharField(max_length=3, primary_key=True)  # 'TRY', 'USD', 'EUR'
    name = models.CharField(max_length=64)  # 'Turkish Lira'
    # Nullable display symbol ("₺", "$", "€")
    symbol = models.CharField(max_length=8, blank=True, null=True)
    decimal_places = models.PositiveSmallIntegerField(default=2)

    def __str__(self):
        return f"{self.code} ({self.symbol or ''})"

    class Meta:
        verbose_name_plural = "currencies"


RATE_SOURCES = [
    ("tcmb", "TCMB bulletin"),  # Turkish central bank daily xml
    ("manual", "Manual"),
]


# ---------- ExchangeRate ----------
class ExchangeRate(models.Model):
    """
    How many reporting-currency units one unit of `currency` was worth on `rate_date`.
    (e.g. USD 2025-01-15 -> 35.412300 when reporting in TRY)
    """
    currency = models.ForeignKey(
        Currency, on_delete=models.CASCADE, related_name="rates")
    rate_date = models.DateField()
    rate = models.DecimalField(max_digits=18, decimal_places=6)
    source = models.CharField(max_length=10, choices=RATE_SOURCES, default="manual")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            # one rate per currency per day
            models.UniqueConstraint(
                fields=["currency", "rate_date"], name="uq_rate_currency_date"),
            models.CheckConstraint(
                condition=models.Q(rate__gt=0), name="rate_positive"),
        ]
        ordering = ("-rate_date", "currency")

    def __str__(self):
        return f"{self.currency_id} {self.rate_date}: {self.rate}"

    def clean(self):
        if self.rate is not None and self.rate <= 0:
            raise ValidationError("Exchange rate must be > 0")
