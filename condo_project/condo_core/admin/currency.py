from django.contrib import admin

from condo_core.models import Currency, ExchangeRate


@admin.register(Currency)
class CurrencyAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "symbol")
    search_fields = ("code", "name")


@admin.register(ExchangeRate)
class ExchangeRateAdmin(admin.ModelAdmin):
    list_display = ("currency", "rate_date", "rate", "source")
    list_filter = ("currency", "source")
    date_hierarchy = "rate_date"
    ordering = ("-rate_date", "currency")
