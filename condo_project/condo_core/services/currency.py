import datetime
import logging
import xml.etree.ElementTree as ET

import requests
from django.conf import settings
from django.db import transaction

from ..exceptions import ExchangeRateUnavailable
from ..models import Currency, ExchangeRate
from ..utils import quantize_money, quantize_rate, to_decimal

logger = logging.getLogger(__name__)

# TCMB publishes no bulletin on weekends / holidays
MAX_LOOKBACK_DAYS = 5


def reporting_currency_code():
    return settings.REPORTING_CURRENCY


def latest_rate(currency_code, on_date=None):
    """Most recent stored rate on or before on_date (None if nothing stored)."""
    if currency_code == reporting_currency_code():
        return to_decimal(1)
    qs = ExchangeRate.objects.filter(currency_id=currency_code)
    if on_date is not None:
        qs = qs.filter(rate_date__lte=on_date)
    rate = qs.order_by("-rate_date").values_list("rate", flat=True).first()
    return rate


def to_reporting(amount, currency_code, on_date=None, fallback_rate=None):
    """
    Convert `amount` of `currency_code` into the reporting currency.
    Stored rates win, then fallback_rate, else ExchangeRateUnavailable.
    """
    amount = to_decimal(amount)
    if currency_code == reporting_currency_code():
        return quantize_money(amount)

    rate = latest_rate(currency_code, on_date)
    if rate is None:
        rate = to_decimal(fallback_rate, default=None) if fallback_rate is not None else None
    if rate is None or rate <= 0:
        raise ExchangeRateUnavailable(
            f"No exchange rate for {currency_code} on or before {on_date}")
    return quantize_money(amount * rate)


@transaction.atomic
def record_rate(currency_code, rate_date, rate, source="manual"):
    currency, _ = Currency.objects.get_or_create(
        code=currency_code, defaults={"name": currency_code})
    obj, _ = ExchangeRate.objects.update_or_create(
        currency=currency,
        rate_date=rate_date,
        defaults={"rate": quantize_rate(rate), "source": source},
    )
    return obj


# ---------- TCMB (Turkish central bank) ----------
def tcmb_url(on_date):
    # https://www.tcmb.gov.tr/kurlar/202501/15012025.xml
    return f"{settings.TCMB_BASE_URL}/{on_date:%Y%m}/{on_date:%d%m%Y}.xml"


def parse_tcmb_bulletin(xml_text, currencies):
    """{code: Decimal} of BanknoteSelling values for the requested codes."""
    root = ET.fromstring(xml_text)
    rates = {}
    for node in root.findall("Currency"):
        code = node.get("CurrencyCode") or node.get("Kod")
        if code not in currencies:
            continue
        selling = node.findtext("BanknoteSelling") or node.findtext("ForexSelling")
        if not selling:
            continue
        unit = to_decimal(node.findtext("Unit") or 1) or 1
        rates[code] = quantize_rate(to_decimal(selling) / unit)
    return rates


def fetch_tcmb_rates(on_date=None, currencies=None, session=None):
    """
    Fetch the TCMB bulletin for on_date, stepping back one day at a time
    (max MAX_LOOKBACK_DAYS) until a bulletin exists. Stores the rates
    under the requested date and returns {"date": bulletin_date, "rates": {...}}.
    """
    on_date = on_date or datetime.date.today()
    currencies = list(currencies or settings.TCMB_CURRENCIES)
    http = session or requests

    for back in range(MAX_LOOKBACK_DAYS + 1):
        day = on_date - datetime.timedelta(days=back)
        url = tcmb_url(day)
        try:
            response = http.get(url, timeout=settings.TCMB_TIMEOUT)
        except requests.RequestException as exc:
            logger.warning("TCMB request failed for %s: %s", day, exc)
            continue
        if response.status_code != 200:
            # 404 -> no bulletin that day
            logger.info("No TCMB bulletin for %s (HTTP %s)", day, response.status_code)
            continue

        try:
            rates = parse_tcmb_bulletin(response.content, currencies)
        except ET.ParseError as exc:
            logger.warning("Unreadable TCMB bulletin for %s: %s", day, exc)
            continue
        if not rates:
            continue

        for code, rate in rates.items():
            record_rate(code, on_date, rate, source="tcmb")
        logger.info("Stored TCMB rates for %s from bulletin %s: %s", on_date, day, rates)
        return {"date": day, "rates": rates}

    raise ExchangeRateUnavailable(
        f"No TCMB bulletin found within {MAX_LOOKBACK_DAYS} days before {on_date}")
