import datetime
from decimal import Decimal
from io import BytesIO

import openpyxl
import pytest

from condo_core.models import Account, Currency, Site, SiteMembership, Unit, UnitType
from condo_core.services.periods import activate_period, create_fiscal_period


# ---------- reference data ----------
@pytest.fixture
def lira(db):
    # seeded by 0002_seed_reference_data, get_or_create keeps tests independent of it
    currency, _ = Currency.objects.get_or_create(
        code="TRY", defaults={"name": "Turkish Lira", "symbol": "₺"})
    return currency


@pytest.fixture
def usd(db):
    currency, _ = Currency.objects.get_or_create(
        code="USD", defaults={"name": "US Dollar", "symbol": "$"})
    return currency


# ---------- tenant ----------
@pytest.fixture
def site(lira):
    return Site.objects.create(name="Palm Court", slug="palm-court", default_currency=lira)


@pytest.fixture
def other_site(lira):
    return Site.objects.create(name="Sea View", slug="sea-view", default_currency=lira)


@pytest.fixture
def manager(site, django_user_model):
    """Site admin. The membership comes first, default_site must be one of them."""
    user = django_user_model.objects.create_user(username="manager", password="pw")
    SiteMembership.objects.create(user=user, site=site, role="admin")
    user.default_site = site
    user.save()
    return user


@pytest.fixture
def period(site):
    """Active Jan-Dec 2025 budget year with two expense lines of 6000 each."""
    period = create_fiscal_period(
        site, datetime.date(2025, 1, 1), total_budget=Decimal("12000"),
        categories=["Cleaning Expenses", "Staff Salary"])
    return activate_period(period)


@pytest.fixture
def unit_type(site):
    return UnitType.objects.create(site=site, name="2+1")


@pytest.fixture
def units(site, unit_type):
    return [
        Unit.objects.create(site=site, unit_type=unit_type, unit_number=str(n),
                            owner_name=f"Owner {n}")
        for n in (1, 2, 3)
    ]


@pytest.fixture
def bank(site, lira):
    return Account.objects.create(
        site=site, account_name="Bank Account", account_type="bank",
        currency=lira, initial_balance=Decimal("10000"))


@pytest.fixture
def cash(site, lira):
    return Account.objects.create(
        site=site, account_name="Cash Account", account_type="cash",
        currency=lira, initial_balance=Decimal("500"))


@pytest.fixture
def manager_client(client, manager):
    # CurrentSiteMiddleware falls back to manager.default_site
    client.force_login(manager)
    return client


@pytest.fixture
def make_xlsx():
    """Build an in-memory workbook from a header row and data rows."""
    def build(headers, rows):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(headers)
        for row in rows:
            ws.append(row)
        output = BytesIO()
        wb.save(output)
        output.seek(0)
        return output
    return build
