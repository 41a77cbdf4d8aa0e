import datetime
from decimal import Decimal

import pytest
from django.test import Client

from condo_core.models import Account, DebtWorkflow, Due, FiscalPeriod, Payment, SiteMembership, Unit
from condo_core.services.dues import set_all_units_monthly_due
from condo_core.services.importing import TEMPLATE_HEADERS
from condo_core.services.localization import seed_translations
from condo_core.services.spreadsheets import XLSX_CONTENT_TYPE

JSON = "application/json"


@pytest.fixture
def homeowner_client(site, django_user_model):
    # own Client so tests can use it next to manager_client
    user = django_user_model.objects.create_user(username="resident", password="pw")
    SiteMembership.objects.create(user=user, site=site, role="homeowner")
    user.default_site = site
    user.save()
    client = Client()
    client.force_login(user)
    return client


# ---------- session ----------
@pytest.mark.django_db
def test_login(client, manager):
    response = client.post("/api/auth/login/", {"username": "manager", "password": "pw"},
                           content_type=JSON)
    assert response.status_code == 200
    assert response.json()["default_site"] == manager.default_site_id

    response = client.post("/api/auth/login/", {"username": "manager", "password": "nope"},
                           content_type=JSON)
    assert response.status_code == 401
    assert response.json() == {"ok": False, "error": "Invalid username or password"}


@pytest.mark.django_db
def test_anonymous_requests_are_refused(client, site):
    assert client.get("/api/dashboard/").status_code == 403


@pytest.mark.django_db
def test_superuser_without_site_must_pick_one(client, django_user_model):
    root = django_user_model.objects.create_superuser(username="root", password="pw")
    client.force_login(root)
    response = client.get("/api/dashboard/")
    assert response.status_code == 400
    assert response.json()["error"] == "Select a site first"


@pytest.mark.django_db
def test_switch_site_is_remembered(manager, manager_client, other_site, units):
    SiteMembership.objects.create(user=manager, site=other_site, role="board_member")

    response = manager_client.post("/api/auth/site/", {"site_id": other_site.pk}, content_type=JSON)
    assert response.json()["site"]["role"] == "board_member"

    # units belong to the first site
    assert manager_client.get("/api/units/").json()["units"] == []


@pytest.mark.django_db
def test_my_pages(homeowner_client):
    data = homeowner_client.get("/api/auth/pages/").json()
    assert data["role"] == "homeowner"
    assert "/ledger" not in data["pages"]
    assert "/my-account" in data["pages"]


# ---------- role checks ----------
@pytest.mark.django_db
def test_homeowner_cannot_open_the_ledger(homeowner_client):
    response = homeowner_client.get("/api/ledger/")
    assert response.status_code == 403
    assert response.json()["ok"] is False


@pytest.mark.django_db
def test_force_delete_needs_site_admin(client, site, period, django_user_model):
    board = django_user_model.objects.create_user(username="board", password="pw")
    SiteMembership.objects.create(user=board, site=site, role="board_member")
    board.default_site = site
    board.save()
    client.force_login(board)

    response = client.post(f"/api/periods/{period.pk}/dues/force-delete/",
                           {"description": "Monthly Maintenance Fee"}, content_type=JSON)
    assert response.status_code == 403


# ---------- periods, dues, payments ----------
@pytest.mark.django_db
def test_period_lifecycle(manager_client, site, units):
    response = manager_client.post("/api/periods/create/", {
        "start_date": "2025-01-01", "total_budget": "12000",
        "categories": ["Staff Salary", "Cleaning Expenses", "Elevator Control"],
    }, content_type=JSON)
    assert response.status_code == 201
    period = response.json()["period"]
    assert period["status"] == "draft"
    assert period["end_date"] == "2025-12-31"

    budget = manager_client.get(f"/api/periods/{period['id']}/budget/").json()
    assert [c["planned_amount"] for c in budget["categories"]] == ["4000.00"] * 3

    response = manager_client.post(f"/api/periods/{period['id']}/transition/activate/")
    assert response.json()["period"]["status"] == "active"

    # only one active period per site
    second = manager_client.post("/api/periods/create/", {"start_date": "2026-01-01"},
                                 content_type=JSON).json()["period"]
    response = manager_client.post(f"/api/periods/{second['id']}/transition/activate/")
    assert response.status_code == 400

    response = manager_client.post(f"/api/periods/{period['id']}/rollover/",
                                   {"new_period_id": second["id"]}, content_type=JSON)
    assert response.status_code == 200
    assert response.json()["closed"]["status"] == "closed"

    response = manager_client.post(f"/api/periods/{period['id']}/transition/explode/")
    assert response.status_code == 404


@pytest.mark.django_db
def test_monthly_dues_and_extra_fee(manager_client, period, units):
    url = f"/api/periods/{period.pk}/dues/"
    assert manager_client.post(url + "generate/").json()["created"] == 36

    response = manager_client.post(url + "monthly/", {"amount": "100"}, content_type=JSON)
    assert response.json()["updated"] == 36

    response = manager_client.post(url + "monthly/", {"unit_id": units[0].pk, "amount": "200"},
                                   content_type=JSON)
    assert response.json()["updated"] == 12
    assert Due.objects.get(unit=units[0], month_date=datetime.date(2025, 1, 1)).due_date \
        == datetime.date(2025, 1, 16)

    fee = {"amount": "500", "due_date": "2025-06-01", "description": "Roof"}
    assert manager_client.post(url + "extra-fee/", fee, content_type=JSON).json()["created"] == 3
    response = manager_client.post(url + "extra-fee/", fee, content_type=JSON)
    assert response.status_code == 400

    response = manager_client.post(url + "force-delete/", {"description": "roof"}, content_type=JSON)
    assert response.json()["deleted"] == 3


@pytest.mark.django_db
def test_payment_endpoints(manager_client, period, units, bank):
    set_all_units_monthly_due(period, Decimal("100"))
    unit = units[0]

    response = manager_client.post(f"/api/units/{unit.pk}/payments/", {
        "amount": "250", "payment_date": "2025-03-01", "account_id": bank.pk,
        "payment_method": "bank_transfer",
    }, content_type=JSON)
    assert response.status_code == 201
    data = response.json()
    assert len(data["applied"]) == 3
    assert data["overpayment"] == "0.00"
    assert data["ledger_entry_id"] is not None

    statement = manager_client.get(f"/api/units/{unit.pk}/").json()
    assert statement["balance"] == "950.00"

    response = manager_client.post(f"/api/payments/{data['payment']['id']}/delete/")
    assert response.status_code == 200
    assert not Payment.objects.exists()


@pytest.mark.django_db
def test_payment_validation_errors_are_400(manager_client, period, units):
    response = manager_client.post(f"/api/units/{units[0].pk}/payments/",
                                   {"amount": "-5", "payment_date": "2025-03-01"}, content_type=JSON)
    assert response.status_code == 400
    response = manager_client.post(f"/api/units/{units[0].pk}/payments/",
                                   {"amount": "5", "payment_date": "01.03.2025"}, content_type=JSON)
    assert response.json()["error"] == "payment_date must be YYYY-MM-DD"


@pytest.mark.django_db
def test_malformed_numbers_are_400(manager_client, period, units):
    response = manager_client.post("/api/periods/create/", {
        "start_date": "2026-01-01", "months": "twelve",
    }, content_type=JSON)
    assert response.status_code == 400
    assert response.json()["error"] == "months must be a whole number"
    assert FiscalPeriod.objects.count() == 1

    response = manager_client.post(f"/api/periods/{period.pk}/dues/monthly/",
                                   {"units": {"abc": "100"}}, content_type=JSON)
    assert response.status_code == 400

    response = manager_client.get("/api/debt/", {"stage": "two"})
    assert response.status_code == 400
    assert response.json()["error"] == "stage must be a whole number"


# ---------- ledger and reports ----------
@pytest.mark.django_db
def test_ledger_entry_and_transfer(manager_client, period, bank, cash):
    response = manager_client.post("/api/ledger/create/", {
        "entry_type": "expense", "category": "Cleaning Expenses", "amount": "300",
        "entry_date": "2025-02-01", "account_id": cash.pk, "vendor_name": "Clean Co",
    }, content_type=JSON)
    assert response.status_code == 201

    response = manager_client.post("/api/ledger/create/", {
        "entry_type": "transfer", "amount": "1000", "entry_date": "2025-02-02",
        "from_account_id": bank.pk, "to_account_id": cash.pk,
    }, content_type=JSON)
    assert response.status_code == 201

    ledger = manager_client.get("/api/ledger/").json()
    assert ledger["opening_balance"] == "10500.00"
    assert ledger["entries"][0]["entry_type"] == "transfer"
    assert ledger["entries"][0]["total_balance"] == "10200.00"

    only_expenses = manager_client.get("/api/ledger/?entry_type=expense&search=clean").json()
    assert len(only_expenses["entries"]) == 1

    balances = {a["account_name"]: a["balance"]
                for a in manager_client.get("/api/accounts/balances/").json()["accounts"]}
    assert balances == {"Bank Account": "9000.00", "Cash Account": "1200.00"}

    budget = manager_client.get(f"/api/periods/{period.pk}/budget/").json()
    cleaning = next(c for c in budget["categories"] if c["category_name"] == "Cleaning Expenses")
    assert cleaning["actual_amount"] == "300.00"


@pytest.mark.django_db
def test_reports(manager_client, period, units, cash):
    manager_client.post("/api/ledger/create/", {
        "entry_type": "expense", "category": "Staff Salary", "amount": "600",
        "entry_date": "2025-01-31", "account_id": cash.pk,
    }, content_type=JSON)

    report = manager_client.get("/api/reports/budget-vs-actual/").json()
    assert report["period"]["id"] == period.pk
    assert report["expense_totals"]["actual"] == "600.00"

    monthly = manager_client.get(f"/api/reports/monthly-income-expenses/?period={period.pk}").json()
    assert monthly["months"][0] == "2025-01-01"
    assert monthly["monthly_expense"][0] == "600.00"

    dashboard = manager_client.get("/api/dashboard/").json()
    assert dashboard["units_count"] == 3
    assert dashboard["actual_expenses"] == "600.00"


@pytest.mark.django_db
def test_reports_without_any_period(manager_client):
    assert manager_client.get("/api/reports/budget-vs-actual/").status_code == 404


# ---------- units, import ----------
@pytest.mark.django_db
def test_unit_and_unit_type_editing(manager_client, homeowner_client, site, unit_type):
    response = manager_client.post("/api/unit-types/create/", {"name": "Shop", "coefficient": "2"},
                                   content_type=JSON)
    assert response.status_code == 201
    shop_id = response.json()["unit_type"]["id"]
    names = [t["name"] for t in manager_client.get("/api/unit-types/").json()["unit_types"]]
    assert names == ["2+1", "Shop"]

    response = manager_client.post("/api/units/create/", {
        "unit_number": "G1", "floor": 0, "unit_type_id": shop_id}, content_type=JSON)
    assert response.status_code == 201
    unit = response.json()["unit"]
    assert (unit["floor"], unit["unit_type"]) == (0, "Shop")

    response = manager_client.post(f"/api/units/{unit['id']}/update/", {"owner_name": "Kemal"},
                                   content_type=JSON)
    assert response.json()["unit"]["owner_name"] == "Kemal"

    response = manager_client.post("/api/units/create/", {"unit_number": "G1"}, content_type=JSON)
    assert response.status_code == 400
    assert Unit.objects.filter(site=site).count() == 1

    # residents cannot edit the roster
    response = homeowner_client.post("/api/units/create/", {"unit_number": "X"}, content_type=JSON)
    assert response.status_code == 403


@pytest.mark.django_db
def test_account_editing(manager_client, site, bank):
    response = manager_client.post("/api/accounts/create/", {
        "account_name": "Safe", "account_type": "cash", "initial_balance": "75"}, content_type=JSON)
    assert response.status_code == 201
    assert response.json()["account"]["currency"] == "TRY"

    response = manager_client.post(f"/api/accounts/{bank.pk}/update/", {"is_active": False},
                                   content_type=JSON)
    assert response.json()["account"]["is_active"] is False
    assert not Account.objects.get(pk=bank.pk).is_active

    response = manager_client.post("/api/accounts/create/", {"account_name": "Safe"},
                                   content_type=JSON)
    assert response.status_code == 400


@pytest.mark.django_db
def test_unit_import_and_export(manager_client, site, make_xlsx):
    upload = make_xlsx(["Unit Number", "Owner Name"], [["7", "Can"], ["8", "Deniz"]])
    upload.name = "units.xlsx"
    response = manager_client.post("/api/units/import/", {"file": upload})
    assert response.status_code == 201
    assert response.json()["created"] == 2

    response = manager_client.get("/api/units/export/")
    assert response["Content-Type"] == XLSX_CONTENT_TYPE
    assert "units_palm-court.xlsx" in response["Content-Disposition"]


@pytest.mark.django_db
def test_ledger_import_wizard(manager_client, period, units, bank, cash, make_xlsx):
    upload = make_xlsx(TEMPLATE_HEADERS, [
        ["03.02.2025", "Cash Account", "Garden Expenses", "Hedges", 80, None, None],
        ["04.02.2025", "Bank Account", "Maintenance Fees", "February dues", None, 100, "2"],
    ])
    upload.name = "bank.xlsx"
    batch = manager_client.post("/api/import/", {"file": upload}).json()["import"]
    assert batch["status"] == "mapping"

    response = manager_client.post(f"/api/import/{batch['id']}/mapping/",
                                   {"mapping": batch["column_mapping"]}, content_type=JSON)
    assert response.json()["import"]["status"] == "preview"

    response = manager_client.post(f"/api/import/{batch['id']}/run/",
                                   {"fiscal_period_id": period.pk}, content_type=JSON)
    result = response.json()["import"]
    assert (result["status"], result["success_count"], result["error_count"]) == ("complete", 2, 0)
    assert Payment.objects.filter(unit=units[1]).count() == 1

    template = manager_client.get("/api/import/template/")
    assert template["Content-Type"] == XLSX_CONTENT_TYPE


# ---------- debt tracking ----------
@pytest.mark.django_db
def test_debt_tracking(manager_client, period, units):
    set_all_units_monthly_due(period, Decimal("100"))
    assert manager_client.post("/api/debt/refresh/").json()["created"] == 3

    workflows = manager_client.get("/api/debt/").json()["workflows"]
    assert len(workflows) == 3
    workflow_id = workflows[0]["id"]

    response = manager_client.post(f"/api/debt/{workflow_id}/legal/", {"case_number": ""},
                                   content_type=JSON)
    assert response.status_code == 400
    response = manager_client.post(f"/api/debt/{workflow_id}/legal/", {"case_number": "2025/77"},
                                   content_type=JSON)
    assert response.json()["workflow"]["stage"] == 4
    assert DebtWorkflow.objects.get(pk=workflow_id).legal_case_number == "2025/77"


# ---------- settings ----------
@pytest.mark.django_db
def test_translations_are_public(client):
    seed_translations()
    response = client.get("/api/translations/tr/")
    assert response.status_code == 200
    assert response.json()["strings"]["nav.units"] == "Daireler"
    assert client.get("/api/translations/xx/").status_code == 400


@pytest.mark.django_db
def test_translation_upsert_is_superuser_only(manager_client):
    response = manager_client.post("/api/translations/", {"key": "nav.units", "values": {"en": "Flats"}},
                                   content_type=JSON)
    assert response.status_code == 403


@pytest.mark.django_db
def test_language_preference(manager_client, manager):
    response = manager_client.post("/api/profile/language/", {"language": "en"}, content_type=JSON)
    assert response.json()["language"] == "en"
    manager.refresh_from_db()
    assert manager.language == "en"


@pytest.mark.django_db
def test_role_matrix(manager_client, homeowner_client):
    matrix = manager_client.get("/api/roles/").json()["matrix"]
    assert "/ledger" in matrix["board_member"]

    response = manager_client.post("/api/roles/replace/",
                                   {"matrix": {"homeowner": ["/dashboard", "/my-account", "/ledger"]}},
                                   content_type=JSON)
    assert response.status_code == 200
    assert homeowner_client.get("/api/ledger/").status_code == 200


@pytest.mark.django_db
def test_my_account(homeowner_client, period, units, django_user_model):
    owner = django_user_model.objects.get(username="resident")
    units[2].owner = owner
    units[2].save()
    set_all_units_monthly_due(period, Decimal("100"))

    data = homeowner_client.get("/api/my-account/").json()
    [unit] = data["units"]
    assert unit["unit"]["id"] == units[2].pk
    assert unit["balance"] == "1200.00"
    assert len(unit["dues"]) == 12


@pytest.mark.django_db
def test_period_list_is_newest_first(manager_client, period, site):
    FiscalPeriod.objects.create(site=site, name="2024", start_date=datetime.date(2024, 1, 1),
                                end_date=datetime.date(2024, 12, 31))
    names = [p["name"] for p in manager_client.get("/api/periods/").json()["periods"]]
    assert names == [period.name, "2024"]
