from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from ..models import Account, FiscalPeriod, LedgerEntry, Unit
from ..services import ledger as ledger_service
from ..services.permissions import page_required
from .helpers import account_data, body, entry_data, fail, get_date, get_decimal, get_int, ok


@require_GET
@page_required("/ledger")
def ledger_list_view(request):
    params = request.GET
    account = period = None
    try:
        if params.get("account"):
            account = get_object_or_404(Account, pk=get_int(params, "account"), site=request.site)
        if params.get("fiscal_period"):
            period = get_object_or_404(
                FiscalPeriod, pk=get_int(params, "fiscal_period"), site=request.site)
    except ValidationError as e:
        return fail(e)

    entries = ledger_service.filter_entries(
        request.site,
        entry_type=params.get("entry_type"),
        account=account,
        fiscal_period=period,
        search=params.get("search"),
    )
    ledger = ledger_service.ledger_with_balances(request.site, entries)
    return ok({
        "opening_balance": ledger["opening_balance"],
        "totals": ledger["totals"],
        "entries": [
            dict(entry_data(row["entry"]),
                 account_balance=row["account_balance"],
                 total_balance=row["total_balance"])
            for row in ledger["rows"]
        ],
    })


@require_POST
@page_required("/ledger")
def ledger_create_view(request):
    data = body(request)
    site = request.site
    try:
        if data.get("entry_type") == "transfer":
            entry = ledger_service.create_account_transfer(
                site,
                get_object_or_404(Account, pk=get_int(data, "from_account_id"), site=site),
                get_object_or_404(Account, pk=get_int(data, "to_account_id"), site=site),
                get_decimal(data, "amount"),
                get_date(data, "entry_date"),
                description=data.get("description", ""),
                exchange_rate=data.get("exchange_rate") or None,
                user=request.user,
            )
        else:
            extra = {}
            if data.get("account_id"):
                extra["account"] = get_object_or_404(Account, pk=get_int(data, "account_id"), site=site)
            if data.get("unit_id"):
                extra["unit"] = get_object_or_404(Unit, pk=get_int(data, "unit_id"), site=site)
            entry = ledger_service.create_ledger_entry(
                site,
                entry_type=data.get("entry_type"),
                category=data.get("category", ""),
                amount=get_decimal(data, "amount"),
                entry_date=get_date(data, "entry_date"),
                currency=data.get("currency") or site.default_currency_id,
                exchange_rate=get_decimal(data, "exchange_rate", default=1),
                user=request.user,
                description=data.get("description", ""),
                vendor_name=data.get("vendor_name", ""),
                **extra,
            )
    except ValidationError as e:
        return fail(e)
    return ok({"entry": entry_data(entry)}, status=201)


@require_POST
@page_required("/ledger")
def ledger_delete_view(request, entry_id):
    entry = get_object_or_404(LedgerEntry, pk=entry_id, site=request.site)
    try:
        ledger_service.delete_ledger_entry(entry, user=request.user)
    except ValidationError as e:
        return fail(e)
    return ok()


@require_GET
@page_required("/ledger")
def account_balances_view(request):
    balances = ledger_service.account_balances(request.site)
    accounts = Account.objects.for_site(request.site)
    return ok({"accounts": [
        {"id": a.pk, "account_name": a.account_name, "account_type": a.account_type,
         "currency": a.currency_id, "is_active": a.is_active, "balance": balances.get(a.pk)}
        for a in accounts
    ]})


@require_POST
@page_required("/settings")
def account_save_view(request, account_id=None):
    """Create a bank/cash account, or update the fields sent for `account_id`."""
    account = None
    if account_id is not None:
        account = get_object_or_404(Account, pk=account_id, site=request.site)
    try:
        account = ledger_service.save_account(
            request.site, body(request), account=account, user=request.user)
    except ValidationError as e:
        return fail(e)
    return ok({"account": account_data(account)}, status=201 if account_id is None else 200)
