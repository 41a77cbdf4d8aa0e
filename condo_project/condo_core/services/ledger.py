import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q

from ..models import Account, LedgerEntry
from ..models.ledger import TRANSFER_CATEGORY
from ..utils import ZERO, quantize_money, to_decimal
from .audit_helper import log_action
from .periods import resolve_period

logger = logging.getLogger(__name__)


def get_site_opening_balance(site):
    """
    Σ initial_balance over the site's active accounts,
    converted with initial_exchange_rate when not in the reporting currency.
    """
    total = ZERO
    for account in Account.objects.active(site):
        total += account.opening_balance_reporting()
    return quantize_money(total)


@transaction.atomic
def create_ledger_entry(site, *, entry_type, category, amount, entry_date, currency,
                        exchange_rate=1, user=None, fiscal_period=None, **fields):
    """Validate + save one income/expense row, booking it into the right period."""
    if entry_type not in ("income", "expense"):
        raise ValidationError("Use create_account_transfer for transfers")
    if fiscal_period is None:
        fiscal_period = resolve_period(site, entry_date)

    entry = LedgerEntry(
        site=site,
        fiscal_period=fiscal_period,
        entry_type=entry_type,
        category=(category or "").strip(),
        amount=quantize_money(amount),
        currency_id=getattr(currency, "code", currency),
        exchange_rate=to_decimal(exchange_rate, default=Decimal("1")),
        entry_date=entry_date,
        created_by=user if getattr(user, "is_authenticated", False) else None,
        **fields,
    )
    entry.save()  # full_clean inside

    log_action(action="create", instance=entry, user=user,
               changes={"entry_type": entry_type, "category": entry.category,
                        "amount": str(entry.amount), "currency": entry.currency_id,
                        "amount_reporting": str(entry.amount_reporting)})
    return entry


@transaction.atomic
def create_account_transfer(site, from_account, to_account, amount, entry_date,
                            description="", exchange_rate=None, user=None):
    """Move money between two of the site's accounts (site total unchanged)."""
    amount = quantize_money(amount)
    if amount <= 0:
        raise ValidationError("Transfer amount must be > 0")
    if from_account.pk == to_account.pk:
        raise ValidationError("Source and destination accounts must be different.")
    if from_account.site_id != site.pk or to_account.site_id != site.pk:
        raise ValidationError("Both accounts must belong to the site.")

    if exchange_rate is None:
        # source account's own rate into the reporting currency
        exchange_rate = 1 if from_account.is_reporting_currency else from_account.initial_exchange_rate

    entry = LedgerEntry(
        site=site,
        fiscal_period=resolve_period(site, entry_date),
        entry_type="transfer",
        category=TRANSFER_CATEGORY,
        description=description or f"{from_account.account_name} -> {to_account.account_name}",
        amount=amount,
        currency_id=from_account.currency_id,
        exchange_rate=to_decimal(exchange_rate),
        entry_date=entry_date,
        from_account=from_account,
        to_account=to_account,
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )
    entry.save()
    log_action(action="transfer", instance=entry, user=user,
               changes={"from": from_account.pk, "to": to_account.pk, "amount": str(amount)})
    return entry


@transaction.atomic
def delete_ledger_entry(entry, user=None):
    if entry.payment_id:
        raise ValidationError(
            "This entry belongs to a unit payment; delete the payment instead.")
    if entry.fiscal_period_id and entry.fiscal_period.is_closed:
        raise ValidationError("Cannot delete entries of a closed period.")
    snapshot = {"entry_type": entry.entry_type, "category": entry.category,
                "amount": str(entry.amount), "entry_date": str(entry.entry_date)}
    log_action(action="delete", instance=entry, user=user, changes=snapshot)
    entry.delete()


def filter_entries(site, entry_type=None, account=None, fiscal_period=None, search=None):
    qs = LedgerEntry.objects.for_site(site).select_related(
        "account", "from_account", "to_account", "unit", "currency")
    if entry_type:
        qs = qs.filter(entry_type=entry_type)
    if account:
        qs = qs.filter(Q(account=account) | Q(from_account=account) | Q(to_account=account))
    if fiscal_period:
        qs = qs.filter(fiscal_period=fiscal_period)
    if search:
        qs = qs.filter(
            Q(category__icontains=search)
            | Q(description__icontains=search)
            | Q(vendor_name__icontains=search)
        )
    return qs


def _chronological(entries):
    return sorted(entries, key=lambda e: (e.entry_date, e.created_at, e.pk))


def account_balances(site):
    """{account_id: balance in reporting currency} replayed from every entry."""
    balances = {a.pk: a.opening_balance_reporting() for a in Account.objects.for_site(site)}
    for entry in LedgerEntry.objects.for_site(site).only(
            "entry_type", "amount_reporting", "account_id", "from_account_id", "to_account_id"):
        _apply(balances, entry)
    return balances


def _apply(balances, entry):
    if entry.entry_type == "transfer":
        if entry.from_account_id in balances:
            balances[entry.from_account_id] -= entry.amount_reporting
        if entry.to_account_id in balances:
            balances[entry.to_account_id] += entry.amount_reporting
    elif entry.account_id in balances:
        balances[entry.account_id] += entry.signed_reporting_amount()


def ledger_with_balances(site, entries=None):
    """
    Replay entries oldest first and attach running balances.

    Returns {"opening_balance", "rows" (newest first), "totals"} where each row
    has the entry, its account's balance after the entry (None for transfers)
    and the site total after the entry.
    """
    opening = get_site_opening_balance(site)
    if entries is None:
        entries = LedgerEntry.objects.for_site(site)
    entries = _chronological(list(entries))

    balances = {a.pk: a.opening_balance_reporting() for a in Account.objects.for_site(site)}
    running_total = opening
    income = expense = ZERO
    rows = []
    for entry in entries:
        _apply(balances, entry)
        running_total += entry.signed_reporting_amount()
        if entry.entry_type == "income":
            income += entry.amount_reporting
        elif entry.entry_type == "expense":
            expense += entry.amount_reporting
        rows.append({
            "entry": entry,
            "account_balance": (
                None if entry.entry_type == "transfer"
                else balances.get(entry.account_id)
            ),
            "total_balance": running_total,
        })

    rows.reverse()  # newest first for display
    return {
        "opening_balance": opening,
        "rows": rows,
        "totals": {
            "income": income,
            "expense": expense,
            "net": opening + income - expense,
        },
    }


# ----------------------------
# Accounts
# ----------------------------
ACCOUNT_TEXT_FIELDS = ["account_name", "account_type", "account_number"]


@transaction.atomic
def save_account(site, data, account=None, user=None):
    """
    Create a bank/cash account of `site`, or update `account` with the keys in `data`.
    Accounts are deactivated through is_active, never deleted.
    """
    creating = account is None
    if creating:
        account = Account(site=site, currency_id=site.default_currency_id)
    elif account.site_id != site.pk:
        raise ValidationError("Account belongs to another site.")

    for name in ACCOUNT_TEXT_FIELDS:
        if name in data:
            setattr(account, name, str(data[name] or "").strip())
    if data.get("currency"):
        account.currency_id = data["currency"]
    if "initial_balance" in data:
        account.initial_balance = quantize_money(data["initial_balance"])
    if "initial_exchange_rate" in data:
        rate = to_decimal(data["initial_exchange_rate"], default=None)
        if rate is None:
            raise ValidationError("initial_exchange_rate must be a number")
        account.initial_exchange_rate = rate
    if "is_active" in data:
        account.is_active = bool(data["is_active"])
    # Account.save runs full_clean and guards the currency
    account.save()

    log_action(action="create" if creating else "update", instance=account, user=user, site=site,
               changes={k: str(v) for k, v in data.items()})
    logger.info("%s account %s on site %s", "Created" if creating else "Updated",
                account.account_name, site.pk)
    return account
