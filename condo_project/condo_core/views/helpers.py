import datetime
import json

from django.core.exceptions import ValidationError
from django.http import JsonResponse

from ..utils import to_decimal


def ok(payload=None, status=200):
    data = {"ok": True}
    data.update(payload or {})
    return JsonResponse(data, status=status)


def fail(error, status=400):
    if isinstance(error, ValidationError):
        error = "; ".join(error.messages)
    return JsonResponse({"ok": False, "error": str(error)}, status=status)


def body(request):
    """JSON body, falling back to form fields."""
    if request.content_type == "application/json":
        try:
            return json.loads(request.body or b"{}")
        except ValueError:
            raise ValidationError("Request body is not valid JSON")
    return request.POST.dict()


def get_date(data, key, required=True):
    value = data.get(key)
    if not value:
        if required:
            raise ValidationError(f"{key} is required")
        return None
    try:
        return datetime.date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"{key} must be YYYY-MM-DD")


def get_decimal(data, key, default=None):
    value = data.get(key)
    if value in (None, ""):
        if default is None:
            raise ValidationError(f"{key} is required")
        return to_decimal(default)
    amount = to_decimal(value, default=None)
    if amount is None:
        raise ValidationError(f"{key} must be a number")
    return amount


def get_int(data, key, default=None):
    value = data.get(key)
    if value in (None, ""):
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValidationError(f"{key} must be a whole number")


def get_id_list(data, key):
    """A list of ids, e.g. {"unit_ids": [3, "4"]}."""
    values = data.get(key) or []
    if not isinstance(values, (list, tuple)):
        values = [values]
    return [get_int({key: v}, key) for v in values if v not in (None, "")]


# ---------- serializers ----------
def period_data(p):
    return {"id": p.pk, "name": p.name, "start_date": p.start_date, "end_date": p.end_date,
            "total_budget": p.total_budget, "status": p.status, "closed_at": p.closed_at}


def unit_data(u):
    return {"id": u.pk, "label": u.label, "unit_number": u.unit_number, "block": u.block,
            "floor": u.floor, "share_ratio": u.share_ratio,
            "unit_type": u.unit_type.name if u.unit_type_id else None,
            "owner_name": u.owner_name, "owner_email": u.owner_email,
            "owner_phone": u.owner_phone, "owner_id": u.owner_id,
            "unit_type_id": u.unit_type_id, "is_rented": u.is_rented,
            "tenant_name": u.tenant_name, "tenant_phone": u.tenant_phone,
            "opening_balance": u.opening_balance}


def due_data(d):
    return {"id": d.pk, "unit_id": d.unit_id, "month_date": d.month_date, "due_date": d.due_date,
            "description": d.description, "total_amount": d.total_amount,
            "paid_amount": d.paid_amount, "outstanding": d.outstanding,
            "status": d.status, "currency": d.currency_id}


def payment_data(p):
    return {"id": p.pk, "unit_id": p.unit_id, "amount": p.amount, "currency": p.currency_id,
            "exchange_rate": p.exchange_rate,
            "amount_in_dues_currency": p.amount_in_dues_currency,
            "dues_currency": p.dues_currency_id,
            "unapplied_amount": p.unapplied_amount, "amount_reporting": p.amount_reporting,
            "payment_date": p.payment_date, "payment_method": p.payment_method,
            "reference_no": p.reference_no, "category": p.category}


def entry_data(e):
    return {"id": e.pk, "entry_date": e.entry_date, "entry_type": e.entry_type,
            "category": e.category, "description": e.description, "amount": e.amount,
            "currency": e.currency_id, "exchange_rate": e.exchange_rate,
            "amount_reporting": e.amount_reporting, "vendor_name": e.vendor_name,
            "account_id": e.account_id, "from_account_id": e.from_account_id,
            "to_account_id": e.to_account_id, "unit_id": e.unit_id,
            "payment_id": e.payment_id, "fiscal_period_id": e.fiscal_period_id}


def workflow_data(w):
    return {"id": w.pk, "unit_id": w.unit_id, "unit": w.unit.label, "stage": w.stage,
            "total_debt_amount": w.total_debt_amount,
            "oldest_unpaid_date": w.oldest_unpaid_date, "months_overdue": w.months_overdue,
            "warning_sent_at": w.warning_sent_at, "letter_generated_at": w.letter_generated_at,
            "legal_action_at": w.legal_action_at, "legal_case_number": w.legal_case_number}


def unit_type_data(t):
    return {"id": t.pk, "name": t.name, "coefficient": t.coefficient,
            "description": t.description}


def account_data(a, balance=None):
    return {"id": a.pk, "account_name": a.account_name, "account_type": a.account_type,
            "account_number": a.account_number, "currency": a.currency_id,
            "initial_balance": a.initial_balance,
            "initial_exchange_rate": a.initial_exchange_rate,
            "is_active": a.is_active, "balance": balance}


def member_data(row):
    m, user = row["membership"], row["user"]
    return {"user_id": user.pk, "email": user.email, "full_name": user.get_full_name(),
            "role": m.role, "is_active": m.is_active,
            "units": [{"id": u.pk, "unit_number": u.unit_number} for u in row["units"]]}


def ticket_data(t):
    return {"id": t.pk, "title": t.title, "description": t.description,
            "category": t.category, "status": t.status, "priority": t.priority,
            "unit_id": t.unit_id, "unit": t.unit.label if t.unit_id else None,
            "created_by": str(t.created_by) if t.created_by_id else None,
            "assigned_to": t.assigned_to_id, "resolution_notes": t.resolution_notes,
            "resolved_at": t.resolved_at, "created_at": t.created_at}
