import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction

from ..models import Translation
from ..models.site import LANGUAGE_CODES
from .audit_helper import log_action

logger = logging.getLogger(__name__)

# Keys every install starts with (en / tr); other columns are filled from the UI
BASE_TRANSLATIONS = {
    "nav.dashboard": {"en": "Dashboard", "tr": "Gösterge Paneli"},
    "nav.units": {"en": "Units", "tr": "Daireler"},
    "nav.residents": {"en": "Residents", "tr": "Sakinler"},
    "nav.budget": {"en": "Budget", "tr": "Bütçe"},
    "nav.fiscal_periods": {"en": "Fiscal Periods", "tr": "Mali Dönemler"},
    "nav.budget_vs_actual": {"en": "Budget vs Actual", "tr": "Bütçe - Gerçekleşen"},
    "nav.monthly_income_expenses": {"en": "Monthly Income & Expenses", "tr": "Aylık Gelir Gider"},
    "nav.ledger": {"en": "Ledger", "tr": "Defter"},
    "nav.import_ledger": {"en": "Import Ledger", "tr": "Defter İçe Aktar"},
    "nav.debt_tracking": {"en": "Debt Tracking", "tr": "Borç Takibi"},
    "nav.settings": {"en": "Settings", "tr": "Ayarlar"},
    "nav.my_account": {"en": "My Account", "tr": "Hesabım"},
    "common.save": {"en": "Save", "tr": "Kaydet"},
    "common.cancel": {"en": "Cancel", "tr": "İptal"},
    "common.delete": {"en": "Delete", "tr": "Sil"},
    "ledger.income": {"en": "Income", "tr": "Gelir"},
    "ledger.expense": {"en": "Expense", "tr": "Gider"},
    "ledger.transfer": {"en": "Transfer", "tr": "Virman"},
    "dues.status.pending": {"en": "Pending", "tr": "Bekliyor"},
    "dues.status.partial": {"en": "Partial", "tr": "Kısmi"},
    "dues.status.paid": {"en": "Paid", "tr": "Ödendi"},
    "dues.status.overdue": {"en": "Overdue", "tr": "Gecikmiş"},
}


def _check_language(language):
    if language not in LANGUAGE_CODES:
        raise ValidationError(f"Unsupported language: {language}")


def translate(key, language="en"):
    """Language column -> English -> the key itself."""
    row = Translation.objects.filter(key=key).first()
    if row is None:
        return key
    return row.text(language)


def get_dictionary(language="en"):
    _check_language(language)
    return {row.key: row.text(language) for row in Translation.objects.all()}


@transaction.atomic
def upsert_translation(user, key, values):
    """Create or update one key. Super admins only."""
    if not getattr(user, "is_superuser", False):
        raise PermissionDenied("Only super admins can edit translations.")
    key = (key or "").strip()
    if not key:
        raise ValidationError("Translation key is required")
    for language in values:
        _check_language(language)

    row, created = Translation.objects.get_or_create(key=key)
    for language, text in values.items():
        setattr(row, language, text or "")
    row.save()

    log_action(action="create" if created else "update", instance=row, user=user,
               changes={"key": key, "languages": sorted(values)})
    return row


def seed_translations(overwrite=False):
    """Insert BASE_TRANSLATIONS. Existing keys stay unless `overwrite`."""
    created = 0
    for key, values in BASE_TRANSLATIONS.items():
        row, was_created = Translation.objects.get_or_create(key=key, defaults=values)
        if was_created:
            created += 1
        elif overwrite:
            for language, text in values.items():
                setattr(row, language, text)
            row.save()
    logger.info("Seeded %s translation keys", created)
    return created


def set_user_language(user, language):
    _check_language(language)
    user.language = language
    user.save(update_fields=["language"])
    return user
