import datetime
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task  # register this function as a Celery task
def fetch_daily_exchange_rates(on_date=None):
    # import lazily to avoid circular imports at module import time
    from .services.currency import fetch_tcmb_rates

    day = datetime.date.fromisoformat(on_date) if on_date else datetime.date.today()
    result = fetch_tcmb_rates(day)  # stores the rates itself
    logger.info("Fetched %s TCMB rates for %s", len(result["rates"]), day)
    return {code: str(rate) for code, rate in result["rates"].items()}


@shared_task
def refresh_debt_stages(site_id=None):
    from .models import Site
    from .services.debt import update_debt_workflow_stages

    sites = Site.objects.filter(is_active=True)
    if site_id:
        sites = sites.filter(pk=site_id)

    summary = {}
    for site in sites:
        summary[site.pk] = update_debt_workflow_stages(site)
    return summary


@shared_task
def recompute_budget_actuals(period_id):
    from .models import FiscalPeriod
    from .services.periods import recalculate_period_actuals

    period = FiscalPeriod.objects.get(pk=period_id)
    recalculate_period_actuals(period)
    return period.budget_categories.count()
