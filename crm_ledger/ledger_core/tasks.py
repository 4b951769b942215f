import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task  # register this function as a Celery task
def export_trial_balance_csv(org_id, period_code=None):
    """Render the trial balance of one period (or all periods) as CSV text."""
    # import lazily to avoid circular imports at module import time
    from .models import Organization
    from .services.export import trial_balance_to_csv
    from .services.reports import trial_balance

    org = Organization.objects.get(pk=org_id)
    rows = trial_balance(org, period_code)
    logger.info(
        "Exported trial balance for org %s, period %s (%s rows)",
        org_id, period_code or "all", len(rows),
    )
    return trial_balance_to_csv(rows)
