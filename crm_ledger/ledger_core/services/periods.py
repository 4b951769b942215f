import logging

from django.db import transaction

from ..exceptions import PeriodNotFoundError
from ..models.period import Period
from .audit_helper import log_action

logger = logging.getLogger(__name__)

"""
    Posting date determines the period.
    Changing the date before posting should affect the period.
"""
def resolve_period(org, on_date=None, period_code=None):
    """Find the period a posting belongs to.

    Status is not checked here: the caller decides whether a
    non-open period is an error.
    """
    qs = Period.objects.for_org(org)
    if period_code is not None:
        try:
            period = qs.get(code=period_code)
        except Period.DoesNotExist:
            raise PeriodNotFoundError(
                f"No accounting period {period_code!r} in {org}", period_code=period_code
            )
        if on_date is not None and not period.covers(on_date):
            raise PeriodNotFoundError(
                f"Period {period_code} does not cover {on_date}",
                period_code=period_code,
                date=str(on_date),
            )
        return period

    if on_date is None:
        raise PeriodNotFoundError("A date or a period code is required to resolve a period")
    try:
        return qs.get(start_date__lte=on_date, end_date__gte=on_date)
    except Period.DoesNotExist:
        raise PeriodNotFoundError(
            f"No accounting period covers {on_date} in {org}", date=str(on_date)
        )


def get_period(org, period_id):
    try:
        return Period.objects.for_org(org).get(pk=period_id)
    except Period.DoesNotExist:
        raise PeriodNotFoundError(f"Period {period_id} not found", period_id=period_id)


def list_periods(org):
    # newest first, like the period pickers
    return list(Period.objects.for_org(org).order_by("-start_date"))


def create_period(org, code, start_date, end_date, user=None):
    """Create an open period ahead of use."""
    with transaction.atomic():
        period = Period.objects.create(
            org=org, code=code, start_date=start_date, end_date=end_date, status="open"
        )
        log_action(
            action="create",
            instance=period,
            user=user,
            org=org,
            changes={"code": code, "start_date": str(start_date), "end_date": str(end_date)},
        )
    logger.info("Created period %s (%s..%s) for org %s", code, start_date, end_date, org.pk)
    return period
