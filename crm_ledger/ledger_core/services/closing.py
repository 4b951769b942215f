import logging
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Sum

from ..exceptions import (InvalidAccountError, InvalidPeriodStateError,
                          PeriodNotFoundError)
from ..models import Account, JournalLine, Period
from .audit_helper import log_action
from .posting import check_balance, prepare_lines, write_journal
from .reports import profit_and_loss_for_period

logger = logging.getLogger(__name__)


@dataclass
class CloseResult:
    period_id: int
    code: str
    status: str
    journal_id: Optional[int]  # None when the period had no income/expense activity
    revenue_cents: int
    expense_cents: int
    profit_cents: int

    @property
    def message(self):
        if self.journal_id is None:
            return f"Period {self.code} closed, no closing entry needed"
        return f"Period {self.code} closed, closing journal {self.journal_id} posted"


def retained_earnings_account(org):
    """Equity account that receives the period result."""
    account = org.retained_earnings_account
    if account is None:
        code = settings.LEDGER_RETAINED_EARNINGS_CODE
        account = Account.objects.for_org(org).filter(code=code).first()
        if account is None:
            raise InvalidAccountError(
                f"No retained earnings account: set one on the organization or create account {code}"
            )
    if account.org_id != org.pk or account.type != "equity" or not account.is_postable:
        raise InvalidAccountError(
            f"Account {account.code} cannot receive retained earnings: a postable equity account is required",
            account_id=account.pk,
        )
    return account


def _closing_lines(org, period, re_account, profit_cents):
    """
    Reverse every income/expense balance of the period, and post the
    net result to retained earnings.
    """
    totals = (
        JournalLine.objects.for_org(org)
        .posted()
        .in_period(period)
        .excluding_closing()
        .filter(account__type__in=("income", "expense"))
        .values("account_id", "account__code")
        .annotate(debit=Sum("debit_cents"), credit=Sum("credit_cents"))
        .order_by("account__code")
    )
    lines = []
    for agg in totals:
        net = (agg["debit"] or 0) - (agg["credit"] or 0)
        if net == 0:
            continue
        lines.append({
            "account_id": agg["account_id"],
            # debit balance gets credited, credit balance gets debited
            "debit_cents": -net if net < 0 else 0,
            "credit_cents": net if net > 0 else 0,
            "description": f"Close {agg['account__code']}",
        })

    if profit_cents > 0:
        lines.append({"account_id": re_account.pk, "debit_cents": 0,
                      "credit_cents": profit_cents, "description": "Net profit to retained earnings"})
    elif profit_cents < 0:
        lines.append({"account_id": re_account.pk, "debit_cents": -profit_cents,
                      "credit_cents": 0, "description": "Net loss to retained earnings"})
    return lines


def close_period(org, period_id, user=None):
    """
    open -> closing -> closed, writing the closing journal in between.
    All or nothing: on any error the period stays open.
    """
    with transaction.atomic():
        try:
            # Same row lock as posting: no post can slip in during the close
            period = Period.objects.select_for_update().get(org=org, pk=period_id)
        except Period.DoesNotExist:
            raise PeriodNotFoundError(f"Period {period_id} not found", period_id=period_id)

        if period.status != "open":
            raise InvalidPeriodStateError(
                f"Period {period.code} is {period.status}; only open periods can be closed",
                period_id=period.pk,
                status=period.status,
            )
        period.transition_to("closing", user=user)

        pnl = profit_and_loss_for_period(org, period)
        journal = None
        has_activity = (
            JournalLine.objects.for_org(org)
            .posted()
            .in_period(period)
            .excluding_closing()
            .filter(account__type__in=("income", "expense"))
            .exists()
        )
        if has_activity:
            re_account = retained_earnings_account(org)
            lines = _closing_lines(org, period, re_account, pnl.profit_cents)
            if lines:
                prepared = prepare_lines(org, lines)
                check_balance(prepared)
                journal = write_journal(
                    org,
                    period,
                    jdate=period.end_date,
                    source="Closing",
                    memo=f"Closing entry for {period.code}",
                    prepared=prepared,
                    user=user,
                    source_table="acc_periods",
                    source_id=period.pk,
                    is_closing=True,
                )

        period.transition_to("closed", user=user)
        log_action(
            action="close",
            instance=period,
            user=user,
            org=org,
            changes={
                "journal_id": journal.pk if journal else None,
                "revenue_cents": pnl.revenue_cents,
                "expense_cents": pnl.expense_cents,
                "profit_cents": pnl.profit_cents,
            },
        )

    logger.info(
        "Closed period %s for org %s (profit %s cents, closing journal %s)",
        period.code, org.pk, pnl.profit_cents, journal.pk if journal else None,
    )
    return CloseResult(
        period_id=period.pk,
        code=period.code,
        status=period.status,
        journal_id=journal.pk if journal else None,
        revenue_cents=pnl.revenue_cents,
        expense_cents=pnl.expense_cents,
        profit_cents=pnl.profit_cents,
    )
