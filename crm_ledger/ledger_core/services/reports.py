from dataclasses import asdict, dataclass, field
from datetime import date
from typing import List, Optional

from django.conf import settings
from django.db.models import Sum
from django.utils import timezone

from ..exceptions import UnknownReportTypeError
from ..models import JournalLine
from ..models.account import BALANCE_SHEET_TYPES, signed_balance
from .periods import resolve_period
from .posting import as_date

"""
    Reports are computed on demand from posted journal lines.
    Nothing here writes to the database.
"""

REPORT_TYPES = ("all", "trial_balance", "profit_loss", "balance_sheet", "general_ledger", "vat_summary")


@dataclass
class TrialBalanceRow:
    account_id: int
    code: str
    name: str
    type: str
    total_debit_cents: int
    total_credit_cents: int
    balance_cents: int


@dataclass
class ProfitAndLoss:
    period_id: int
    code: str
    start_date: date
    end_date: date
    status: str
    revenue_cents: int = 0
    expense_cents: int = 0
    profit_cents: int = 0


@dataclass
class BalanceSheetRow:
    period_id: int
    code: str
    account_id: int
    account_code: str
    account_name: str
    type: str
    balance_cents: int


@dataclass
class BalanceSheet:
    period_id: int
    code: str
    end_date: date
    rows: List[BalanceSheetRow] = field(default_factory=list)
    total_assets_cents: int = 0  # net of contra-assets
    total_liabilities_cents: int = 0  # net of contra-liabilities
    current_earnings_cents: int = 0  # income - expense not yet closed
    total_equity_cents: int = 0  # includes current earnings
    is_balanced: bool = True


@dataclass
class GeneralLedgerRow:
    journal_id: int
    jdate: date
    line_no: int
    source: str
    memo: Optional[str]
    account_code: str
    account_name: str
    description: Optional[str]
    debit_cents: int
    credit_cents: int


@dataclass
class VatSummaryRow:
    tax_code: str
    total_debit_cents: int
    total_credit_cents: int
    net_cents: int  # credit - debit: positive means tax owed


def _account_totals(qs):
    """Sum debits and credits independently, one row per account."""
    return (
        qs.values("account_id", "account__code", "account__name", "account__type")
        .annotate(debit=Sum("debit_cents"), credit=Sum("credit_cents"))
        .order_by("account__code")
    )


# ----------------------------
# Trial balance
# ----------------------------
def trial_balance(org, period_code=None):
    """Per-account debit/credit totals for one period, or for all periods."""
    qs = JournalLine.objects.for_org(org).posted()
    if period_code is not None:
        qs = qs.in_period(resolve_period(org, period_code=period_code))

    rows = []
    for agg in _account_totals(qs):
        debit, credit = agg["debit"] or 0, agg["credit"] or 0
        rows.append(
            TrialBalanceRow(
                account_id=agg["account_id"],
                code=agg["account__code"],
                name=agg["account__name"],
                type=agg["account__type"],
                total_debit_cents=debit,
                total_credit_cents=credit,
                balance_cents=signed_balance(agg["account__type"], debit, credit),
            )
        )
    return rows


def trial_balance_totals(rows):
    return (
        sum(r.total_debit_cents for r in rows),
        sum(r.total_credit_cents for r in rows),
    )


# ----------------------------
# Profit & loss
# ----------------------------
def profit_and_loss_for_period(org, period):
    # closing entries zero income/expense; leaving them in would show 0 profit
    aggs = (
        JournalLine.objects.for_org(org)
        .posted()
        .in_period(period)
        .excluding_closing()
        .filter(account__type__in=("income", "expense"))
        .values("account__type")
        .annotate(debit=Sum("debit_cents"), credit=Sum("credit_cents"))
    )
    revenue = expense = 0
    for agg in aggs:
        balance = signed_balance(agg["account__type"], agg["debit"] or 0, agg["credit"] or 0)
        if agg["account__type"] == "income":
            revenue += balance
        else:
            expense += balance
    return ProfitAndLoss(
        period_id=period.pk,
        code=period.code,
        start_date=period.start_date,
        end_date=period.end_date,
        status=period.status,
        revenue_cents=revenue,
        expense_cents=expense,
        profit_cents=revenue - expense,
    )


def profit_and_loss(org, period_code):
    return profit_and_loss_for_period(org, resolve_period(org, period_code=period_code))


# ----------------------------
# Balance sheet
# ----------------------------
def balance_sheet(org, period_code):
    """
    Balances as of the period end: every posted line of every period
    ending on or before this one.
    """
    period = resolve_period(org, period_code=period_code)
    to_date = (
        JournalLine.objects.for_org(org)
        .posted()
        .filter(journal__period__end_date__lte=period.end_date)
    )

    sheet = BalanceSheet(period_id=period.pk, code=period.code, end_date=period.end_date)
    by_type = dict.fromkeys(
        ("asset", "contra-asset", "liability", "contra-liability", "equity", "income", "expense"), 0
    )

    for agg in _account_totals(to_date):
        ac_type = agg["account__type"]
        balance = signed_balance(ac_type, agg["debit"] or 0, agg["credit"] or 0)
        by_type[ac_type] += balance
        if ac_type not in BALANCE_SHEET_TYPES:
            continue
        sheet.rows.append(
            BalanceSheetRow(
                period_id=period.pk,
                code=period.code,
                account_id=agg["account_id"],
                account_code=agg["account__code"],
                account_name=agg["account__name"],
                type=ac_type,
                balance_cents=balance,
            )
        )

    sheet.total_assets_cents = by_type["asset"] - by_type["contra-asset"]
    sheet.total_liabilities_cents = by_type["liability"] - by_type["contra-liability"]
    # Income/expense of closed periods already sits in retained earnings
    sheet.current_earnings_cents = by_type["income"] - by_type["expense"]
    sheet.total_equity_cents = by_type["equity"] + sheet.current_earnings_cents
    sheet.is_balanced = (
        sheet.total_assets_cents == sheet.total_liabilities_cents + sheet.total_equity_cents
    )
    return sheet


# ----------------------------
# General ledger & VAT
# ----------------------------
def general_ledger(org, period_code=None, start_date=None, end_date=None, limit=None):
    """Line-level listing, newest journal first."""
    qs = JournalLine.objects.for_org(org).posted().select_related("journal", "account")
    if period_code is not None:
        qs = qs.in_period(resolve_period(org, period_code=period_code))
    start_date, end_date = as_date(start_date), as_date(end_date)
    if start_date:
        qs = qs.filter(journal__jdate__gte=start_date)
    if end_date:
        qs = qs.filter(journal__jdate__lte=end_date)

    limit = limit or settings.LEDGER_GENERAL_LEDGER_LIMIT
    qs = qs.order_by("-journal__jdate", "-journal_id", "line_no")[:limit]
    return [
        GeneralLedgerRow(
            journal_id=line.journal_id,
            jdate=line.journal.jdate,
            line_no=line.line_no,
            source=line.journal.source,
            memo=line.journal.memo,
            account_code=line.account.code,
            account_name=line.account.name,
            description=line.description,
            debit_cents=line.debit_cents,
            credit_cents=line.credit_cents,
        )
        for line in qs
    ]


def vat_summary(org, period_code):
    period = resolve_period(org, period_code=period_code)
    aggs = (
        JournalLine.objects.for_org(org)
        .posted()
        .in_period(period)
        .exclude(account__tax_code__isnull=True)
        .exclude(account__tax_code="")
        .values("account__tax_code")
        .annotate(debit=Sum("debit_cents"), credit=Sum("credit_cents"))
        .order_by("account__tax_code")
    )
    return [
        VatSummaryRow(
            tax_code=agg["account__tax_code"],
            total_debit_cents=agg["debit"] or 0,
            total_credit_cents=agg["credit"] or 0,
            net_cents=(agg["credit"] or 0) - (agg["debit"] or 0),
        )
        for agg in aggs
    ]


# ----------------------------
# Combined report
# ----------------------------
def generate_report(org, report_type="all", period_code=None, start_date=None, end_date=None):
    """
    Build one or all reports as plain dicts, ready for JsonResponse.
    Period-scoped reports are only produced when a period code is given.
    """
    if report_type not in REPORT_TYPES:
        raise UnknownReportTypeError(
            f"Unknown report type {report_type!r}", allowed=list(REPORT_TYPES)
        )
    # "" from a form or query string means no period
    period_code = period_code or None

    def wanted(name):
        return report_type in ("all", name)

    period = resolve_period(org, period_code=period_code) if period_code else None
    result = {
        "period": None,
        "generated_at": timezone.now().isoformat(),
    }
    if period is not None:
        result["period"] = {
            "id": period.pk,
            "code": period.code,
            "start_date": period.start_date.isoformat(),
            "end_date": period.end_date.isoformat(),
            "status": period.status,
        }

    if wanted("trial_balance"):
        rows = trial_balance(org, period_code)
        debit, credit = trial_balance_totals(rows)
        result["trial_balance"] = {
            "rows": [asdict(r) for r in rows],
            "total_debit_cents": debit,
            "total_credit_cents": credit,
        }
    if wanted("general_ledger"):
        result["general_ledger"] = [
            asdict(r) for r in general_ledger(org, period_code, start_date, end_date)
        ]
    if period is not None:
        if wanted("profit_loss"):
            result["profit_loss"] = asdict(profit_and_loss_for_period(org, period))
        if wanted("balance_sheet"):
            result["balance_sheet"] = asdict(balance_sheet(org, period_code))
        if wanted("vat_summary"):
            result["vat_summary"] = [asdict(r) for r in vat_summary(org, period_code)]
    return result
