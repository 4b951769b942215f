from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from ..exceptions import JournalNotFoundError
from ..models import Journal


@dataclass
class JournalLineDetail:
    line_no: int
    account_id: int
    account_code: str
    account_name: str
    account_type: str
    debit_cents: int
    credit_cents: int
    description: Optional[str]


@dataclass
class JournalDetail:
    id: int
    jdate: date
    period_code: str
    source: str
    memo: Optional[str]
    is_closing: bool
    posted: bool
    lines: List[JournalLineDetail] = field(default_factory=list)
    total_debit_cents: int = 0
    total_credit_cents: int = 0


def list_journals(org, limit=100):
    """Most recent journals first (journal list screen)."""
    return list(
        Journal.objects.for_org(org)
        .select_related("period")
        .order_by("-jdate", "-id")[:limit]
    )


def journal_detail(org, journal_id):
    try:
        journal = Journal.objects.for_org(org).select_related("period").get(pk=journal_id)
    except Journal.DoesNotExist:
        raise JournalNotFoundError(f"Journal {journal_id} not found", journal_id=journal_id)

    detail = JournalDetail(
        id=journal.pk,
        jdate=journal.jdate,
        period_code=journal.period.code,
        source=journal.source,
        memo=journal.memo,
        is_closing=journal.is_closing,
        posted=journal.posted,
    )
    for line in journal.lines.select_related("account").order_by("line_no"):
        detail.lines.append(
            JournalLineDetail(
                line_no=line.line_no,
                account_id=line.account_id,
                account_code=line.account.code,
                account_name=line.account.name,
                account_type=line.account.type,
                debit_cents=line.debit_cents,
                credit_cents=line.credit_cents,
                description=line.description,
            )
        )
        detail.total_debit_cents += line.debit_cents
        detail.total_credit_cents += line.credit_cents
    return detail
