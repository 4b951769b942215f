import datetime
import hashlib
import json
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from ..exceptions import (IdempotencyConflictError, InvalidAccountError,
                          LedgerValidationError, MissingFieldError,
                          PeriodClosedError, UnbalancedJournalError)
from ..models import Account, Journal, JournalLine, Period
from .audit_helper import log_action
from .periods import resolve_period
from .validation import validate_journal_line

logger = logging.getLogger(__name__)


def as_date(value):
    """Accept a date or an ISO "YYYY-MM-DD" string."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    try:
        parsed = parse_date(str(value))
    except ValueError:
        parsed = None
    if parsed is None:
        raise MissingFieldError(f"Invalid date {value!r}, expected YYYY-MM-DD")
    return parsed


def _account_key(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidAccountError(f"Invalid account reference {value!r}", account_id=value)


# ----------------------------
# Line preparation & checks
# ----------------------------
def prepare_lines(org, lines):
    """Resolve accounts and validate the shape of every submitted line.

    Returns a list of dicts ready for write_journal(), in submission order.
    Account checks run over every line before any amount check.
    """
    lines = list(lines or [])
    keys = [_account_key(line.get("account_id")) for line in lines]
    accounts = Account.objects.for_org(org).in_bulk(set(keys))

    # Every line must reference an existing, postable account of this org
    for line, key in zip(lines, keys):
        account = accounts.get(key)
        if account is None:
            raise InvalidAccountError(f"Account {key} does not exist", account_id=key)
        if not account.is_postable:
            raise InvalidAccountError(
                f"Account {account.code} is a header account and cannot be posted to",
                account_id=key,
            )
        currency = line.get("currency")
        if currency and currency != account.currency:
            raise InvalidAccountError(
                f"Line currency {currency} does not match account {account.code} ({account.currency})",
                account_id=key,
            )

    currencies = {accounts[key].currency for key in keys}
    if len(currencies) > 1:
        # no revaluation: one journal, one currency
        raise InvalidAccountError(
            "All lines of a journal must share one currency",
            currencies=sorted(currencies),
        )

    prepared = []
    for line_no, (line, key) in enumerate(zip(lines, keys), start=1):
        debit, credit = validate_journal_line(line)
        prepared.append({
            "line_no": line_no,
            "account": accounts[key],
            "debit_cents": debit,
            "credit_cents": credit,
            "currency": accounts[key].currency,
            "description": line.get("description") or None,
        })
    return prepared


def check_balance(prepared):
    """Enforce double-entry rule: debits = credits, at least two legs."""
    with_amounts = [ln for ln in prepared if ln["debit_cents"] or ln["credit_cents"]]
    if len(with_amounts) < 2:
        raise UnbalancedJournalError(
            "At least 2 lines with amounts are required",
            line_count=len(with_amounts),
        )
    td = sum(ln["debit_cents"] for ln in prepared)
    tc = sum(ln["credit_cents"] for ln in prepared)
    if td != tc:
        raise UnbalancedJournalError(
            f"Journal not balanced: debits={td}, credits={tc}",
            total_debit_cents=td,
            total_credit_cents=tc,
        )
    return td


def write_journal(org, period, *, jdate, source, memo, prepared, user=None,
                  source_table=None, source_id=None, is_closing=False,
                  idempotency_key=None, fingerprint=None):
    """Insert the header and every line. Caller owns the transaction."""
    journal = Journal.objects.create(
        org=org,
        period=period,
        jdate=jdate,
        source=source,
        source_table=source_table,
        source_id=None if source_id is None else str(source_id),
        memo=memo,
        posted=True,
        posted_at=timezone.now(),
        created_by=user,
        is_closing=is_closing,
        idempotency_key=idempotency_key,
        posting_fingerprint=fingerprint,
    )
    for ln in prepared:
        JournalLine.objects.create(
            org=org,
            journal=journal,
            account=ln["account"],
            line_no=ln["line_no"],
            debit_cents=ln["debit_cents"],
            credit_cents=ln["credit_cents"],
            currency=ln["currency"],
            description=ln["description"],
        )
    return journal


# ----------------------------
# Idempotency
# ----------------------------
def _posting_payload(org, jdate, period_code, source, source_table, source_id, memo, lines):
    """Deterministic JSON of everything that matters for posting.

    If the submission hasn't changed, the string is always the same.
    """
    payload = {
        "org": org.pk,
        "date": jdate.isoformat() if jdate else None,
        "period": period_code,
        "source": source,
        "source_table": source_table,
        "source_id": None if source_id is None else str(source_id),
        "memo": memo,
        "lines": [
            {
                "acct": str(line.get("account_id")),
                "debit": line.get("debit_cents") or 0,
                "credit": line.get("credit_cents") or 0,
                "desc": line.get("description") or "",
            }
            for line in lines
        ],
    }
    return json.dumps(payload, separators=(",", ":"), sort_keys=True, default=str)


def _fingerprint(*args):
    return hashlib.sha256(_posting_payload(*args).encode()).hexdigest()


def _replay(org, idempotency_key, fingerprint):
    existing = Journal.objects.for_org(org).filter(idempotency_key=idempotency_key).first()
    if existing is None:
        return None
    if existing.posting_fingerprint != fingerprint:
        raise IdempotencyConflictError(
            "Idempotency key already used for a different journal",
            journal_id=existing.pk,
        )
    logger.info("Replayed journal %s for idempotency key %s", existing.pk, idempotency_key)
    return existing


# ----------------------------
# Posting gateway
# ----------------------------
def post_journal(org, *, lines, jdate=None, period_code=None, source="Manual",
                 source_ref=None, memo=None, user=None, idempotency_key=None):
    """
    The single gateway for creating a journal + its lines.

    Checks, in order: period resolves, period is open, accounts exist and are
    postable, each line has exactly one positive side, the entry balances.
    Either the journal and every line commit, or nothing does.
    """
    jdate = as_date(jdate)
    if jdate is None and not period_code:
        raise MissingFieldError("Date is required")
    if not (memo or "").strip():
        raise MissingFieldError("Memo/description is required")

    source_table, source_id = source_ref or (None, None)
    lines = list(lines or [])
    fingerprint = None
    if idempotency_key:
        fingerprint = _fingerprint(org, jdate, period_code, source, source_table, source_id, memo, lines)
        existing = _replay(org, idempotency_key, fingerprint)
        if existing is not None:
            return existing

    try:
        with transaction.atomic():
            period = resolve_period(org, on_date=jdate, period_code=period_code)
            # Lock the period row: a concurrent close waits for this post (or vice versa)
            period = Period.objects.select_for_update().get(pk=period.pk)
            if not period.is_open:
                raise PeriodClosedError(
                    f"Period {period.code} is {period.status}; postings are not allowed",
                    period_id=period.pk,
                    status=period.status,
                )

            prepared = prepare_lines(org, lines)
            total = check_balance(prepared)

            journal = write_journal(
                org,
                period,
                jdate=jdate or period.end_date,
                source=source,
                memo=memo,
                prepared=prepared,
                user=user,
                source_table=source_table,
                source_id=source_id,
                idempotency_key=idempotency_key or None,
                fingerprint=fingerprint,
            )
            log_action(
                action="post",
                instance=journal,
                user=user,
                org=org,
                changes={"period": period.code, "lines": len(prepared), "total_cents": total},
            )
    except IntegrityError:
        # Two submissions with the same key raced; the loser replays the winner
        if not idempotency_key:
            raise
        existing = _replay(org, idempotency_key, fingerprint)
        if existing is None:
            raise
        return existing

    logger.info(
        "Posted journal %s (%s, %s lines, %s cents) to period %s",
        journal.pk, source, len(prepared), total, period.code,
    )
    return journal


def post_journal_json(org, *, lines_json, **kwargs):
    """Same as post_journal() with the lines given as a JSON array string."""
    try:
        lines = json.loads(lines_json) if isinstance(lines_json, (str, bytes)) else lines_json
    except ValueError:
        raise LedgerValidationError("lines must be a JSON array")
    if not isinstance(lines, list) or not all(isinstance(line, dict) for line in lines):
        raise LedgerValidationError("lines must be a JSON array of objects")
    return post_journal(org, lines=lines, **kwargs)
