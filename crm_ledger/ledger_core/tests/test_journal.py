import datetime
import json

from django.core.exceptions import ValidationError
from django.db.models import Sum
from django.test import TestCase

from ledger_core.exceptions import (IdempotencyConflictError,
                                    InvalidAccountError, LedgerValidationError,
                                    MissingFieldError, PeriodClosedError,
                                    PeriodNotFoundError,
                                    UnbalancedJournalError,
                                    UnbalancedLineError)
from ledger_core.models import (Account, AuditLog, Journal, JournalLine,
                                Membership, User)
from ledger_core.services import post_journal, post_journal_json

from .helpers import cr, dr, make_chart, make_org, make_period

SEP_15 = datetime.date(2025, 9, 15)


class LedgerTestCase(TestCase):

    def setUp(self):
        self.org = make_org()
        self.accounts = make_chart(self.org)
        self.cash = self.accounts["1110"]
        self.revenue = self.accounts["4000"]
        self.rent = self.accounts["5000"]
        self.period = make_period(self.org)

    def post(self, lines, **kwargs):
        kwargs.setdefault("jdate", SEP_15)
        kwargs.setdefault("memo", "Test entry")
        return post_journal(self.org, lines=lines, **kwargs)


""" Success tests """
class PostJournalSuccessTests(LedgerTestCase):

    """ Cash 10000 Dr / Revenue 10000 Cr """
    def test_balanced_entry_posts_successfully(self):
        journal = self.post([dr(self.cash, 10000), cr(self.revenue, 10000)])

        journal.refresh_from_db()
        self.assertTrue(journal.posted)
        self.assertIsNotNone(journal.posted_at)
        self.assertEqual(journal.period, self.period)
        self.assertEqual(journal.source, "Manual")
        self.assertFalse(journal.is_closing)
        self.assertEqual(journal.lines.count(), 2)
        self.assertEqual(journal.compute_totals(), (10000, 10000))
        self.assertTrue(journal.is_balanced())

    def test_lines_keep_submission_order(self):
        journal = self.post([
            cr(self.revenue, 7000, "sale"),
            dr(self.cash, 5000),
            dr(self.accounts["1130"], 2000),
        ])
        lines = list(journal.lines.order_by("line_no").values_list("line_no", "account__code", "description"))
        self.assertEqual(lines, [(1, "4000", "sale"), (2, "1110", None), (3, "1130", None)])

    def test_balance_holds_regardless_of_line_order(self):
        lines = [dr(self.cash, 3000), dr(self.rent, 2000), cr(self.revenue, 5000)]
        for ordering in (lines, list(reversed(lines)), [lines[2], lines[0], lines[1]]):
            journal = self.post(ordering)
            debit, credit = journal.compute_totals()
            self.assertEqual(debit, credit)
            self.assertEqual(debit, 5000)

    def test_period_code_only_dates_journal_at_period_end(self):
        journal = post_journal(
            self.org,
            lines=[dr(self.cash, 100), cr(self.revenue, 100)],
            period_code="2025-09",
            memo="Accrual",
        )
        self.assertEqual(journal.jdate, datetime.date(2025, 9, 30))

    def test_iso_date_string_is_accepted(self):
        journal = self.post([dr(self.cash, 100), cr(self.revenue, 100)], jdate="2025-09-02")
        self.assertEqual(journal.jdate, datetime.date(2025, 9, 2))

    def test_source_reference_is_stored(self):
        journal = self.post(
            [dr(self.accounts["1130"], 500), cr(self.revenue, 500)],
            source="Invoice",
            source_ref=("invoices", 42),
        )
        self.assertEqual((journal.source, journal.source_table, journal.source_id), ("Invoice", "invoices", "42"))

    def test_post_writes_audit_row_for_member(self):
        user = User.objects.create_user(username="alice", password="pw")
        Membership.objects.create(user=user, org=self.org, role="accountant")

        journal = self.post([dr(self.cash, 100), cr(self.revenue, 100)], user=user)

        self.assertEqual(journal.created_by, user)
        row = AuditLog.objects.for_org(self.org).get(action="post")
        self.assertEqual((row.object_type, row.object_id), ("Journal", str(journal.pk)))
        self.assertEqual(row.changes["total_cents"], 100)

    def test_post_journal_json_accepts_json_lines(self):
        lines_json = json.dumps([dr(self.cash, 250), cr(self.revenue, 250)])
        journal = post_journal_json(self.org, lines_json=lines_json, jdate="2025-09-10", memo="JSON")
        self.assertEqual(journal.compute_totals(), (250, 250))

    def test_post_journal_json_rejects_non_array(self):
        with self.assertRaises(LedgerValidationError):
            post_journal_json(self.org, lines_json='{"account_id": 1}', jdate=SEP_15, memo="JSON")
        with self.assertRaises(LedgerValidationError):
            post_journal_json(self.org, lines_json="not json", jdate=SEP_15, memo="JSON")


""" Idempotency tests """
class PostJournalIdempotencyTests(LedgerTestCase):

    """ Same key + same payload -> the first journal comes back, nothing new is written """
    def test_replay_with_same_payload_returns_existing_journal(self):
        lines = [dr(self.cash, 100), cr(self.revenue, 100)]
        first = self.post(lines, idempotency_key="abc-1")
        second = self.post(lines, idempotency_key="abc-1")

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(Journal.objects.for_org(self.org).count(), 1)
        self.assertEqual(JournalLine.objects.for_org(self.org).count(), 2)

    def test_same_key_with_different_payload_conflicts(self):
        self.post([dr(self.cash, 100), cr(self.revenue, 100)], idempotency_key="abc-1")
        with self.assertRaises(IdempotencyConflictError):
            self.post([dr(self.cash, 200), cr(self.revenue, 200)], idempotency_key="abc-1")
        self.assertEqual(Journal.objects.for_org(self.org).count(), 1)

    def test_replay_is_returned_even_after_period_closes(self):
        lines = [dr(self.cash, 100), cr(self.revenue, 100)]
        first = self.post(lines, idempotency_key="abc-1")
        self.period.transition_to("closing")
        self.period.transition_to("closed")
        self.assertEqual(self.post(lines, idempotency_key="abc-1").pk, first.pk)

    def test_keys_are_scoped_per_organization(self):
        other = make_org(name="Other", slug="other")
        other_accounts = make_chart(other)
        make_period(other)
        self.post([dr(self.cash, 100), cr(self.revenue, 100)], idempotency_key="abc-1")
        journal = post_journal(
            other,
            lines=[dr(other_accounts["1110"], 100), cr(other_accounts["4000"], 100)],
            jdate=SEP_15,
            memo="Other org",
            idempotency_key="abc-1",
        )
        self.assertEqual(journal.org, other)

    def test_posts_without_key_are_never_deduplicated(self):
        lines = [dr(self.cash, 100), cr(self.revenue, 100)]
        self.post(lines)
        self.post(lines)
        self.assertEqual(Journal.objects.for_org(self.org).count(), 2)


""" Failure tests """
class PostJournalFailureTests(LedgerTestCase):

    def assertNothingWritten(self):
        self.assertFalse(Journal.objects.for_org(self.org).exists())
        self.assertFalse(JournalLine.objects.for_org(self.org).exists())

    """ Debits 5000 / credits 4000 """
    def test_unbalanced_entry_is_rejected_and_nothing_persisted(self):
        with self.assertRaises(UnbalancedJournalError) as cm:
            self.post([dr(self.cash, 5000), cr(self.revenue, 4000)])
        self.assertEqual(cm.exception.details["total_debit_cents"], 5000)
        self.assertEqual(cm.exception.details["total_credit_cents"], 4000)
        self.assertNothingWritten()

    def test_empty_and_single_line_entries_are_rejected(self):
        with self.assertRaises(UnbalancedJournalError):
            self.post([])
        with self.assertRaises(UnbalancedJournalError):
            self.post([dr(self.cash, 100)])
        self.assertNothingWritten()

    def test_line_with_both_sides_is_rejected(self):
        line = {"account_id": self.cash.pk, "debit_cents": 100, "credit_cents": 100}
        with self.assertRaises(UnbalancedLineError):
            self.post([line, cr(self.revenue, 0)])
        self.assertNothingWritten()

    def test_line_with_neither_side_is_rejected(self):
        with self.assertRaises(UnbalancedLineError):
            self.post([dr(self.cash, 100), cr(self.revenue, 100), dr(self.rent, 0)])
        self.assertNothingWritten()

    """ Attempt to post into a period that was just closed """
    def test_closed_period_rejects_posting(self):
        self.period.transition_to("closing")
        self.period.transition_to("closed")
        with self.assertRaises(PeriodClosedError):
            self.post([dr(self.cash, 100), cr(self.revenue, 100)])
        self.assertNothingWritten()

    def test_closing_period_rejects_posting(self):
        self.period.transition_to("closing")
        with self.assertRaises(PeriodClosedError):
            self.post([dr(self.cash, 100), cr(self.revenue, 100)])

    def test_closed_period_check_runs_before_line_checks(self):
        self.period.transition_to("closing")
        self.period.transition_to("closed")
        with self.assertRaises(PeriodClosedError):
            self.post([dr(self.cash, 5000), cr(self.revenue, 4000)])

    def test_date_without_period_is_rejected(self):
        with self.assertRaises(PeriodNotFoundError):
            self.post([dr(self.cash, 100), cr(self.revenue, 100)], jdate=datetime.date(2025, 10, 1))

    def test_unknown_period_code_is_rejected(self):
        with self.assertRaises(PeriodNotFoundError):
            self.post([dr(self.cash, 100), cr(self.revenue, 100)], jdate=None, period_code="2031-01")

    def test_date_outside_given_period_is_rejected(self):
        with self.assertRaises(PeriodNotFoundError):
            self.post(
                [dr(self.cash, 100), cr(self.revenue, 100)],
                jdate=datetime.date(2025, 8, 31),
                period_code="2025-09",
            )

    def test_missing_date_and_memo_are_rejected(self):
        with self.assertRaises(MissingFieldError):
            post_journal(self.org, lines=[dr(self.cash, 100), cr(self.revenue, 100)], memo="x")
        with self.assertRaises(MissingFieldError):
            self.post([dr(self.cash, 100), cr(self.revenue, 100)], memo="   ")
        with self.assertRaises(MissingFieldError):
            self.post([dr(self.cash, 100), cr(self.revenue, 100)], jdate="15/09/2025")

    def test_header_account_is_not_postable(self):
        with self.assertRaises(InvalidAccountError):
            self.post([dr(self.accounts["1000"], 100), cr(self.revenue, 100)])
        self.assertNothingWritten()

    def test_unknown_account_is_rejected(self):
        with self.assertRaises(InvalidAccountError):
            self.post([{"account_id": 999999, "debit_cents": 100}, cr(self.revenue, 100)])

    def test_account_check_runs_before_line_checks(self):
        with self.assertRaises(InvalidAccountError):
            self.post([{"account_id": 999999, "debit_cents": 100, "credit_cents": 100}, cr(self.revenue, 100)])

    def test_mixed_currencies_are_rejected(self):
        eur_cash = Account.objects.create(org=self.org, code="1120", name="Cash EUR", type="asset", currency="EUR")
        with self.assertRaises(InvalidAccountError):
            self.post([dr(eur_cash, 100), cr(self.revenue, 100)])
        self.assertNothingWritten()


""" Immutability tests """
class JournalImmutabilityTests(LedgerTestCase):

    def setUp(self):
        super().setUp()
        self.journal = self.post([dr(self.cash, 100), cr(self.revenue, 100)])

    def test_journal_cannot_be_updated(self):
        self.journal.memo = "changed"
        with self.assertRaises(ValidationError):
            self.journal.save()

    def test_journal_cannot_be_deleted(self):
        with self.assertRaises(ValidationError):
            self.journal.delete()

    def test_lines_cannot_be_updated_or_deleted(self):
        line = self.journal.lines.first()
        line.debit_cents = 999
        with self.assertRaises(ValidationError):
            line.save()
        with self.assertRaises(ValidationError):
            line.delete()
        total = JournalLine.objects.for_org(self.org).aggregate(d=Sum("debit_cents"))["d"]
        self.assertEqual(total, 100)
