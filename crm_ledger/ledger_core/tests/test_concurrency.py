import datetime
import threading
import unittest
from unittest import mock

from django.db import connection
from django.test import TestCase, TransactionTestCase

from ledger_core.exceptions import PeriodClosedError
from ledger_core.models import Journal, Period
from ledger_core.services import close_period, post_journal
from ledger_core.services.periods import resolve_period

from .helpers import cr, dr, make_chart, make_org, make_period

SEP_15 = datetime.date(2025, 9, 15)


class PeriodStatusUnderLockTests(TestCase):
    """The period status is re-read after the row lock, not taken from resolve_period()."""

    def setUp(self):
        self.org = make_org()
        self.a = make_chart(self.org)
        self.period = make_period(self.org)

    def test_close_between_resolve_and_lock_rejects_post(self):
        def resolve_then_close(org, **kwargs):
            period = resolve_period(org, **kwargs)
            # a close commits after the period was resolved; the stale copy still says "open"
            Period.objects.filter(pk=period.pk).update(status="closed")
            return period

        with mock.patch("ledger_core.services.posting.resolve_period", side_effect=resolve_then_close):
            with self.assertRaises(PeriodClosedError):
                post_journal(
                    self.org,
                    lines=[dr(self.a["1110"], 100), cr(self.a["4000"], 100)],
                    jdate=SEP_15,
                    memo="Late sale",
                )
        self.assertFalse(Journal.objects.for_org(self.org).exists())


def _run_threads(*targets):
    errors = []

    def wrap(target):
        def run():
            try:
                target()
            except Exception as exc:
                errors.append(exc)
            finally:
                connection.close()
        return run

    threads = [threading.Thread(target=wrap(t)) for t in targets]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return errors


@unittest.skipUnless(connection.vendor == "postgresql", "row locks need PostgreSQL")
class ConcurrentPostingTests(TransactionTestCase):

    def setUp(self):
        self.org = make_org()
        self.a = make_chart(self.org)
        self.period = make_period(self.org)

    def sale(self, cents):
        return post_journal(
            self.org,
            lines=[dr(self.a["1110"], cents), cr(self.a["4000"], cents)],
            jdate=SEP_15,
            memo=f"Sale {cents}",
        )

    def test_concurrent_posts_to_one_period_both_commit(self):
        errors = _run_threads(lambda: self.sale(100), lambda: self.sale(200))
        self.assertEqual(errors, [])
        self.assertEqual(Journal.objects.for_org(self.org).count(), 2)

    def test_post_racing_close_is_included_or_rejected(self):
        results = {}

        def post():
            results["journal"] = self.sale(500)

        def close():
            results["close"] = close_period(self.org, self.period.pk)

        errors = _run_threads(post, close)

        close_result = results["close"]
        if "journal" in results:
            # the post won the lock: the close saw it
            self.assertEqual(errors, [])
            self.assertEqual(close_result.revenue_cents, 500)
            self.assertIsNotNone(close_result.journal_id)
        else:
            # the close won: the post found the period closed
            self.assertEqual(len(errors), 1)
            self.assertIsInstance(errors[0], PeriodClosedError)
            self.assertEqual(close_result.revenue_cents, 0)
            self.assertIsNone(close_result.journal_id)
        self.assertEqual(Period.objects.get(pk=self.period.pk).status, "closed")
