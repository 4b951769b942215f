import datetime

import pytest

from ledger_core.services import parse_trial_balance_csv, post_journal
from ledger_core.tasks import export_trial_balance_csv

from .helpers import cr, dr, make_chart, make_org, make_period


@pytest.mark.django_db
def test_export_trial_balance_csv_task():
    org = make_org()
    accounts = make_chart(org)
    make_period(org)
    post_journal(
        org,
        lines=[dr(accounts["1110"], 2500), cr(accounts["4000"], 2500)],
        jdate=datetime.date(2025, 9, 3),
        memo="Sale",
    )

    # run in-process, the way an eager worker would
    content = export_trial_balance_csv.apply(args=(org.pk, "2025-09")).get()

    rows = parse_trial_balance_csv(content)
    assert [(r.code, r.total_debit_cents, r.total_credit_cents) for r in rows] == [
        ("1110", 2500, 0),
        ("4000", 0, 2500),
    ]


@pytest.mark.django_db
def test_export_task_for_all_periods_of_empty_org():
    org = make_org()
    assert export_trial_balance_csv(org.pk) == "Account Code,Account Name,Type,Debit,Credit,Balance\r\n"
