import datetime

import pytest

from ledger_core.exceptions import LedgerValidationError
from ledger_core.services import (parse_trial_balance_csv, post_journal,
                                  trial_balance, trial_balance_to_csv)
from ledger_core.services.export import cents_to_major, major_to_cents
from ledger_core.services.reports import TrialBalanceRow, trial_balance_totals

from .helpers import cr, dr, make_chart, make_org, make_period


@pytest.mark.parametrize(
    "cents, text",
    [(0, "0.00"), (5, "0.05"), (1234, "12.34"), (-1234, "-12.34"), (100000000, "1000000.00")],
)
def test_cents_to_major_units(cents, text):
    assert cents_to_major(cents) == text
    assert major_to_cents(text) == cents


def test_major_to_cents_rejects_garbage():
    with pytest.raises(LedgerValidationError):
        major_to_cents("12,34abc")


def test_csv_header_and_row_format():
    rows = [TrialBalanceRow(1, "1110", "Cash, petty", "asset", 10050, 0, 10050)]
    text = trial_balance_to_csv(rows)
    lines = text.splitlines()
    assert lines[0] == "Account Code,Account Name,Type,Debit,Credit,Balance"
    # names with commas are quoted
    assert lines[1] == '1110,"Cash, petty",asset,100.50,0.00,100.50'


def test_parse_rejects_unexpected_header():
    with pytest.raises(LedgerValidationError):
        parse_trial_balance_csv("Code,Debit\n1110,1.00\n")


@pytest.mark.django_db
def test_round_trip_reproduces_report_totals():
    org = make_org()
    a = make_chart(org)
    make_period(org)
    jdate = datetime.date(2025, 9, 10)
    post_journal(org, lines=[dr(a["1110"], 10001), cr(a["4000"], 8334), cr(a["2200"], 1667)], jdate=jdate, memo="Sale")
    post_journal(org, lines=[dr(a["5000"], 4099), cr(a["1110"], 4099)], jdate=jdate, memo="Rent")

    rows = trial_balance(org, "2025-09")
    parsed = parse_trial_balance_csv(trial_balance_to_csv(rows))

    debit, credit = trial_balance_totals(parsed)
    assert debit == credit
    assert (debit, credit) == trial_balance_totals(rows)
    assert [(r.code, r.balance_cents) for r in parsed] == [(r.code, r.balance_cents) for r in rows]
