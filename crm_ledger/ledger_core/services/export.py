import csv
import io
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ..exceptions import LedgerValidationError
from .reports import TrialBalanceRow

CSV_HEADER = ["Account Code", "Account Name", "Type", "Debit", "Credit", "Balance"]
CENT = Decimal("0.01")


def cents_to_major(cents):
    """1234 -> "12.34" (string, so the CSV never holds a float)."""
    return str((Decimal(cents) / 100).quantize(CENT, rounding=ROUND_HALF_UP))


def major_to_cents(text):
    try:
        amount = Decimal(str(text).strip() or "0")
    except InvalidOperation:
        raise LedgerValidationError(f"Invalid amount {text!r} in trial balance CSV")
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def trial_balance_to_csv(rows):
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADER)
    for row in rows:
        writer.writerow([
            row.code,
            row.name,
            row.type,
            cents_to_major(row.total_debit_cents),
            cents_to_major(row.total_credit_cents),
            cents_to_major(row.balance_cents),
        ])
    return buffer.getvalue()


def parse_trial_balance_csv(text):
    """Read an exported trial balance back into rows (amounts in cents)."""
    reader = csv.DictReader(io.StringIO(text))
    if reader.fieldnames != CSV_HEADER:
        raise LedgerValidationError(
            "Unexpected trial balance CSV header", header=reader.fieldnames
        )
    return [
        # account ids are not exported
        TrialBalanceRow(
            account_id=None,
            code=record["Account Code"],
            name=record["Account Name"],
            type=record["Type"],
            total_debit_cents=major_to_cents(record["Debit"]),
            total_credit_cents=major_to_cents(record["Credit"]),
            balance_cents=major_to_cents(record["Balance"]),
        )
        for record in reader
    ]
