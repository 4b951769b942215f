from ..exceptions import InvalidAccountError, UnbalancedLineError
from ..models.account import ACCOUNT_TYPES


# ------------------------------------
# Structural checks on ledger entities
# (pure: no queries beyond already-loaded relations)
# ------------------------------------
def validate_account(account, parent=None):
    """Chart-of-accounts policy for a single account.

    `parent` defaults to `account.parent`; pass it explicitly when
    validating an account built from raw input.
    """
    if account.type not in ACCOUNT_TYPES:
        raise InvalidAccountError(
            f"Unknown account type {account.type!r}", account_type=account.type
        )
    if not (account.code or "").strip():
        raise InvalidAccountError("Account code is required")
    if not (account.name or "").strip():
        raise InvalidAccountError("Account name is required")

    if parent is None and getattr(account, "parent_id", None):
        parent = account.parent
    if parent is None:
        return

    # Only leaf accounts are postable, so a parent must be a header account
    if parent.is_postable:
        raise InvalidAccountError(
            f"Parent account {parent.code} is postable; only header accounts can have sub-accounts",
            parent_id=parent.pk,
        )
    if parent.org_id != account.org_id:
        raise InvalidAccountError("Parent & child accounts must belong to the same organization")
    if account.pk is not None and parent.pk == account.pk:
        raise InvalidAccountError("An account cannot be its own parent")


def _amount(value, side):
    # bool is an int subclass; True is not an amount
    if isinstance(value, bool) or not isinstance(value, int):
        raise UnbalancedLineError(
            f"{side} must be an integer amount of cents, got {value!r}"
        )
    if value < 0:
        raise UnbalancedLineError(f"{side} must be >= 0")
    return value


def validate_journal_line(line):
    """Exactly one side of a line carries a positive amount.

    Accepts a JournalLine instance or a mapping with
    debit_cents/credit_cents keys.
    """
    if isinstance(line, dict):
        debit, credit = line.get("debit_cents", 0), line.get("credit_cents", 0)
    else:
        debit, credit = line.debit_cents, line.credit_cents

    debit = _amount(0 if debit is None else debit, "debit_cents")
    credit = _amount(0 if credit is None else credit, "credit_cents")

    if debit > 0 and credit > 0:
        raise UnbalancedLineError(
            "Each line can have either a debit or credit amount, not both"
        )
    if debit == 0 and credit == 0:
        raise UnbalancedLineError(
            "Each line requires a non-zero amount on either debit or credit"
        )
    return debit, credit
