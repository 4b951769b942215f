class LedgerError(Exception):
    """Base for every error the accounting core raises on purpose.

    `kind` tells the caller how to react:
      - "validation": fix the input and resubmit
      - "state_conflict": re-read the ledger state before retrying
    """

    kind = "validation"

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def as_dict(self):
        return {"kind": self.kind, "error": self.message, **self.details}


class LedgerValidationError(LedgerError):
    kind = "validation"


class LedgerStateError(LedgerError):
    kind = "state_conflict"


# ---------- Validation ----------
class InvalidAccountError(LedgerValidationError):
    """Unknown account type, unknown/non-postable account, or chart policy violation."""
    pass

class UnbalancedLineError(LedgerValidationError):
    """Raised when a line does not carry exactly one positive side."""
    pass

class UnbalancedJournalError(LedgerValidationError):
    """Raised when a journal fails the double-entry balance check."""
    pass

class MissingFieldError(LedgerValidationError):
    """Raised when a required input (date, memo, ...) is absent."""
    pass

class UnknownReportTypeError(LedgerValidationError):
    pass


# ---------- State conflicts ----------
class PeriodNotFoundError(LedgerStateError):
    """No accounting period covers the date / matches the code."""
    pass

class PeriodClosedError(LedgerStateError):
    """Raised when posting into a period whose status is not open."""
    pass

class InvalidPeriodStateError(LedgerStateError):
    """Raised on a period transition outside open -> closing -> closed."""
    pass

class AccountInUseError(LedgerStateError):
    """Account is referenced by journal lines (or has sub-accounts)."""
    pass

class IdempotencyConflictError(LedgerStateError):
    """Raised when an idempotency key is reused with a different payload."""
    pass

class JournalNotFoundError(LedgerStateError):
    pass
