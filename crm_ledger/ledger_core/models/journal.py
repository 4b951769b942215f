from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from ..exceptions import InvalidAccountError, PeriodClosedError
from ..managers import JournalLineManager, OrgManager
from .account import Account
from .organization import Organization
from .period import Period


# ---------- Journal (Header) & JournalLine ----------
class Journal(models.Model):  # Represents one accounting transaction (a posting event)
    # Multi-tenant: every journal belongs to an organization
    org = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="journals")
    period = models.ForeignKey(
        Period,
        on_delete=models.PROTECT,  # Prevent breaking historical ledger
        related_name="journals",
    )
    # Transaction date; must fall inside `period`
    jdate = models.DateField()

    # Free-text origin tag ("Manual", "Invoice", "Closing")
    source = models.CharField(max_length=50, default="Manual")
    # optional polymorphic back-reference to the originating business object
    source_table = models.CharField(max_length=63, null=True, blank=True)
    source_id = models.CharField(max_length=64, null=True, blank=True)
    memo = models.TextField(null=True, blank=True)

    posted = models.BooleanField(default=True)
    posted_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL
    )

    # Generated by period close; excluded from profit & loss
    is_closing = models.BooleanField(default=False)

    # Client supplied token, safe to resubmit the same post
    idempotency_key = models.CharField(max_length=100, null=True, blank=True)
    # sha256 of the submitted payload, compared on replay
    posting_fingerprint = models.CharField(max_length=64, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = OrgManager()

    class Meta:
        db_table = "acc_journals"
        indexes = [
            models.Index(fields=["org", "jdate"], name="acc_journal_org_jdate_idx"),
            models.Index(fields=["org", "period"], name="acc_journal_org_period_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["org", "idempotency_key"],
                condition=Q(idempotency_key__isnull=False),
                name="uq_journal_org_idempotency_key",
            ),
        ]

    def __str__(self):
        return f"J {self.pk} {self.jdate} [{self.source}]"

    # Aggregate all debit and credit amounts across the journal's lines
    def compute_totals(self):
        """Return debits, credits sums for lines"""
        aggs = self.lines.aggregate(
            total_debit=models.Sum("debit_cents"),
            total_credit=models.Sum("credit_cents"),
        )
        return aggs["total_debit"] or 0, aggs["total_credit"] or 0

    # True if double-entry rule holds: total debits = total credits
    def is_balanced(self):
        debit, credit = self.compute_totals()
        return debit == credit

    def clean(self):
        if self.period_id and self.period.org_id != self.org_id:
            raise ValidationError("Period must belong to the same organization as journal")

        if self.period_id and not self.period.covers(self.jdate):
            raise ValidationError(
                f"Journal date {self.jdate} falls outside period {self.period.code}"
            )

        """ Don't allow journals in closed periods """
        # closing entries are written while the period is in "closing"
        if self.period_id and not self.period.is_open and not (
            self.is_closing and self.period.status == "closing"
        ):
            raise PeriodClosedError(
                f"Period {self.period.code} is {self.period.status}",
                period_id=self.period_id,
            )

    def save(self, *args, **kwargs):
        if not self._state.adding:  # Does this row already exist in DB?
            # Append-only ledger: corrections are new offsetting journals
            raise ValidationError("Journals are immutable once posted")
        # idempotency_key uniqueness is left to the database constraint
        self.full_clean(validate_constraints=False)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Journals are immutable and cannot be deleted")


class JournalLine(models.Model):  # Stores Lines ( credits / debits )
    """
    Each line belongs to a journal and to a postable GL account.
    Exactly one of debit_cents / credit_cents is positive.
    """

    org = models.ForeignKey(Organization, on_delete=models.CASCADE)
    journal = models.ForeignKey(
        Journal,
        on_delete=models.CASCADE,
        related_name="lines",
    )

    # Must point to one Account (can't delete account if lines exist -> PROTECT)
    account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name="lines")

    # Position of the line in the submitted entry
    line_no = models.PositiveIntegerField(default=1)

    # Integer minor units (cents). No floats on money
    debit_cents = models.BigIntegerField(default=0)
    credit_cents = models.BigIntegerField(default=0)
    currency = models.CharField(max_length=3, default="USD")

    description = models.CharField(max_length=400, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    # Custom manager (tenant scoping + posted/period helpers)
    objects = JournalLineManager()

    class Meta:
        db_table = "acc_journal_lines"
        ordering = ("journal_id", "line_no")
        indexes = [
            models.Index(fields=["org", "account"], name="acc_jline_org_account_idx"),
            models.Index(fields=["org", "journal"], name="acc_jline_org_journal_idx"),
        ]
        # Same rules as the Python validation, enforced by the database
        constraints = [
            models.CheckConstraint(
                condition=Q(debit_cents__gte=0) & Q(credit_cents__gte=0),
                name="jl_non_negative_amounts",
            ),
            models.CheckConstraint(
                condition=~(Q(debit_cents=0) & Q(credit_cents=0)),
                name="jl_debit_or_credit_nonzero",
            ),
            models.CheckConstraint(
                condition=~(Q(debit_cents__gt=0) & Q(credit_cents__gt=0)),
                name="jl_not_both_debit_and_credit",
            ),
        ]

    def __str__(self):
        return f"{self.journal_id} | {self.account.code} | D:{self.debit_cents} C:{self.credit_cents}"

    def clean(self):
        from ..services.validation import validate_journal_line

        validate_journal_line(self)

        if self.account_id:
            if self.account.org_id != self.org_id:
                raise InvalidAccountError(
                    "JournalLine.account must belong to the same organization.",
                    account_id=self.account_id,
                )
            if not self.account.is_postable:
                raise InvalidAccountError(
                    f"Account {self.account.code} is a header account and cannot be posted to",
                    account_id=self.account_id,
                )

        # Every line must belong to same org as its parent journal
        if self.journal_id and self.org_id != self.journal.org_id:
            raise ValidationError("JournalLine.org must equal Journal.org")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Journal lines are immutable once posted")
        # If org not set but journal is known, copy it from the journal
        if not self.org_id and self.journal_id:
            self.org_id = self.journal.org_id
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Journal lines are immutable and cannot be deleted")
