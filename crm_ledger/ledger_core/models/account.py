from django.core.exceptions import ValidationError
from django.db import models
from ..managers import OrgManager
from .organization import Organization

# Choice Lists
AC_TYPES = [
    # Used in Account model to classify general ledger accounts
    ("asset", "Asset"),
    ("liability", "Liability"),
    ("equity", "Equity"),
    ("income", "Income"),
    ("expense", "Expense"),
    ("contra-asset", "Contra-asset"),  # e.g. accumulated depreciation
    ("contra-liability", "Contra-liability"),  # e.g. discount on bonds payable
]
ACCOUNT_TYPES = frozenset(code for code, _ in AC_TYPES)

# Whether the account normally increases on the debit side or credit side.
# Assets/Expenses -> Debit, Liabilities/Equity/Income -> Credit,
# contra accounts carry the opposite of the account they offset.
NORMAL_BALANCE = {
    "asset": "debit",
    "expense": "debit",
    "contra-liability": "debit",
    "liability": "credit",
    "equity": "credit",
    "income": "credit",
    "contra-asset": "credit",
}

# Balance sheet vs P&L grouping
BALANCE_SHEET_TYPES = ("asset", "contra-asset", "liability", "contra-liability", "equity")
PROFIT_LOSS_TYPES = ("income", "expense")


def signed_balance(ac_type, debit_cents, credit_cents):
    """Net balance of an account, positive on its normal side."""
    if NORMAL_BALANCE.get(ac_type) == "credit":
        return credit_cents - debit_cents
    return debit_cents - credit_cents


class Account(models.Model):
    """
    Ledger account in the Chart of Accounts.
    - code is unique per organization
    - type: determines reporting - BS vs P&L - and the sign of balances
    - is_postable: only leaf accounts receive journal lines
    """

    org = models.ForeignKey(  # Each account belongs to one organization
        Organization,  # All reports must filter by org to prevent data leaks
        on_delete=models.CASCADE,
        related_name="accounts",
    )
    # Codes sort/group accounts consistently in reports
    code = models.CharField(max_length=32)
    name = models.CharField(max_length=200)  # "Cash on Hand", "Accounts Payable"

    type = models.CharField(max_length=20, choices=AC_TYPES)

    # Header (grouping) accounts are not postable
    is_postable = models.BooleanField(default=True)

    # Optional hierarchy:
    # (e.g. 1000 Cash (header), 1001 Petty Cash, 1002 Bank Account)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.PROTECT,  # can't delete a parent while children exist
        related_name="children",
    )

    currency = models.CharField(max_length=3, default="USD")
    tax_code = models.CharField(max_length=20, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce tenant scoping
    objects = OrgManager()

    class Meta:
        db_table = "acc_accounts"
        ordering = ("code",)
        indexes = [
            # For reports grouped by type (Trial Balance, P&L, Balance Sheet)
            models.Index(fields=["org", "type"], name="acc_account_org_type_idx"),
            models.Index(fields=["org", "parent"], name="acc_account_org_parent_idx"),
        ]
        # Codes repeat across organizations but must be unique within one
        constraints = [
            models.UniqueConstraint(
                fields=["org", "code"], name="uq_org_account_code"
            )
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"

    @property
    def normal_balance(self):
        return NORMAL_BALANCE.get(self.type)

    def balance_of(self, debit_cents, credit_cents):
        return signed_balance(self.type, debit_cents, credit_cents)

    def clean(self):
        """Enforce org consistency (multi-tenancy)"""
        if self.parent_id and self.parent.org_id != self.org_id:
            raise ValidationError(
                "Parent & child accounts must belong to the same organization"
            )

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
