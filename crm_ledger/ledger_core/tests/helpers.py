import datetime

from ledger_core.models import Account, Organization, Period

# code, name, type, is_postable, parent code, tax code
CHART = [
    ("1000", "Current Assets", "asset", False, None, None),
    ("1110", "Cash", "asset", True, "1000", None),
    ("1130", "Accounts Receivable", "asset", True, "1000", None),
    ("1590", "Accumulated Depreciation", "contra-asset", True, None, None),
    ("2100", "Accounts Payable", "liability", True, None, None),
    ("2200", "VAT Payable", "liability", True, None, "VAT20"),
    ("2900", "Bond Discount", "contra-liability", True, None, None),
    ("3100", "Owner Capital", "equity", True, None, None),
    ("3200", "Retained Earnings", "equity", True, None, None),
    ("4000", "Revenue", "income", True, None, None),
    ("5000", "Rent Expense", "expense", True, None, None),
    ("5100", "Depreciation Expense", "expense", True, None, None),
]


def make_org(name="Test Co", slug="test-co", currency="USD"):
    return Organization.objects.create(name=name, slug=slug, currency=currency)


def make_chart(org):
    """Accounts keyed by code."""
    accounts = {}
    for code, name, ac_type, postable, parent, tax_code in CHART:
        accounts[code] = Account.objects.create(
            org=org,
            code=code,
            name=name,
            type=ac_type,
            is_postable=postable,
            parent=accounts.get(parent),
            currency=org.currency,
            tax_code=tax_code,
        )
    return accounts


def make_period(org, code="2025-09", start=datetime.date(2025, 9, 1), end=datetime.date(2025, 9, 30)):
    return Period.objects.create(org=org, code=code, start_date=start, end_date=end)


def dr(account, cents, description=None):
    return {"account_id": account.pk, "debit_cents": cents, "credit_cents": 0, "description": description}


def cr(account, cents, description=None):
    return {"account_id": account.pk, "debit_cents": 0, "credit_cents": cents, "description": description}
