import calendar
import datetime

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone
from django.utils.text import slugify

from ledger_core.models import Account, Membership, Organization, Period
from ledger_core.services import create_account, create_period, post_journal

User = get_user_model()

# code, name, type, is_postable, parent code
DEMO_CHART = [
    ("1000", "Current Assets", "asset", False, None),
    ("1110", "Cash", "asset", True, "1000"),
    ("1130", "Accounts Receivable", "asset", True, "1000"),
    ("1590", "Accumulated Depreciation", "contra-asset", True, None),
    ("2100", "Accounts Payable", "liability", True, None),
    ("2200", "VAT Payable", "liability", True, None),
    ("3200", "Retained Earnings", "equity", True, None),
    ("4000", "Revenue", "income", True, None),
    ("5000", "Rent Expense", "expense", True, None),
]


class Command(BaseCommand):
    help = (
        "Create a demo tenant (organization), user, chart of accounts, "
        "current period and sample journals."
    )

    # Define command-line arguments
    def add_arguments(self, parser):
        parser.add_argument(
            "--org-name",
            default="Demo Company",
            help="Name of the demo organization to create.",
        )
        parser.add_argument(
            "--username", default="demo", help="Username for the demo user."
        )
        parser.add_argument(
            "--password", default="demo123", help="Password for the demo user."
        )

    def _unique_slug(self, name, max_tries=100):
        # "Test Ltd" -> "test-ltd" -> "test-ltd-1" -> ...
        base = slugify(name) or "org"
        slug = base
        for i in range(1, max_tries + 1):
            if not Organization.objects.filter(slug=slug).exists():
                return slug
            slug = f"{base}-{i}"
        raise CommandError("Couldn't generate unique slug")

    @transaction.atomic
    def handle(self, *args, **options):
        org_name = options["org_name"]
        username = options["username"]
        password = options["password"]

        # 1. Organization
        org = Organization.objects.filter(name=org_name).first()
        if org is None:
            org = Organization.objects.create(name=org_name, slug=self._unique_slug(org_name))
        self.stdout.write(self.style.SUCCESS(f"Organization: {org}"))

        # 2. User + owner membership
        user, created = User.objects.get_or_create(
            username=username, defaults={"email": f"{username}@example.com"}
        )
        if created:
            user.set_password(password)
        user.default_organization = org
        user.save()
        Membership.objects.get_or_create(user=user, org=org, defaults={"role": "owner"})
        self.stdout.write(self.style.SUCCESS(f"User: {user.username} (pw={password})"))

        # 3. Chart of accounts
        accounts = {a.code: a for a in Account.objects.for_org(org)}
        for code, name, ac_type, postable, parent_code in DEMO_CHART:
            if code in accounts:
                continue
            accounts[code] = create_account(
                org,
                user=user,
                code=code,
                name=name,
                type=ac_type,
                is_postable=postable,
                parent=accounts.get(parent_code),
                tax_code="VAT" if code == "2200" else None,
            )
        if org.retained_earnings_account_id is None:
            org.retained_earnings_account = accounts["3200"]
            org.save(update_fields=["retained_earnings_account"])
        self.stdout.write(self.style.SUCCESS(f"Chart of accounts: {len(accounts)} accounts"))

        # 4. Current month period
        today = timezone.localdate()
        period = Period.objects.for_org(org).filter(
            start_date__lte=today, end_date__gte=today
        ).first()
        if period is None:
            last_day = calendar.monthrange(today.year, today.month)[1]
            period = create_period(
                org,
                today.strftime("%Y-%m"),
                today.replace(day=1),
                datetime.date(today.year, today.month, last_day),
                user=user,
            )
        self.stdout.write(self.style.SUCCESS(f"Period: {period}"))

        # 5. Sample journals (idempotency keys make re-runs harmless)
        if period.is_open:
            samples = [
                ("Demo sale", "demo-sale", [
                    {"account_id": accounts["1110"].pk, "debit_cents": 11000},
                    {"account_id": accounts["4000"].pk, "credit_cents": 10000},
                    {"account_id": accounts["2200"].pk, "credit_cents": 1000},
                ]),
                ("Demo rent", "demo-rent", [
                    {"account_id": accounts["5000"].pk, "debit_cents": 4000},
                    {"account_id": accounts["1110"].pk, "credit_cents": 4000},
                ]),
            ]
            for memo, key, lines in samples:
                journal = post_journal(
                    org,
                    lines=lines,
                    jdate=period.start_date,
                    memo=memo,
                    user=user,
                    idempotency_key=f"{key}-{period.code}",
                )
                self.stdout.write(self.style.SUCCESS(f"Journal: {journal}"))
        else:
            self.stdout.write(self.style.WARNING(f"Period {period.code} is {period.status}; no sample journals"))
