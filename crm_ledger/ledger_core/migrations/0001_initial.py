import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="Organization",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=80, unique=True)),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "acc_organizations",
            },
        ),
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("username", models.CharField(error_messages={"unique": "A user with that username already exists."}, help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.", max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name="username")),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="email address")),
                ("is_staff", models.BooleanField(default=False, help_text="Designates whether the user can log into this admin site.", verbose_name="staff status")),
                ("is_active", models.BooleanField(default=True, help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.", verbose_name="active")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("groups", models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions")),
                ("default_organization", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="default_users", to="ledger_core.organization")),
            ],
            options={
                "verbose_name": "user",
                "verbose_name_plural": "users",
                "abstract": False,
                "indexes": [models.Index(fields=["default_organization"], name="user_default_org_idx")],
            },
            managers=[
                ("objects", django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=32)),
                ("name", models.CharField(max_length=200)),
                ("type", models.CharField(choices=[("asset", "Asset"), ("liability", "Liability"), ("equity", "Equity"), ("income", "Income"), ("expense", "Expense"), ("contra-asset", "Contra-asset"), ("contra-liability", "Contra-liability")], max_length=20)),
                ("is_postable", models.BooleanField(default=True)),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("tax_code", models.CharField(blank=True, max_length=20, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("org", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="accounts", to="ledger_core.organization")),
                ("parent", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="children", to="ledger_core.account")),
            ],
            options={
                "db_table": "acc_accounts",
                "ordering": ("code",),
                "indexes": [
                    models.Index(fields=["org", "type"], name="acc_account_org_type_idx"),
                    models.Index(fields=["org", "parent"], name="acc_account_org_parent_idx"),
                ],
                "constraints": [models.UniqueConstraint(fields=("org", "code"), name="uq_org_account_code")],
            },
        ),
        migrations.AddField(
            model_name="organization",
            name="retained_earnings_account",
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="ledger_core.account"),
        ),
        migrations.CreateModel(
            name="Membership",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=[("owner", "Owner"), ("admin", "Admin"), ("accountant", "Accountant"), ("viewer", "Viewer")], default="viewer", max_length=20)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("org", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="memberships", to="ledger_core.organization")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="memberships", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [models.Index(fields=["org", "user"], name="membership_org_user_idx")],
                "constraints": [models.UniqueConstraint(fields=("user", "org"), name="uq_user_org_membership")],
            },
        ),
        migrations.CreateModel(
            name="Period",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=50)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("status", models.CharField(choices=[("open", "Open"), ("closing", "Closing"), ("closed", "Closed")], default="open", max_length=10)),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("closed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("org", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="periods", to="ledger_core.organization")),
            ],
            options={
                "db_table": "acc_periods",
                "ordering": ("org", "start_date"),
                "indexes": [
                    models.Index(fields=["org", "start_date"], name="acc_period_org_start_idx"),
                    models.Index(fields=["org", "status"], name="acc_period_org_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("org", "code"), name="uq_org_period_code"),
                    models.CheckConstraint(condition=models.Q(("end_date__gte", models.F("start_date"))), name="chk_period_end_gte_start"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Journal",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("jdate", models.DateField()),
                ("source", models.CharField(default="Manual", max_length=50)),
                ("source_table", models.CharField(blank=True, max_length=63, null=True)),
                ("source_id", models.CharField(blank=True, max_length=64, null=True)),
                ("memo", models.TextField(blank=True, null=True)),
                ("posted", models.BooleanField(default=True)),
                ("posted_at", models.DateTimeField(blank=True, null=True)),
                ("is_closing", models.BooleanField(default=False)),
                ("idempotency_key", models.CharField(blank=True, max_length=100, null=True)),
                ("posting_fingerprint", models.CharField(blank=True, max_length=64, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
                ("org", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="journals", to="ledger_core.organization")),
                ("period", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="journals", to="ledger_core.period")),
            ],
            options={
                "db_table": "acc_journals",
                "indexes": [
                    models.Index(fields=["org", "jdate"], name="acc_journal_org_jdate_idx"),
                    models.Index(fields=["org", "period"], name="acc_journal_org_period_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("idempotency_key__isnull", False)), fields=("org", "idempotency_key"), name="uq_journal_org_idempotency_key"),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_no", models.PositiveIntegerField(default=1)),
                ("debit_cents", models.BigIntegerField(default=0)),
                ("credit_cents", models.BigIntegerField(default=0)),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("description", models.CharField(blank=True, max_length=400, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="lines", to="ledger_core.account")),
                ("journal", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="lines", to="ledger_core.journal")),
                ("org", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="ledger_core.organization")),
            ],
            options={
                "db_table": "acc_journal_lines",
                "ordering": ("journal_id", "line_no"),
                "indexes": [
                    models.Index(fields=["org", "account"], name="acc_jline_org_account_idx"),
                    models.Index(fields=["org", "journal"], name="acc_jline_org_journal_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("debit_cents__gte", 0), ("credit_cents__gte", 0)), name="jl_non_negative_amounts"),
                    models.CheckConstraint(condition=models.Q(models.Q(("credit_cents", 0), ("debit_cents", 0)), _negated=True), name="jl_debit_or_credit_nonzero"),
                    models.CheckConstraint(condition=models.Q(models.Q(("credit_cents__gt", 0), ("debit_cents__gt", 0)), _negated=True), name="jl_not_both_debit_and_credit"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(max_length=50)),
                ("object_type", models.CharField(max_length=100)),
                ("object_id", models.CharField(max_length=100)),
                ("changes", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("org", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="ledger_core.organization")),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "acc_audit_log",
                "indexes": [
                    models.Index(fields=["org", "user"], name="acc_audit_org_user_idx"),
                    models.Index(fields=["org", "created_at"], name="acc_audit_org_created_idx"),
                ],
            },
        ),
    ]
