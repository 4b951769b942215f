from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import OrgManager


# ---------- Tenant / Organization ----------
class Organization(models.Model):

    """Tenant. Every ledger row is scoped by org."""
    name = models.CharField(max_length=200)

    slug = models.SlugField(  # A URL-friendly identifier
        max_length=80, unique=True  # no two organizations can share a slug
    )

    # Functional currency; accounts default to it
    currency = models.CharField(max_length=3, default="USD")

    # Equity account that receives the net result on period close.
    # When empty, settings.LEDGER_RETAINED_EARNINGS_CODE is looked up instead
    retained_earnings_account = models.ForeignKey(
        "Account",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "acc_organizations"

    def __str__(self):
        return self.name


# ---------- Custom User ----------
class User(AbstractUser):  # Inherits from Django's AbstractUser, so it keeps all the usual fields
    """
    Acting user of every ledger operation (recorded on journals,
    period closes and audit rows).
    settings.AUTH_USER_MODEL = "ledger_core.User"
    """
    default_organization = models.ForeignKey(
        "Organization",
        # Nullable, user might exist before being assigned an organization
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="default_users",
    )

    class Meta:
        indexes = [models.Index(fields=["default_organization"], name="user_default_org_idx")]

    def __str__(self):
        return self.get_full_name() or self.username


# ---------- Membership ----------
class Membership(models.Model):  # Bridge table between User and Organization

    ROLE_CHOICES = [
        ("owner", "Owner"),
        ("admin", "Admin"),
        ("accountant", "Accountant"),  # can post journals and close periods
        ("viewer", "Viewer"),  # read-only access
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    org = models.ForeignKey(
        Organization, on_delete=models.CASCADE, related_name="memberships"
    )
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="viewer")

    # Suspend access without deleting the record
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = OrgManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "org"], name="uq_user_org_membership"
            ),
        ]
        indexes = [
            models.Index(fields=["org", "user"], name="membership_org_user_idx"),
        ]

    def __str__(self):
        return f"{self.user} @ {self.org} ({self.role})"

    def clean(self):
        # An organization always keeps its owner
        if self.org_id and self.user_id and not self.is_active and self.role == "owner":
            raise ValidationError("The owner membership cannot be suspended.")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
