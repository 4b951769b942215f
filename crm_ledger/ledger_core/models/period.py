from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from ..exceptions import InvalidPeriodStateError
from ..managers import OrgManager
from .organization import Organization

PERIOD_STATUS = [
    ("open", "Open"),  # accepts postings
    ("closing", "Closing"),  # close in progress, rejects postings
    ("closed", "Closed"),  # locked, terminal
]

# One-way lifecycle. No reopening
ALLOWED_TRANSITIONS = {
    "open": ["closing"],
    "closing": ["closed"],
    "closed": [],
}


# ---------- Period (accounting period) ----------
class Period(models.Model):  # Each Period is a time bucket transactions are grouped in

    # Every organization has its own independent calendar of periods
    org = models.ForeignKey(
        Organization,
        on_delete=models.PROTECT,
        related_name="periods",
    )
    """
        Tenant isolation:
        "Org A" can close July while "Org B" is still open.
    """

    # Human-readable label for the period
    code = models.CharField(max_length=50)  # Example: "2025-01" or "FY2025-Q3"

    # Exact date range of the period (both ends inclusive)
    start_date = models.DateField()
    end_date = models.DateField()

    status = models.CharField(max_length=10, choices=PERIOD_STATUS, default="open")
    """
        When status != "open":
            No new postings allowed.
            Prevents backdating transactions that could corrupt finalized reports.
    """

    closed_at = models.DateTimeField(null=True, blank=True)
    closed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL,
        related_name="+",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce tenant scoping
    objects = OrgManager()

    class Meta:
        db_table = "acc_periods"
        indexes = [
            models.Index(fields=["org", "start_date"], name="acc_period_org_start_idx"),
            models.Index(fields=["org", "status"], name="acc_period_org_status_idx"),
        ]
        constraints = [
            # Prevent duplicate period codes inside the same organization
            models.UniqueConstraint(fields=["org", "code"], name="uq_org_period_code"),
            models.CheckConstraint(
                condition=Q(end_date__gte=F("start_date")),
                name="chk_period_end_gte_start",
            ),
        ]
        ordering = ("org", "start_date")

    def __str__(self):
        return f"{self.code} [{self.status}]"  # Example: "2025-07 [open]"

    @property
    def is_open(self):
        return self.status == "open"

    def covers(self, day):
        return self.start_date <= day <= self.end_date

    def clean(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError("end_date must be on or after start_date")

        # A date must resolve to at most one period
        if self.org_id and self.start_date and self.end_date:
            overlapping = Period.objects.filter(
                org_id=self.org_id,
                start_date__lte=self.end_date,
                end_date__gte=self.start_date,
            )
            if self.pk:
                overlapping = overlapping.exclude(pk=self.pk)
            if overlapping.exists():
                raise ValidationError(
                    "Period overlaps an existing period of this organization."
                )

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)

    # Control status changes
    def transition_to(self, new_status, user=None):
        if new_status not in ALLOWED_TRANSITIONS.get(self.status, []):
            raise InvalidPeriodStateError(
                f"Period {self.code} cannot go from {self.status} to {new_status}",
                period_id=self.pk,
                status=self.status,
            )
        self.status = new_status
        update_fields = ["status", "updated_at"]
        if new_status == "closed":
            self.closed_at = timezone.now()
            self.closed_by = user
            update_fields += ["closed_at", "closed_by"]
        self.save(update_fields=update_fields)
