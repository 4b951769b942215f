from django.conf import settings  # To access global project settings
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import OrgManager
from .organization import Organization


# ---------- Audit / Event log ----------
class AuditLog(models.Model):  # Who did what to the ledger, and when
    org = models.ForeignKey(
        Organization,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )
    # Nullable for automated actions (celery task, management command)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL
    )
    action = models.CharField(max_length=50)  # post, close, create, update, delete
    object_type = models.CharField(max_length=100)  # "Journal", "Period", "Account"
    object_id = models.CharField(max_length=100)
    # before/after details, in JSON format
    changes = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = OrgManager()

    class Meta:
        db_table = "acc_audit_log"
        indexes = [
            models.Index(fields=["org", "user"], name="acc_audit_org_user_idx"),
            models.Index(fields=["org", "created_at"], name="acc_audit_org_created_idx"),
        ]

    def __str__(self):
        time = self.created_at
        return f"[{time:%Y-%m-%d %H:%M}] {self.user} {self.action} {self.object_type}({self.object_id})"

    def clean(self):
        # Ensure the user is a member of the organization being logged
        if self.user_id and self.org_id and not self.user.is_superuser:
            if not self.user.memberships.filter(org_id=self.org_id, is_active=True).exists():
                raise ValidationError("AuditLog.user must be a member of AuditLog.org")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Audit rows are append-only")
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
