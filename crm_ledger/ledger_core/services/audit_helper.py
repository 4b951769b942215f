from typing import Optional
from ..models import AuditLog, Organization

def log_action(
    *,
    action: str,
    instance,
    user=None,
    org: Optional[Organization] = None,
    changes: dict | None = None,
):
    """
    Central audit logger.
    Runs inside the caller's transaction, so an audited write and its
    audit row commit (or roll back) together.
    """

    if not org:
        org = getattr(instance, "org", None)

    AuditLog.objects.create(
        org=org,
        user=user,
        action=action,
        object_type=instance.__class__.__name__,
        object_id=str(instance.pk),
        changes=changes,
    )
