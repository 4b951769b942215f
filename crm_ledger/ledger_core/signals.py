from django.core.exceptions import ValidationError
from django.db.models.signals import pre_delete
from django.dispatch import receiver

from .models import AuditLog, Membership

"""Audit rows are append-only: block deletion."""


# pre_delete signal auto-fires just before Django deletes a model instance,
# including deletes from the admin
@receiver(pre_delete, sender=AuditLog)
def prevent_delete_audit_log(sender, instance, **kwargs):
    raise ValidationError("Audit log rows cannot be deleted.")


"""Block deletion of an organization's owner membership."""


@receiver(pre_delete, sender=Membership)
def prevent_delete_owner_membership(sender, instance, **kwargs):
    if instance.role == "owner":
        raise ValidationError("The owner membership of an organization cannot be deleted.")
