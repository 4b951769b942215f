import pytest
from django.core.exceptions import ValidationError
from django.db import transaction

from ledger_core.models import AuditLog, Membership
from ledger_core.services.audit_helper import log_action

from .helpers import make_org


@pytest.mark.django_db
def test_audit_log_rows_cannot_be_deleted():
    org = make_org()
    log_action(org=org, action="create", instance=org)
    # the blocked delete rolls back its own savepoint, not the test transaction
    with pytest.raises(ValidationError):
        with transaction.atomic():
            AuditLog.objects.get().delete()
    assert AuditLog.objects.count() == 1


@pytest.mark.django_db
def test_owner_membership_is_protected(django_user_model):
    org = make_org()
    user = django_user_model.objects.create_user(username="owner", password="pw")
    owner = Membership.objects.create(user=user, org=org, role="owner")
    viewer = Membership.objects.create(
        user=django_user_model.objects.create_user(username="viewer", password="pw"), org=org, role="viewer"
    )

    with pytest.raises(ValidationError):
        with transaction.atomic():
            owner.delete()
    viewer.delete()
    assert list(Membership.objects.values_list("role", flat=True)) == ["owner"]
