import logging

from django.db import transaction

from ..exceptions import AccountInUseError, InvalidAccountError
from ..models import Account, JournalLine
from .audit_helper import log_action
from .validation import validate_account

logger = logging.getLogger(__name__)

ACCOUNT_FIELDS = ("code", "name", "type", "is_postable", "parent", "parent_id", "currency", "tax_code")
# Changing these would rewrite the meaning of lines already posted
LOCKED_WHEN_USED = ("type", "is_postable", "currency")


def _get_account(org, account_id):
    try:
        return Account.objects.for_org(org).get(pk=account_id)
    except Account.DoesNotExist:
        raise InvalidAccountError(f"Account {account_id} does not exist", account_id=account_id)


def _check_fields(fields):
    unknown = set(fields) - set(ACCOUNT_FIELDS)
    if unknown:
        raise InvalidAccountError(f"Unknown account fields: {', '.join(sorted(unknown))}")


def _resolve_parent(org, fields):
    # Accept either a parent instance or a parent_id
    parent_id = fields.pop("parent_id", None)
    if parent_id is not None and fields.get("parent") is None:
        fields["parent"] = _get_account(org, parent_id)
    return fields


def has_lines(account):
    return JournalLine.objects.filter(account=account).exists()


def list_accounts(org):
    return list(Account.objects.for_org(org).order_by("code"))


def create_account(org, user=None, **fields):
    _check_fields(fields)
    fields = _resolve_parent(org, dict(fields))
    fields.setdefault("currency", org.currency)
    account = Account(org=org, **fields)
    validate_account(account, parent=fields.get("parent"))

    with transaction.atomic():
        account.save()
        log_action(
            action="create",
            instance=account,
            user=user,
            org=org,
            changes={"code": account.code, "name": account.name, "type": account.type},
        )
    logger.info("Created account %s (%s) for org %s", account.code, account.type, org.pk)
    return account


def update_account(org, account_id, user=None, **changes):
    _check_fields(changes)
    changes = _resolve_parent(org, dict(changes))

    with transaction.atomic():
        account = _get_account(org, account_id)
        if has_lines(account):
            locked = [
                name for name in LOCKED_WHEN_USED
                if name in changes and changes[name] != getattr(account, name)
            ]
            if locked:
                raise AccountInUseError(
                    f"Account {account.code} has journal lines; {', '.join(locked)} cannot change",
                    account_id=account.pk,
                )

        before = {name: getattr(account, name) for name in changes if name != "parent"}
        for name, value in changes.items():
            setattr(account, name, value)
        validate_account(account)
        # Only leaf accounts are postable
        if account.is_postable and account.children.exists():
            raise InvalidAccountError(
                f"Account {account.code} has sub-accounts and cannot be postable",
                account_id=account.pk,
            )
        account.save()
        log_action(
            action="update",
            instance=account,
            user=user,
            org=org,
            changes={
                name: {"from": before[name], "to": getattr(account, name)}
                for name in before
                if before[name] != getattr(account, name)
            },
        )
    logger.info("Updated account %s for org %s", account.code, org.pk)
    return account


def delete_account(org, account_id, user=None):
    """Unused leaf accounts only. Used accounts stay for the audit trail."""
    with transaction.atomic():
        account = _get_account(org, account_id)
        if has_lines(account):
            raise AccountInUseError(
                f"Account {account.code} is used in journal lines and cannot be deleted",
                account_id=account.pk,
            )
        if account.children.exists():
            raise AccountInUseError(
                f"Account {account.code} has sub-accounts and cannot be deleted",
                account_id=account.pk,
            )
        code = account.code
        log_action(action="delete", instance=account, user=user, org=org, changes={"code": code})
        account.delete()
    logger.info("Deleted account %s for org %s", code, org.pk)
