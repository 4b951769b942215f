from .account import Account
from .auditlog import AuditLog
from .journal import Journal, JournalLine
from .organization import Membership, Organization, User
from .period import Period
