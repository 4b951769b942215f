from .account import AccountAdmin
from .actions import close_selected_periods
from .auditlog import AuditLogAdmin
from .forms import UserAdminChangeForm, UserAdminCreationForm
from .inlines import JournalLineInline
from .journal import JournalAdmin
from .membership import MembershipAdmin, OrganizationAdmin, UserAdmin
from .mixins import TenantAdminMixin
from .period import PeriodAdmin
