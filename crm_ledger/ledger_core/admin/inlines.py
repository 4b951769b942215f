from django.contrib import admin

from ..models import JournalLine

# ---------- Inline admin classes ----------


class JournalLineInline(admin.TabularInline):
    """Show JournalLine rows on the Journal page (read-only)"""

    model = JournalLine
    extra = 0  # don't show "empty" rows
    fields = ("line_no", "account", "description", "debit_cents", "credit_cents", "currency")
    # lines are written by the posting engine only
    readonly_fields = fields
    ordering = ("line_no",)
    can_delete = False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("account")

    def has_add_permission(self, request, obj=None):
        return False
