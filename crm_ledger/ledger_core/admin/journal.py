from django.contrib import admin
from django.utils.html import format_html

from ..models import Journal
from .inlines import JournalLineInline
from .mixins import TenantAdminMixin
from .ReadOnly import ReadOnlyAdmin


# Register `Journal` model
@admin.register(Journal)
class JournalAdmin(TenantAdminMixin, ReadOnlyAdmin):
    """Journals are posted through the API; admin only shows them."""

    list_display = (
        "id",
        "org",
        "jdate",
        "period",
        "source",
        "memo",
        "is_closing",
        "created_by",
        "balanced",
    )
    list_filter = ("org", "source", "is_closing", "period")
    search_fields = ("memo", "source", "id")
    date_hierarchy = "jdate"
    inlines = [JournalLineInline]

    # Fetch everything in one SQL join
    def get_queryset(self, request):
        return super().get_queryset(request).select_related("org", "period", "created_by")

    """ Computed column for balance check """
    @admin.display(description="Debits / Credits")
    def balanced(self, obj):
        d, c = obj.compute_totals()
        # format: bold debits / small credits
        return format_html("<b>{}</b> / <small>{}</small>", d, c)
