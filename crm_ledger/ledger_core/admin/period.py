from django.contrib import admin

from ..models import Period
from .actions import close_selected_periods
from .mixins import TenantAdminMixin


# Register `Period` model
@admin.register(Period)
class PeriodAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = (
        "id", "org", "code", "start_date", "end_date", "status", "closed_at", "closed_by")
    list_filter = ("org", "status")
    search_fields = ("code",)
    ordering = ("org", "-start_date")
    # status only moves through the close action
    readonly_fields = ("status", "closed_at", "closed_by")
    actions = [close_selected_periods]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("org", "closed_by")

    # a closed period is frozen
    def get_readonly_fields(self, request, obj=None):
        if obj is not None and obj.status != "open":
            return ("org", "code", "start_date", "end_date") + self.readonly_fields
        return self.readonly_fields

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.journals.exists():
            return False
        return super().has_delete_permission(request, obj)
