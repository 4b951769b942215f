from django.contrib import admin

from ..models import AuditLog
from .mixins import TenantAdminMixin
from .ReadOnly import ReadOnlyAdmin


# Register `AuditLog` model
@admin.register(AuditLog)
class AuditLogAdmin(TenantAdminMixin, ReadOnlyAdmin):
    list_display = (
        "id",
        "org",
        "user",
        "action",
        "object_type",
        "object_id",
        "created_at",
    )
    search_fields = ("object_type", "object_id", "user__username")
    list_filter = ("org", "action", "object_type", "created_at")

    # Fetch everything in one SQL join
    def get_queryset(self, request):
        return super().get_queryset(request).select_related("org", "user")
