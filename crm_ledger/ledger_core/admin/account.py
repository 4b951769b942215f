from django.contrib import admin

from ..models import Account
from ..services.chart import has_lines
from .mixins import TenantAdminMixin


# Register `Account` model
@admin.register(Account)
class AccountAdmin(TenantAdminMixin, admin.ModelAdmin):
    # show key accounting fields
    list_display = (
        "id",
        "org",
        "code",
        "name",
        "type",
        "normal_balance",
        "parent",
        "is_postable",
        "currency",
        "tax_code",
    )
    list_filter = ("org", "type", "is_postable")
    search_fields = ("code", "name")
    # accounts grouped by organization, then sorted by code
    ordering = ("org", "code")
    fields = ("org", "code", "name", "type", "is_postable", "parent", "currency", "tax_code")

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("org", "parent")

    # Accounts with posted lines keep their type, postability and currency
    def get_readonly_fields(self, request, obj=None):
        if obj is not None and has_lines(obj):
            return ("org", "type", "is_postable", "currency")
        return ()

    # and can never be deleted
    def has_delete_permission(self, request, obj=None):
        if obj is not None and (has_lines(obj) or obj.children.exists()):
            return False
        return super().has_delete_permission(request, obj)
