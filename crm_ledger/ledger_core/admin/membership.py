from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.utils.translation import gettext_lazy as _

from ..models import Account, Membership, Organization, User
from .forms import UserAdminChangeForm, UserAdminCreationForm
from .mixins import TenantAdminMixin


# Register `Organization` model in admin with this custom config
@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    """a clean admin table for browsing organizations"""

    list_display = ("id", "name", "slug", "currency", "retained_earnings_account", "created_at")
    search_fields = ("name", "slug")
    ordering = ("name",)

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        # Fetch all memberships and their users in bulk
        qs = qs.prefetch_related("memberships__user").select_related("retained_earnings_account")
        if request.user.is_superuser:
            return qs
        return qs.filter(memberships__user=request.user, memberships__is_active=True).distinct()

    # Only equity accounts of this organization can take the period result
    def formfield_for_foreignkey(self, db_field, request, **kwargs):
        if db_field.name == "retained_earnings_account":
            org_id = request.resolver_match.kwargs.get("object_id") if request.resolver_match else None
            qs = Account.objects.filter(type="equity", is_postable=True)
            kwargs["queryset"] = qs.filter(org_id=org_id) if org_id else qs.none()
        return super().formfield_for_foreignkey(db_field, request, **kwargs)


# Extend stock `DjangoUserAdmin`
@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    add_form = UserAdminCreationForm
    form = UserAdminChangeForm
    model = User

    list_display = (
        "username", "email", "get_full_name", "is_staff", "default_organization")
    list_filter = ("is_staff", "is_superuser", "is_active")
    search_fields = ("username", "email", "first_name", "last_name")
    ordering = ("username",)

    # Group fields logically on edit user page
    fieldsets = (
        (None, {"fields": ("username", "password")}),
        (_("Personal info"), {"fields": ("first_name", "last_name", "email")}),
        (_("Organization"), {"fields": ("default_organization",)}),
        (
            _("Permissions"),
            {
                "fields": (
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                ),
            },
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": (
                    "username",
                    "email",
                    "default_organization",
                    "password1",
                    "password2",
                ),
            },
        ),
    )

    # Tenant scoping:
    # limit visible users to memberships of the request.user's organizations
    def get_queryset(self, request):
        qs = super().get_queryset(request)
        if request.user.is_superuser:
            return qs
        allowed_org_ids = request.user.memberships.values_list("org_id", flat=True)
        # .distinct(): a user in several organizations appears once
        return qs.filter(memberships__org_id__in=allowed_org_ids).distinct()


# Register Membership model
@admin.register(Membership)
class MembershipAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("user", "org", "role", "is_active", "created_at")
    list_filter = ("role", "is_active", "org")
    search_fields = ("user__username", "user__email", "org__name")
    readonly_fields = ("created_at",)
    ordering = ("org__name", "user__username")

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("org", "user")

    def _managed_org_ids(self, request):
        # organizations where the current user is Owner/Admin
        return set(
            request.user.memberships.filter(
                role__in=("owner", "admin"), is_active=True
            ).values_list("org_id", flat=True)
        )

    def has_change_permission(self, request, obj=None):
        if request.user.is_superuser:
            return True
        managed = self._managed_org_ids(request)
        if obj is None:
            # change list view: Owner/Admin of at least one organization
            return bool(managed)
        return obj.org_id in managed

    def has_delete_permission(self, request, obj=None):
        # the owner membership is protected by a pre_delete signal
        if obj is not None and obj.role == "owner":
            return False
        return self.has_change_permission(request, obj)

    def has_add_permission(self, request):
        if request.user.is_superuser:
            return True
        return bool(self._managed_org_ids(request))
