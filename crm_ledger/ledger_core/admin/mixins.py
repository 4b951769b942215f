class TenantAdminMixin:
    """
    Enforce tenant isolation in Django admin.
    Uses request.org (set by CurrentOrganizationMiddleware)
    or falls back to request.user.default_organization.
    """

    def _get_request_org(self, request):
        # prefer request.org (middleware)
        org = getattr(request, "org", None)
        if org is None:
            user = getattr(request, "user", None)
            org = getattr(user, "default_organization", None)
        return org

    def get_queryset(self, request):
        qs = super().get_queryset(request)

        # If superuser, show everything;
        # otherwise restrict to the organization if available
        if request.user.is_superuser:
            return qs
        org = self._get_request_org(request)
        if org is None:
            return qs.none()
        return qs.filter(org=org)

    def formfield_for_foreignkey(self, db_field, request, **kwargs):
        """
        Restrict foreignkey dropdowns to the current organization:
        the org field itself, and any org-scoped model (account, period).
        """
        if not request.user.is_superuser:
            org = self._get_request_org(request)
            rel_model = db_field.related_model
            if db_field.name == "org":
                kwargs["queryset"] = rel_model.objects.filter(pk=org.pk) if org else rel_model.objects.none()
            elif any(f.name == "org" for f in rel_model._meta.fields):
                kwargs["queryset"] = rel_model.objects.filter(org=org) if org else rel_model.objects.none()
        return super().formfield_for_foreignkey(db_field, request, **kwargs)

    def save_model(self, request, obj, form, change):
        # Ensure object is always owned by the organization on save (unless superuser)
        if not request.user.is_superuser:
            org = self._get_request_org(request)
            if org is not None:
                obj.org = org
        super().save_model(request, obj, form, change)
