from django.utils.deprecation import MiddlewareMixin
from .models import Organization


class CurrentOrganizationMiddleware(MiddlewareMixin):
    # Run on every request and
    # attach a .org attribute to the request, based on the logged-in user
    def process_request(self, request):
        if not request.user.is_authenticated:
            # Unauthenticated users have no ledger
            request.org = None
            return

        # Default organization fallback: if the user didn't choose one
        request.org = getattr(request.user, "default_organization", None)

        # If the user switched organizations,
        # the choice is stored in the session as "active_org_id"
        org_id = request.session.get("active_org_id")
        if org_id:
            try:
                # the user must hold an active membership in that organization
                request.org = Organization.objects.get(
                    id=org_id,
                    memberships__user=request.user,
                    memberships__is_active=True,
                )
            except Organization.DoesNotExist:
                # a tampered session never "jumps" into another organization
                request.org = None
