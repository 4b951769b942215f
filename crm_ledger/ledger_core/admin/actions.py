from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from ..exceptions import LedgerError
from ..services.closing import close_period

# ---------- Admin actions ----------


@admin.action(description=_("Close selected periods"))
def close_selected_periods(modeladmin, request, queryset):
    """
    Run the period close for each selected period.
    Each close is its own transaction: one failure leaves the others closed.
    """
    closed = failures = 0
    for period in queryset.select_related("org").order_by("start_date"):
        try:
            result = close_period(period.org, period.pk, user=request.user)
        except LedgerError as exc:
            failures += 1
            modeladmin.message_user(
                request,
                _("Could not close %(code)s: %(err)s") % {"code": period.code, "err": exc},
                level=messages.ERROR,
            )
            continue
        closed += 1
        modeladmin.message_user(request, result.message)

    # Final summary message
    modeladmin.message_user(
        request,
        _("Closed %(closed)d period(s). %(failures)d failed.") % {
            "closed": closed,
            "failures": failures,
        },
        level=messages.SUCCESS if failures == 0 else messages.WARNING,
    )
