import json
import logging
from dataclasses import asdict
from functools import wraps

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from .exceptions import JournalNotFoundError, LedgerError, LedgerValidationError
from .services import (close_period, create_period, generate_report,
                       journal_detail, list_journals, list_periods,
                       post_journal_json, trial_balance, trial_balance_to_csv)

logger = logging.getLogger(__name__)

# LedgerError.kind -> HTTP status
STATUS_BY_KIND = {
    "validation": 400,
    "state_conflict": 409,
}


def _fail(kind, error, status, **extra):
    return JsonResponse({"success": False, "kind": kind, "error": error, **extra}, status=status)


def _request_data(request):
    if request.method == "GET":
        return request.GET.dict()
    if request.content_type != "application/json":
        # form posts (or a bare POST with no body) carry no JSON payload
        return request.POST.dict()
    if not request.body:
        return {}
    data = json.loads(request.body)
    if not isinstance(data, dict):
        raise ValueError("JSON object expected")
    return data


def ledger_api(view):
    """
    Resolve the tenant, parse the JSON body and turn ledger errors
    into {success: false, kind, error} responses.
    """

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        org = getattr(request, "org", None)
        if org is None:
            return _fail("forbidden", "No active organization for this user", 403)
        try:
            data = _request_data(request)
        except ValueError:
            return _fail("validation", "Request body must be a JSON object", 400)

        # An explicit org_id must match the organization of the session
        org_id = data.pop("org_id", None)
        if org_id is not None and str(org_id) != str(org.pk):
            return _fail("forbidden", "Organization mismatch", 403)

        try:
            return view(request, org, data, *args, **kwargs)
        except JournalNotFoundError as e:
            return JsonResponse({"success": False, **e.as_dict()}, status=404)
        except LedgerError as e:
            return JsonResponse({"success": False, **e.as_dict()}, status=STATUS_BY_KIND[e.kind])
        except ValidationError as e:
            return _fail("validation", "; ".join(e.messages), 400)
        except DatabaseError:
            # The write may or may not have happened: callers retry with an idempotency key
            logger.exception("Database error in %s for org %s", view.__name__, org.pk)
            return _fail("infrastructure", "Database unavailable, please retry", 503)

    return wrapper


def _period_dict(period):
    return {
        "id": period.pk,
        "code": period.code,
        "start_date": period.start_date,
        "end_date": period.end_date,
        "status": period.status,
        "closed_at": period.closed_at,
    }


def _limit(value, default):
    if value in (None, ""):
        return default
    try:
        limit = int(value)
    except (TypeError, ValueError):
        raise LedgerValidationError(f"limit must be a positive integer, got {value!r}")
    if limit < 1:
        raise LedgerValidationError(f"limit must be a positive integer, got {value!r}")
    return limit


def _acting_user(request):
    return request.user if request.user.is_authenticated else None


# ---------- Journals ----------
@require_http_methods(["GET", "POST"])
@ledger_api
def journals_view(request, org, data):
    if request.method == "GET":
        journals = list_journals(org, limit=_limit(data.get("limit"), default=100))
        return JsonResponse({
            "success": True,
            "journals": [
                {
                    "id": j.pk,
                    "jdate": j.jdate,
                    "period": j.period.code,
                    "source": j.source,
                    "memo": j.memo,
                    "is_closing": j.is_closing,
                }
                for j in journals
            ],
        })

    source_ref = None
    if data.get("source_table"):
        source_ref = (data["source_table"], data.get("source_id"))
    journal = post_journal_json(
        org,
        lines_json=data.get("lines"),
        jdate=data.get("date") or data.get("jdate"),
        period_code=data.get("period_code"),
        source=data.get("source") or "Manual",
        source_ref=source_ref,
        memo=data.get("memo"),
        user=_acting_user(request),
        idempotency_key=data.get("idempotency_key") or request.headers.get("Idempotency-Key"),
    )
    return JsonResponse({"success": True, "journal_id": journal.pk}, status=201)


@require_http_methods(["GET"])
@ledger_api
def journal_detail_view(request, org, data, journal_id):
    return JsonResponse({"success": True, "journal": asdict(journal_detail(org, journal_id))})


# ---------- Periods ----------
@require_http_methods(["GET", "POST"])
@ledger_api
def periods_view(request, org, data):
    if request.method == "GET":
        return JsonResponse({"success": True, "periods": [_period_dict(p) for p in list_periods(org)]})

    period = create_period(
        org,
        data.get("code"),
        data.get("start_date"),
        data.get("end_date"),
        user=_acting_user(request),
    )
    return JsonResponse({"success": True, "period": _period_dict(period)}, status=201)


@require_http_methods(["POST"])
@ledger_api
def close_period_view(request, org, data, period_id):
    result = close_period(org, period_id, user=_acting_user(request))
    return JsonResponse({
        "success": True,
        "message": result.message,
        "journal_id": result.journal_id,
        "period": asdict(result),
    })


# ---------- Reports ----------
@require_http_methods(["POST"])
@ledger_api
def reports_view(request, org, data):
    report = generate_report(
        org,
        report_type=data.get("report_type") or "all",
        period_code=data.get("period_code"),
        start_date=data.get("start_date"),
        end_date=data.get("end_date"),
    )
    return JsonResponse({"success": True, **report})


@require_http_methods(["GET"])
@ledger_api
def trial_balance_csv_view(request, org, data, period_code):
    content = trial_balance_to_csv(trial_balance(org, period_code))
    response = HttpResponse(content, content_type="text/csv")
    response["Content-Disposition"] = f'attachment; filename="trial_balance_{period_code}.csv"'
    return response
