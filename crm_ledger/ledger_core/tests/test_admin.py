import datetime

import pytest
from django.urls import reverse

from ledger_core.models import Journal, Membership, Period
from ledger_core.services import post_journal

from .helpers import cr, dr, make_chart, make_org, make_period


@pytest.fixture
def ledger(db):
    org = make_org()
    accounts = make_chart(org)
    period = make_period(org)
    post_journal(
        org,
        lines=[dr(accounts["1110"], 1000), cr(accounts["4000"], 1000)],
        jdate=datetime.date(2025, 9, 2),
        memo="Sale",
    )
    return org, accounts, period


@pytest.mark.parametrize(
    "model",
    ["organization", "user", "membership", "account", "period", "journal", "auditlog"],
)
def test_changelists_render(admin_client, ledger, model):
    response = admin_client.get(reverse(f"admin:ledger_core_{model}_changelist"))
    assert response.status_code == 200


def test_journal_change_page_is_read_only(admin_client, ledger):
    journal = Journal.objects.get()
    response = admin_client.get(reverse("admin:ledger_core_journal_change", args=[journal.pk]))
    assert response.status_code == 200
    assert "Sale" in response.content.decode()


def test_close_selected_periods_action(admin_client, ledger):
    org, accounts, period = ledger
    response = admin_client.post(
        reverse("admin:ledger_core_period_changelist"),
        {"action": "close_selected_periods", "_selected_action": [period.pk]},
        follow=True,
    )
    assert response.status_code == 200
    period.refresh_from_db()
    assert period.status == "closed"
    assert Journal.objects.filter(is_closing=True).count() == 1


def test_close_action_reports_failures(admin_client, ledger):
    org, accounts, period = ledger
    period.transition_to("closing")
    response = admin_client.post(
        reverse("admin:ledger_core_period_changelist"),
        {"action": "close_selected_periods", "_selected_action": [period.pk]},
        follow=True,
    )
    messages = [str(m) for m in response.context["messages"]]
    assert any("Could not close 2025-09" in m for m in messages)
    assert Period.objects.get(pk=period.pk).status == "closing"


def test_owner_membership_delete_page_is_forbidden(admin_client, ledger, django_user_model):
    org, accounts, period = ledger
    owner = Membership.objects.create(
        user=django_user_model.objects.create_user(username="owner", password="pw"), org=org, role="owner"
    )
    response = admin_client.get(reverse("admin:ledger_core_membership_delete", args=[owner.pk]))
    assert response.status_code == 403
    assert Membership.objects.filter(pk=owner.pk).exists()
