from django.urls import path

from . import views

app_name = "ledger_core"

urlpatterns = [
    path("journals/", views.journals_view, name="journals"),
    path("journals/<int:journal_id>/", views.journal_detail_view, name="journal-detail"),
    path("periods/", views.periods_view, name="periods"),
    path("periods/<int:period_id>/close/", views.close_period_view, name="period-close"),
    path("periods/<str:period_code>/trial-balance.csv", views.trial_balance_csv_view, name="trial-balance-csv"),
    path("reports/", views.reports_view, name="reports"),
]
