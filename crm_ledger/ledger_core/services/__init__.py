from .chart import create_account, delete_account, list_accounts, update_account
from .closing import CloseResult, close_period
from .export import parse_trial_balance_csv, trial_balance_to_csv
from .journals import journal_detail, list_journals
from .periods import create_period, get_period, list_periods, resolve_period
from .posting import post_journal, post_journal_json
from .reports import (balance_sheet, general_ledger, generate_report,
                      profit_and_loss, trial_balance, vat_summary)
from .validation import validate_account, validate_journal_line
