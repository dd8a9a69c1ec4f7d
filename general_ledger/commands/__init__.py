from .init import add_parser as add_init_parser
from .period import add_parser as add_period_parser
from .account import add_parser as add_account_parser
from .entry import add_parser as add_entry_parser
from .line import add_parser as add_line_parser
from .voucher import add_parser as add_voucher_parser
from .balance import add_parser as add_balance_parser
from .bank import add_parser as add_bank_parser
from .export import add_parser as add_export_parser

__all__ = [
    "add_init_parser",
    "add_period_parser",
    "add_account_parser",
    "add_entry_parser",
    "add_line_parser",
    "add_voucher_parser",
    "add_balance_parser",
    "add_bank_parser",
    "add_export_parser",
]
