from .balance import AccountBalance
from .bank import BankTransaction
from .entry import LedgerEntry
from .line import LedgerLine
from .period import FiscalPeriod
from .voucher import Voucher, VoucherLine

__all__ = [
    "AccountBalance",
    "BankTransaction",
    "FiscalPeriod",
    "LedgerEntry",
    "LedgerLine",
    "Voucher",
    "VoucherLine",
]
