from .connection import LedgerConnection, atomic, get_db
from .schema import init_db
from .migrations import run_migrations

__all__ = ["LedgerConnection", "atomic", "get_db", "init_db", "run_migrations"]
