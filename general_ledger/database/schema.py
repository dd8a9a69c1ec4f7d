#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Database schema for the general ledger."""

from __future__ import annotations

import sqlite3


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS fiscal_years (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  year_number INTEGER NOT NULL UNIQUE,
  name TEXT NOT NULL,
  start_date TEXT NOT NULL,
  end_date TEXT NOT NULL,
  is_closed INTEGER NOT NULL DEFAULT 0,
  status TEXT NOT NULL DEFAULT 'active',
  created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS fiscal_periods (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  fiscal_year_id INTEGER,
  name TEXT NOT NULL,
  start_date TEXT NOT NULL,
  end_date TEXT NOT NULL,
  status TEXT NOT NULL DEFAULT 'open',
  is_closed INTEGER NOT NULL DEFAULT 0,
  closed_at TEXT,
  closed_by INTEGER,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (fiscal_year_id) REFERENCES fiscal_years(id)
);

CREATE INDEX IF NOT EXISTS idx_fiscal_periods_dates ON fiscal_periods(start_date, end_date);

CREATE TABLE IF NOT EXISTS accounts (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  code TEXT NOT NULL UNIQUE,
  name TEXT NOT NULL,
  balance_type TEXT NOT NULL CHECK (balance_type IN ('debit', 'credit')),
  is_active INTEGER NOT NULL DEFAULT 1,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS third_parties (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  code TEXT NOT NULL UNIQUE,
  name TEXT NOT NULL,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS journal_entries (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  entry_number TEXT NOT NULL UNIQUE,
  date TEXT NOT NULL,
  fiscal_period_id INTEGER NOT NULL,
  reference TEXT DEFAULT '',
  description TEXT,
  third_party_id INTEGER,
  status TEXT NOT NULL DEFAULT 'draft' CHECK (status IN ('draft', 'posted', 'reversed')),
  total_debit REAL NOT NULL DEFAULT 0,
  total_credit REAL NOT NULL DEFAULT 0,
  is_adjustment INTEGER NOT NULL DEFAULT 0,
  is_recurring INTEGER NOT NULL DEFAULT 0,
  source_document_type TEXT,
  source_document_id INTEGER,
  created_by INTEGER,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  posted_by INTEGER,
  posted_at TEXT,
  reversed_by INTEGER,
  reversed_at TEXT,
  reversal_reason TEXT,
  reversal_entry_id INTEGER,
  FOREIGN KEY (fiscal_period_id) REFERENCES fiscal_periods(id),
  FOREIGN KEY (third_party_id) REFERENCES third_parties(id)
);

CREATE INDEX IF NOT EXISTS idx_journal_entries_date ON journal_entries(date);
CREATE INDEX IF NOT EXISTS idx_journal_entries_period ON journal_entries(fiscal_period_id);
CREATE INDEX IF NOT EXISTS idx_journal_entries_source
  ON journal_entries(source_document_type, source_document_id);

CREATE TABLE IF NOT EXISTS journal_entry_lines (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  journal_entry_id INTEGER NOT NULL,
  account_id INTEGER NOT NULL,
  third_party_id INTEGER,
  description TEXT DEFAULT '',
  debit_amount REAL NOT NULL DEFAULT 0,
  credit_amount REAL NOT NULL DEFAULT 0,
  order_number INTEGER NOT NULL,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  CHECK (debit_amount >= 0 AND credit_amount >= 0),
  FOREIGN KEY (journal_entry_id) REFERENCES journal_entries(id) ON DELETE CASCADE,
  FOREIGN KEY (account_id) REFERENCES accounts(id),
  FOREIGN KEY (third_party_id) REFERENCES third_parties(id)
);

CREATE INDEX IF NOT EXISTS idx_journal_entry_lines_entry
  ON journal_entry_lines(journal_entry_id, order_number);

CREATE TABLE IF NOT EXISTS account_balances (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  account_id INTEGER NOT NULL,
  fiscal_period_id INTEGER NOT NULL,
  debit_balance REAL NOT NULL DEFAULT 0,
  credit_balance REAL NOT NULL DEFAULT 0,
  updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
  UNIQUE (account_id, fiscal_period_id),
  FOREIGN KEY (account_id) REFERENCES accounts(id),
  FOREIGN KEY (fiscal_period_id) REFERENCES fiscal_periods(id)
);

CREATE TABLE IF NOT EXISTS voucher_types (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  code TEXT NOT NULL UNIQUE,
  name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS accounting_vouchers (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  voucher_number TEXT NOT NULL UNIQUE,
  voucher_type_id INTEGER NOT NULL,
  date TEXT NOT NULL,
  description TEXT,
  reference TEXT,
  third_party_id INTEGER,
  fiscal_period_id INTEGER NOT NULL,
  currency_id INTEGER,
  exchange_rate REAL NOT NULL DEFAULT 1,
  total_debit REAL NOT NULL DEFAULT 0,
  total_credit REAL NOT NULL DEFAULT 0,
  total_amount REAL NOT NULL DEFAULT 0,
  status TEXT NOT NULL DEFAULT 'DRAFT'
    CHECK (status IN ('DRAFT', 'VALIDATED', 'APPROVED', 'CANCELLED')),
  journal_entry_id INTEGER,
  reversal_journal_entry_id INTEGER,
  created_by INTEGER,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  updated_by INTEGER,
  updated_at TEXT,
  validated_at TEXT,
  approved_by INTEGER,
  approved_at TEXT,
  cancelled_by INTEGER,
  cancelled_at TEXT,
  cancellation_reason TEXT,
  FOREIGN KEY (voucher_type_id) REFERENCES voucher_types(id),
  FOREIGN KEY (fiscal_period_id) REFERENCES fiscal_periods(id),
  FOREIGN KEY (third_party_id) REFERENCES third_parties(id),
  FOREIGN KEY (journal_entry_id) REFERENCES journal_entries(id),
  FOREIGN KEY (reversal_journal_entry_id) REFERENCES journal_entries(id)
);

CREATE INDEX IF NOT EXISTS idx_accounting_vouchers_date ON accounting_vouchers(date);
CREATE INDEX IF NOT EXISTS idx_accounting_vouchers_status ON accounting_vouchers(status);

CREATE TABLE IF NOT EXISTS voucher_lines (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  voucher_id INTEGER NOT NULL,
  line_number INTEGER NOT NULL,
  account_id INTEGER NOT NULL,
  third_party_id INTEGER,
  description TEXT,
  debit_amount REAL NOT NULL DEFAULT 0,
  credit_amount REAL NOT NULL DEFAULT 0,
  reference TEXT,
  CHECK (debit_amount >= 0 AND credit_amount >= 0),
  FOREIGN KEY (voucher_id) REFERENCES accounting_vouchers(id) ON DELETE CASCADE,
  FOREIGN KEY (account_id) REFERENCES accounts(id),
  FOREIGN KEY (third_party_id) REFERENCES third_parties(id)
);

CREATE INDEX IF NOT EXISTS idx_voucher_lines_voucher ON voucher_lines(voucher_id, line_number);

CREATE TABLE IF NOT EXISTS voucher_status_history (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  voucher_id INTEGER NOT NULL,
  previous_status TEXT,
  new_status TEXT NOT NULL,
  actor_id INTEGER,
  comments TEXT,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (voucher_id) REFERENCES accounting_vouchers(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS sequences (
  scope TEXT PRIMARY KEY,
  last_value INTEGER NOT NULL DEFAULT 0,
  updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS bank_accounts (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  account_number TEXT NOT NULL UNIQUE,
  name TEXT NOT NULL,
  bank_name TEXT,
  gl_account_id INTEGER NOT NULL,
  current_balance REAL NOT NULL DEFAULT 0,
  is_active INTEGER NOT NULL DEFAULT 1,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  updated_at TEXT,
  FOREIGN KEY (gl_account_id) REFERENCES accounts(id)
);

CREATE TABLE IF NOT EXISTS bank_transactions (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  bank_account_id INTEGER NOT NULL,
  transaction_type TEXT NOT NULL,
  reference_number TEXT,
  date TEXT NOT NULL,
  description TEXT DEFAULT '',
  amount REAL NOT NULL,
  running_balance REAL NOT NULL DEFAULT 0,
  status TEXT NOT NULL DEFAULT 'cleared',
  document_type TEXT,
  document_id INTEGER,
  third_party_id INTEGER,
  journal_entry_id INTEGER,
  created_by INTEGER,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  voided_by INTEGER,
  voided_at TEXT,
  void_reason TEXT,
  FOREIGN KEY (bank_account_id) REFERENCES bank_accounts(id),
  FOREIGN KEY (journal_entry_id) REFERENCES journal_entries(id)
);

CREATE INDEX IF NOT EXISTS idx_bank_transactions_entry ON bank_transactions(journal_entry_id);
"""

DEFAULT_VOUCHER_TYPES = [
    ("CV", "Accounting voucher"),
    ("CI", "Cash receipt"),
    ("CE", "Cash disbursement"),
]


def init_db(conn: sqlite3.Connection) -> None:
    conn.executescript(SCHEMA_SQL)
    conn.executemany(
        "INSERT OR IGNORE INTO voucher_types (code, name) VALUES (?, ?)",
        DEFAULT_VOUCHER_TYPES,
    )
