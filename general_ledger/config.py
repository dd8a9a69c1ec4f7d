#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Ledger configuration loaded from ``data/ledger_config.json``."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from general_ledger.utils import LedgerError


DEFAULT_CONFIG: Dict[str, Any] = {
    "balance_tolerance": 0.01,
    "default_entry_type": "JE",
    "voucher_entry_type": "JE",
    "reversal_prefix": "CANC",
    "voucher_prefix": "CV",
    "db_path": "./ledger.db",
    "log_level": "INFO",
    "bank_notifier": {"enabled": True, "max_attempts": 1},
}

CONFIG_ENV_VAR = "GL_CONFIG"


def default_config_path() -> Path:
    return Path(__file__).resolve().parents[1] / "data" / "ledger_config.json"


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Merge the JSON config file over ``DEFAULT_CONFIG``.

    Lookup order: explicit ``path``, ``$GL_CONFIG``, ``data/ledger_config.json``.
    A missing file yields the defaults.
    """
    config_path = Path(path or os.environ.get(CONFIG_ENV_VAR) or default_config_path())
    merged = dict(DEFAULT_CONFIG)
    merged["bank_notifier"] = dict(DEFAULT_CONFIG["bank_notifier"])
    if not config_path.exists():
        return merged
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise LedgerError("CONFIG_INVALID", f"Invalid ledger config JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise LedgerError("CONFIG_INVALID", "Ledger config must be a JSON object")

    notifier = data.pop("bank_notifier", None)
    merged.update(data)
    if isinstance(notifier, dict):
        merged["bank_notifier"].update(notifier)
    merged["balance_tolerance"] = float(merged["balance_tolerance"])
    merged["bank_notifier"]["max_attempts"] = max(
        1, int(merged["bank_notifier"].get("max_attempts") or 1)
    )
    return merged
