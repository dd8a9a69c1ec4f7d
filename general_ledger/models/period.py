#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Fiscal period model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class FiscalPeriod:
    id: int
    name: str
    start_date: str
    end_date: str
    status: str = "open"
    is_closed: bool = False
    fiscal_year_id: int | None = None
