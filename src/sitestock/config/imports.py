"""Bulk import settings."""

from __future__ import annotations

from dataclasses import dataclass

from sitestock.domain.model import DEFAULT_CURRENCY
from sitestock.domain.reconciliation.records import DEFAULT_MAX_IMPORT_ROWS

from .env import optional_env, positive_int_env


@dataclass(frozen=True, slots=True)
class ImportSettings:
    max_rows: int = DEFAULT_MAX_IMPORT_ROWS
    default_currency: str = DEFAULT_CURRENCY


def get_import_settings() -> ImportSettings:
    return ImportSettings(
        max_rows=positive_int_env("SITESTOCK_MAX_IMPORT_ROWS", DEFAULT_MAX_IMPORT_ROWS),
        default_currency=optional_env("SITESTOCK_DEFAULT_CURRENCY") or DEFAULT_CURRENCY,
    )
