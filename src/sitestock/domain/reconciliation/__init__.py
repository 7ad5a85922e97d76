"""Import reconciliation core for bulk supply spreadsheets.

Layered flow:
1) map decoded rows onto canonical records (``records``)
2) collapse same-identity records of one batch (``deduplicate``)
3) match batch items against the inventory snapshot (``resolve``)
4) hand the reviewable plan to a gateway for commit (``plan``)
"""

from __future__ import annotations

from .deduplicate import BatchItem, deduplicate
from .engine import ReconciliationEngine
from .normalize import PLURAL_RULES, NormalizedKey, SuffixRule, normalize
from .plan import (
    BulkUpsertItem,
    CommitSummary,
    CommittedItem,
    ImportPreview,
    ReconciliationPlanItem,
)
from .records import (
    COLUMN_ALIASES,
    CanonicalRecord,
    ColumnFamily,
    MappingResult,
    RawImportRow,
    map_records,
    required_families,
)
from .resolve import reconcile

__all__ = [
    "COLUMN_ALIASES",
    "PLURAL_RULES",
    "BatchItem",
    "BulkUpsertItem",
    "CanonicalRecord",
    "ColumnFamily",
    "CommitSummary",
    "CommittedItem",
    "ImportPreview",
    "MappingResult",
    "NormalizedKey",
    "RawImportRow",
    "ReconciliationEngine",
    "ReconciliationPlanItem",
    "SuffixRule",
    "deduplicate",
    "map_records",
    "normalize",
    "reconcile",
    "required_families",
]
