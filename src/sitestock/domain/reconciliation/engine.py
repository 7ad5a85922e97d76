"""Orchestrator for the import reconciliation subsystem.

The engine composes stage interfaces but does not prescribe concrete
implementations, so tests and alternative mapping rules can swap any stage
without touching the others. It never performs I/O: the caller fetches the
snapshot and commits the resulting payload.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .deduplicate import deduplicate
from .plan import ImportPreview
from .records import DEFAULT_MAX_IMPORT_ROWS, map_records
from .resolve import reconcile

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from sitestock.domain.model import InventoryEntry

    from .deduplicate import DeduplicateRecords
    from .records import MappingResult, RawImportRow
    from .resolve import ReconcileBatch

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ReconciliationEngine:
    """Run mapping, deduplication and matching for one import."""

    map_records: Callable[..., MappingResult] = map_records
    deduplicate: DeduplicateRecords = deduplicate
    reconcile: ReconcileBatch = reconcile
    max_rows: int = DEFAULT_MAX_IMPORT_ROWS

    def preview(
        self,
        rows: Sequence[RawImportRow],
        snapshot: Sequence[InventoryEntry],
        *,
        require_price: bool,
    ) -> ImportPreview:
        """Build the reviewable plan for ``rows`` against ``snapshot``.

        Structural problems raise ``ValidationError`` before any row is mapped.
        """

        mapped = self.map_records(rows, require_price=require_price, max_rows=self.max_rows)
        batch = self.deduplicate(mapped.records)
        items = self.reconcile(batch, snapshot, require_price=require_price)
        preview = ImportPreview(
            items=items,
            invalid_rows=list(mapped.invalid_rows),
            require_price=require_price,
        )
        log.info(
            "Import preview: %s rows, %s items (%s new, %s updates), %s merged, %s invalid",
            len(rows),
            len(preview),
            len(preview.creates),
            len(preview.updates),
            preview.duplicates_merged,
            len(preview.invalid_rows),
        )
        return preview
