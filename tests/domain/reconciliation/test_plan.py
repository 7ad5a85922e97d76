from __future__ import annotations

from decimal import Decimal

import pytest

from sitestock.domain.errors import CommitError, ReconciliationError
from sitestock.domain.model import PlanAction
from sitestock.domain.reconciliation import (
    BatchItem,
    BulkUpsertItem,
    CommitSummary,
    CommittedItem,
    ImportPreview,
    ReconciliationPlanItem,
    normalize,
)
from tests.helpers.inventory import make_entry


def _batch_item(name: str, quantity: int, *, price: str | None = None) -> BatchItem:
    return BatchItem(
        display_name=name,
        quantity=Decimal(quantity),
        unit="bags",
        normalized_key=normalize(name),
        unit_price=Decimal(price) if price is not None else None,
    )


def test_update_requires_a_matched_entry() -> None:
    with pytest.raises(ReconciliationError):
        ReconciliationPlanItem(
            batch_item=_batch_item("Cement", 5),
            action=PlanAction.UPDATE,
            resulting_quantity=Decimal(5),
        )


def test_create_must_not_carry_a_matched_entry() -> None:
    with pytest.raises(ReconciliationError):
        ReconciliationPlanItem(
            batch_item=_batch_item("Cement", 5),
            action=PlanAction.CREATE,
            resulting_quantity=Decimal(25),
            matched_entry=make_entry("Cement", 20),
        )


def test_resulting_quantity_must_be_existing_plus_imported() -> None:
    with pytest.raises(ReconciliationError):
        ReconciliationPlanItem(
            batch_item=_batch_item("Cement", 5),
            action=PlanAction.UPDATE,
            resulting_quantity=Decimal(5),
            matched_entry=make_entry("Cement", 20),
        )


def test_bulk_payload_sends_deltas_and_prices_only_when_required() -> None:
    update = ReconciliationPlanItem(
        batch_item=_batch_item("cement bag", 10, price="350"),
        action=PlanAction.UPDATE,
        resulting_quantity=Decimal(30),
        matched_entry=make_entry("Cement Bags", 20),
    )
    create = ReconciliationPlanItem(
        batch_item=_batch_item("Gravel", 4),
        action=PlanAction.CREATE,
        resulting_quantity=Decimal(4),
    )

    priced = ImportPreview(items=[update, create], require_price=True)
    unpriced = ImportPreview(items=[update, create], require_price=False)

    assert priced.bulk_payload() == [
        BulkUpsertItem(
            item_name="cement bag",
            quantity=Decimal(10),
            unit="bags",
            unit_price=Decimal(350),
        ),
        BulkUpsertItem(item_name="Gravel", quantity=Decimal(4), unit="bags"),
    ]
    assert [item.unit_price for item in unpriced.bulk_payload()] == [None, None]
    assert priced.creates == [create]
    assert priced.updates == [update]
    assert not priced.is_empty
    assert ImportPreview().is_empty


def test_commit_summary_message_mentions_merges_only_when_present() -> None:
    summary = CommitSummary(
        created=[CommittedItem(item_name="Gravel", quantity=Decimal(4), unit="bags")],
        updated=[],
        errors=[CommitError(item_name="Sand", reason="Missing item name")],
    )

    assert summary.message == "Import completed: 1 created, 0 updated, 1 errors"
    assert not summary.ok

    summary.duplicates_merged = 2
    assert summary.message == (
        "Import completed: 1 created, 0 updated, 2 duplicates merged, 1 errors"
    )
    assert CommitSummary().ok
