# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from sitestock.adapters.backend.translator import to_uuid
from sitestock.adapters.tabular import write_template
from sitestock.app import (
    add_supply,
    approve_supply_request,
    commit_import,
    list_supplies,
    list_supply_requests,
    preview_import,
    reject_supply_request,
    request_supplies,
    set_supply_price,
)
from sitestock.config import configure_logging, optional_env
from sitestock.domain.approvals import RequestLine
from sitestock.domain.errors import ValidationError
from sitestock.domain.model import DEFAULT_UNIT, Actor, Location, LocationKind, Role, TransferStatus

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType
    from uuid import UUID

    from sitestock.domain.model import InventoryEntry
    from sitestock.domain.reconciliation import CommitSummary, ImportPreview

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage site and warehouse inventories")
    parser.add_argument(
        "--actor-name",
        type=str,
        default=optional_env("SITESTOCK_ACTOR_NAME"),
        help="Name recorded on changes (default: $SITESTOCK_ACTOR_NAME)",
    )
    parser.add_argument(
        "--actor-role",
        choices=[role.value for role in Role],
        default=optional_env("SITESTOCK_ACTOR_ROLE"),
        help="Role of the acting user (default: $SITESTOCK_ACTOR_ROLE)",
    )
    parser.add_argument(
        "--actor-warehouse",
        type=str,
        default=optional_env("SITESTOCK_ACTOR_WAREHOUSE"),
        help="Warehouse a warehouse manager is assigned to",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    template = subparsers.add_parser("template", help="Write an import template")
    template.add_argument("path", type=str, help="Target .csv or .xlsx file")
    template.add_argument(
        "--with-price",
        action="store_true",
        help="Include the price column required for warehouse imports",
    )

    preview = subparsers.add_parser("preview", help="Preview a spreadsheet import")
    preview.add_argument("path", type=str, help="Spreadsheet to import (.csv or .xlsx)")
    _add_location_arguments(preview)

    import_ = subparsers.add_parser("import", help="Import a spreadsheet into an inventory")
    import_.add_argument("path", type=str, help="Spreadsheet to import (.csv or .xlsx)")
    _add_location_arguments(import_)
    import_.add_argument("--currency", type=str, help="Currency of warehouse prices")
    import_.add_argument("--yes", action="store_true", help="Commit without asking")

    supplies = subparsers.add_parser("supplies", help="List the supplies of an inventory")
    _add_location_arguments(supplies)

    add = subparsers.add_parser("add", help="Add a single supply")
    _add_location_arguments(add)
    add.add_argument("--name", type=str, required=True, help="Item name")
    add.add_argument("--quantity", type=str, required=True, help="Quantity to add")
    add.add_argument("--unit", type=str, default=DEFAULT_UNIT, help="Unit (default: %(default)s)")
    add.add_argument("--price", type=str, help="Unit price")
    add.add_argument("--currency", type=str, help="Currency of the price")

    price = subparsers.add_parser("price", help="Price a supply")
    _add_location_arguments(price)
    price.add_argument("entry_id", type=str, help="Supply id")
    price.add_argument("price", type=str, help="Unit price")
    price.add_argument("--currency", type=str, help="Currency of the price")

    request = subparsers.add_parser("request", help="Request supplies from a warehouse")
    request.add_argument("--site", type=str, required=True, help="Requesting site id")
    request.add_argument("--warehouse", type=str, required=True, help="Warehouse id")
    request.add_argument(
        "items",
        nargs="+",
        help="Requested items as NAME=QUANTITY or NAME=QUANTITY:UNIT",
    )

    requests = subparsers.add_parser("requests", help="List a warehouse's supply requests")
    requests.add_argument("--warehouse", type=str, help="Warehouse id")
    requests.add_argument(
        "--status",
        choices=[status.value for status in TransferStatus],
        help="Only show requests in this state",
    )

    approve = subparsers.add_parser("approve", help="Approve a supply request")
    approve.add_argument("request_id", type=str, help="Supply request id")
    approve.add_argument("quantity", type=str, help="Quantity to transfer")
    approve.add_argument("--warehouse", type=str, help="Warehouse id")

    reject = subparsers.add_parser("reject", help="Reject a supply request")
    reject.add_argument("request_id", type=str, help="Supply request id")
    reject.add_argument("--reason", type=str, help="Reason shown to the site")
    reject.add_argument("--warehouse", type=str, help="Warehouse id")

    return parser.parse_args(list(argv))


def _add_location_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--site", type=str, help="Site id")
    group.add_argument("--warehouse", type=str, help="Warehouse id")


def _parse_id(value: str) -> UUID:
    try:
        return to_uuid(value)
    except ValueError as exc:
        raise ValueError(f"Invalid id: {value}") from exc


def _optional_id(value: str | None) -> UUID | None:
    return _parse_id(value) if value else None


def _location(args: argparse.Namespace) -> Location:
    if args.site:
        return Location(LocationKind.SITE, _parse_id(args.site))
    return Location(LocationKind.WAREHOUSE, _parse_id(args.warehouse))


def _actor(args: argparse.Namespace) -> Actor:
    if not args.actor_name or not args.actor_role:
        raise ValueError("Missing --actor-name/--actor-role (or SITESTOCK_ACTOR_NAME/ROLE)")
    return Actor(
        name=args.actor_name,
        role=Role(args.actor_role),
        warehouse_id=_optional_id(args.actor_warehouse),
    )


def _parse_request_line(value: str) -> RequestLine:
    name, separator, amount = value.rpartition("=")
    if not separator or not name.strip():
        raise ValueError(f"Invalid item {value!r}; expected NAME=QUANTITY[:UNIT]")
    quantity, _, unit = amount.partition(":")
    return RequestLine(item_name=name.strip(), quantity=quantity.strip(), unit=unit or DEFAULT_UNIT)


def _print_preview(preview: ImportPreview) -> None:
    print(f"{len(preview.creates)} new, {len(preview.updates)} updates")
    for item in preview:
        batch = item.batch_item
        line = f"  [{item.action.value}] {batch.display_name}: +{batch.quantity} {batch.unit}"
        if item.matched_entry is not None:
            line += f" ({item.existing_quantity} -> {item.resulting_quantity})"
        if batch.unit_price is not None:
            line += f" @ {batch.unit_price}"
        if item.name_variation_note:
            line += f"  {item.name_variation_note}"
        if item.needs_pricing:
            line += "  [needs pricing]"
        print(line)
    if preview.duplicates_merged:
        print(f"{preview.duplicates_merged} duplicate rows merged")
    for error in preview.invalid_rows:
        print(f"  row {error.row}: {error.reason}")


def _print_summary(summary: CommitSummary) -> None:
    print(summary.message)
    for error in summary.errors:
        row = f"row {error.row}, " if error.row is not None else ""
        print(f"  {row}{error.item_name}: {error.reason}")
    if summary.needs_pricing:
        print(f"{summary.needs_pricing} items need pricing")


def _print_supplies(entries: Sequence[InventoryEntry]) -> None:
    for entry in entries:
        price = entry.effective_price
        priced = f"{entry.currency or ''}{price}" if price is not None else "-"
        print(
            f"{entry.id}  {entry.display_name}: {entry.quantity} {entry.unit}"
            f"  {priced}  [{entry.status.value}]"
        )


def _confirm(prompt: str, *, reader: Callable[[str], str] = input) -> bool:
    return reader(f"{prompt} [y/N] ").strip().lower() in {"y", "yes"}


def _run(args: argparse.Namespace) -> None:  # noqa: C901, PLR0912
    if args.command == "template":
        written = write_template(args.path, require_price=args.with_price)
        print(f"Template written to {written}")
        return
    if args.command == "preview":
        _print_preview(preview_import(args.path, _location(args)))
        return
    if args.command == "requests":
        status = TransferStatus(args.status) if args.status else None
        for request in list_supply_requests(
            warehouse_id=_optional_id(args.warehouse), status=status
        ):
            print(
                f"{request.id}  {request.item_name}: {request.requested_quantity} {request.unit}"
                f"  [{request.status.value}]"
            )
        return

    actor = _actor(args)
    if args.command == "import":
        location = _location(args)
        preview = preview_import(args.path, location)
        _print_preview(preview)
        if preview.is_empty:
            raise ValidationError("No valid items to import")
        if not args.yes and not _confirm("Commit this import?"):
            log.info("Import cancelled")
            return
        _print_summary(commit_import(preview, location, actor=actor, currency=args.currency))
    elif args.command == "supplies":
        _print_supplies(list_supplies(actor, _location(args)))
    elif args.command == "add":
        entry = add_supply(
            actor,
            _location(args),
            name=args.name,
            quantity=args.quantity,
            unit=args.unit,
            price=args.price,
            currency=args.currency,
        )
        _print_supplies([entry])
    elif args.command == "price":
        change = set_supply_price(
            actor,
            _location(args),
            _parse_id(args.entry_id),
            args.price,
            currency=args.currency,
        )
        _print_supplies([change.entry])
    elif args.command == "request":
        created = request_supplies(
            actor,
            site_id=_parse_id(args.site),
            warehouse_id=_parse_id(args.warehouse),
            lines=[_parse_request_line(item) for item in args.items],
        )
        print(f"Requested {len(created)} items")
    elif args.command == "approve":
        outcome = approve_supply_request(
            actor,
            _parse_id(args.request_id),
            args.quantity,
            warehouse_id=_optional_id(args.warehouse),
        )
        verb = "already approved" if outcome.already_resolved else "approved"
        print(f"Request {outcome.request.id} {verb}")
    elif args.command == "reject":
        outcome = reject_supply_request(
            actor,
            _parse_id(args.request_id),
            args.reason,
            warehouse_id=_optional_id(args.warehouse),
        )
        verb = "already rejected" if outcome.already_resolved else "rejected"
        print(f"Request {outcome.request.id} {verb}: {outcome.request.reason}")
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        _run(parsed_args)
    except ValueError as exc:
        log.error("Invalid input: %s", exc)  # noqa: TRY400
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def cli() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    cli()
