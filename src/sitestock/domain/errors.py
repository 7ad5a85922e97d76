"""Error taxonomy of the reconciliation and approval core.

Exceptions abort the current operation. Row and commit problems are not
exceptions: they are collected as ``RowError`` / ``CommitError`` records so a
batch can still go through.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class ValidationError(ValueError):
    """Raised when an import is structurally unusable and must be aborted."""


class MissingColumnsError(ValidationError):
    """Raised when the header row lacks one or more required column families."""

    def __init__(
        self,
        missing_columns: Sequence[str],
        *,
        found_columns: Sequence[str] = (),
    ) -> None:
        self.missing_columns = list(missing_columns)
        self.found_columns = list(found_columns)
        message = f"Missing required columns: {', '.join(self.missing_columns)}"
        if self.found_columns:
            message += f" (found: {', '.join(self.found_columns)})"
        super().__init__(message)


class EmptyImportError(ValidationError):
    """Raised when an import carries no data rows."""

    def __init__(self) -> None:
        super().__init__("The file appears to be empty or has no data rows")


class ImportTooLargeError(ValidationError):
    """Raised when an import exceeds the configured row limit."""

    def __init__(self, *, rows: int, max_rows: int) -> None:
        self.rows = rows
        self.max_rows = max_rows
        super().__init__(f"Too many items ({rows}). Maximum {max_rows} items allowed per import")


class ReconciliationError(AssertionError):
    """Raised when a reconciliation plan breaks its own invariants."""


class NotFoundError(LookupError):
    """Raised by gateways when an entry or request does not exist."""


class ApprovalError(RuntimeError):
    """Base class for rejected pricing/transfer transitions."""


class AuthorizationError(ApprovalError):
    """Raised when an actor's role does not allow a transition."""


class InvalidTransitionError(ApprovalError):
    """Raised when a transition is not allowed from the current state."""


class InvalidQuantityError(ApprovalError, ValueError):
    """Raised when a quantity is missing, non-finite or out of range."""


class InvalidPriceError(ApprovalError, ValueError):
    """Raised when a price is missing, non-finite or not positive."""


class InsufficientStockError(ApprovalError):
    """Raised when a warehouse cannot cover a transfer."""


@dataclass(frozen=True, slots=True)
class RowError:
    """A skipped import row: spreadsheet row number and reason."""

    row: int
    reason: str


@dataclass(frozen=True, slots=True, kw_only=True)
class CommitError:
    """A plan item the commit could not apply."""

    item_name: str
    reason: str
    row: int | None = None
