"""Inventory REST backend adapter."""

from __future__ import annotations

from .client import BackendAPIError, BackendGateway

__all__ = ["BackendAPIError", "BackendGateway"]
