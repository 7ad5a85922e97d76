from __future__ import annotations

import pytest

from sitestock.domain.approvals import (
    can_create_supply,
    can_edit_details,
    can_request_supplies,
    can_resolve_transfer,
    can_set_price,
    ensure,
    manages_warehouse,
)
from sitestock.domain.errors import ApprovalError, AuthorizationError
from sitestock.domain.model import Role
from tests.helpers.inventory import (
    OTHER_WAREHOUSE_ID,
    SITE,
    WAREHOUSE,
    WAREHOUSE_ID,
    admin,
    make_actor,
    make_request,
    supervisor,
    warehouse_manager,
)


def test_site_pricing_is_reserved_for_admins() -> None:
    assert can_set_price(admin(), SITE)
    assert can_set_price(admin())
    assert not can_set_price(supervisor(), SITE)
    assert not can_set_price(warehouse_manager(), SITE)
    assert not can_set_price(make_actor(Role.STAFF), SITE)


def test_site_details_are_edited_by_supervisors_only() -> None:
    assert can_edit_details(supervisor(), SITE)
    assert can_edit_details(supervisor())
    assert not can_edit_details(admin(), SITE)
    assert not can_edit_details(warehouse_manager(), SITE)


def test_warehouse_stock_is_run_by_its_managers() -> None:
    own = warehouse_manager()
    other = warehouse_manager(OTHER_WAREHOUSE_ID)

    assert can_set_price(own, WAREHOUSE)
    assert can_edit_details(own, WAREHOUSE)
    assert can_create_supply(own, WAREHOUSE)
    assert not can_set_price(other, WAREHOUSE)
    assert not can_create_supply(other, WAREHOUSE)
    assert not can_create_supply(supervisor(), WAREHOUSE)
    assert can_create_supply(admin(), WAREHOUSE)


def test_site_supplies_are_added_by_supervisors_and_admins() -> None:
    assert can_create_supply(supervisor(), SITE)
    assert can_create_supply(admin(), SITE)
    assert not can_create_supply(warehouse_manager(), SITE)
    assert not can_create_supply(make_actor(Role.STAFF), SITE)


def test_unscoped_manager_manages_every_warehouse() -> None:
    unscoped = warehouse_manager(None)

    assert manages_warehouse(unscoped, WAREHOUSE_ID)
    assert manages_warehouse(unscoped, OTHER_WAREHOUSE_ID)
    assert not manages_warehouse(admin(), WAREHOUSE_ID)


def test_transfers_are_requested_by_supervisors_and_resolved_by_managers() -> None:
    request = make_request()

    assert can_request_supplies(supervisor())
    assert not can_request_supplies(warehouse_manager())
    assert can_resolve_transfer(warehouse_manager(), request)
    assert not can_resolve_transfer(warehouse_manager(OTHER_WAREHOUSE_ID), request)
    assert not can_resolve_transfer(admin(), request)


def test_ensure_raises_authorization_error() -> None:
    ensure(True, admin(), "price supplies")  # noqa: FBT003

    with pytest.raises(AuthorizationError, match="may not price supplies") as excinfo:
        ensure(False, supervisor(), "price supplies")  # noqa: FBT003
    assert isinstance(excinfo.value, ApprovalError)
