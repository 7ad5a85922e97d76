"""Shared fixtures for inventory backend adapter tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from sitestock.adapters.backend import BackendGateway
from sitestock.config.backend import BackendConfig
from tests.helpers.backend import BASE_URL, make_client_factory, resilience_config

if TYPE_CHECKING:
    from collections.abc import Callable

    from tests.helpers.backend import Handler


@pytest.fixture
def backend_config() -> BackendConfig:
    return BackendConfig(
        base_url=BASE_URL,
        token="secret-token",
        resilience=resilience_config(),
    )


@pytest.fixture
def make_gateway(backend_config: BackendConfig) -> Callable[[Handler], BackendGateway]:
    def build(handler: Handler) -> BackendGateway:
        return BackendGateway(config=backend_config, client_factory=make_client_factory(handler))

    return build
